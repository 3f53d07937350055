from types import SimpleNamespace

from chattalyst_api.services.integration_service import get_integration_config


class TestGetIntegrationConfig:
    def test_found_by_instance(self, db_session, make_query):
        config = SimpleNamespace(instance_display_name="chattalyst-main")
        query = make_query(first=config)
        db_session.query.return_value = query

        assert get_integration_config(db_session, "chattalyst-main") is config
        query.filter.assert_called_once()

    def test_unknown_instance(self, db_session, make_query):
        db_session.query.return_value = make_query(first=None)

        assert get_integration_config(db_session, "nope") is None
