from types import SimpleNamespace
from uuid import uuid4

from chattalyst_api.services.agent_service import build_channel_config, load_agent_channel
from chattalyst_api.services.state_machine import DEFAULT_ERROR_MESSAGE, ActivationMode


def make_channel(**overrides):
    values = {
        "activation_mode": "always_on",
        "keyword_trigger": None,
        "stop_keywords": ["stop", "bye"],
        "session_timeout_minutes": 30,
        "error_message": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestBuildChannelConfig:
    def test_maps_fields(self):
        agent = SimpleNamespace(id=uuid4(), commands={"/price": "From RM10"})

        config = build_channel_config(make_channel(), agent)

        assert config.agent_id == agent.id
        assert config.activation_mode == ActivationMode.ALWAYS_ON
        assert config.stop_keywords == ["stop", "bye"]
        assert config.session_timeout_minutes == 30
        assert config.commands == {"/price": "From RM10"}
        assert config.error_message == DEFAULT_ERROR_MESSAGE

    def test_defaults_for_missing_values(self):
        agent = SimpleNamespace(id=uuid4(), commands=None)

        config = build_channel_config(
            make_channel(activation_mode=None, stop_keywords=None, session_timeout_minutes=None), agent
        )

        assert config.activation_mode == ActivationMode.KEYWORD
        assert config.stop_keywords == []
        assert config.session_timeout_minutes == 60
        assert config.commands == {}

    def test_channel_error_message_kept(self):
        agent = SimpleNamespace(id=uuid4(), commands={})

        config = build_channel_config(make_channel(error_message="We'll call you back."), agent)

        assert config.error_message == "We'll call you back."

    def test_unknown_activation_mode_is_keyword(self):
        agent = SimpleNamespace(id=uuid4(), commands={})

        config = build_channel_config(make_channel(activation_mode="sometimes"), agent)

        assert config.activation_mode == ActivationMode.KEYWORD


class TestLoadAgentChannel:
    def test_no_enabled_agent(self, db_session, make_query):
        db_session.query.return_value = make_query(first=None)

        assert load_agent_channel(db_session, uuid4()) is None

    def test_returns_config(self, db_session, make_query):
        agent = SimpleNamespace(id=uuid4(), commands={})
        channel = make_channel(agent=agent)
        db_session.query.return_value = make_query(first=channel)

        config = load_agent_channel(db_session, uuid4())

        assert config.agent_id == agent.id
