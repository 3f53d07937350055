import pytest

from chattalyst_api.services.phone import canonicalize_phone, effective_country_code, is_group_jid, jid_user


class TestJidUser:
    def test_strips_domain(self):
        assert jid_user("60123456789@s.whatsapp.net") == "60123456789"

    def test_strips_device_suffix(self):
        assert jid_user("60123456789:12@s.whatsapp.net") == "60123456789"

    def test_plain_number(self):
        assert jid_user("60123456789") == "60123456789"


class TestGroupJid:
    def test_group_detected(self):
        assert is_group_jid("120363025246125486@g.us") is True

    def test_direct_chat_not_group(self):
        assert is_group_jid("60123456789@s.whatsapp.net") is False

    def test_custom_suffix(self):
        assert is_group_jid("abc@groups.test", "@groups.test") is True


class TestCanonicalizePhone:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("+60123456789", "+60123456789"),
            ("+6591234567", "+6591234567"),
            ("60123456789", "+60123456789"),
            ("60123456789@s.whatsapp.net", "+60123456789"),
            ("123456789", "+60123456789"),
            ("0123456789", "+60123456789"),
            ("012-345 6789", "+60123456789"),
        ],
    )
    def test_default_country_code(self, raw, expected):
        assert canonicalize_phone(raw, "+60") == expected

    def test_country_code_without_plus(self):
        assert canonicalize_phone("91234567", "65") == "+6591234567"

    def test_prefixed_number_is_unchanged_whatever_the_default(self):
        assert canonicalize_phone("+14155550100", "+60") == "+14155550100"

    def test_empty_identifier(self):
        assert canonicalize_phone("", "+60") == ""


class TestEffectiveCountryCode:
    def test_config_value_wins(self):
        assert effective_country_code("+65", "+60") == "+65"

    def test_blank_config_falls_back(self):
        assert effective_country_code("  ", "+60") == "+60"
        assert effective_country_code(None, "+60") == "+60"
