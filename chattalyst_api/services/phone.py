import re
from typing import Optional

_STRIP_RE = re.compile(r"[\s\-().]")


def jid_user(remote_jid: str) -> str:
    """Return the user part of a WhatsApp JID (``60123@s.whatsapp.net`` -> ``60123``)."""
    return (remote_jid or "").split("@", 1)[0].split(":", 1)[0]


def is_group_jid(remote_jid: str, group_suffix: str = "@g.us") -> bool:
    return group_suffix in (remote_jid or "")


def canonicalize_phone(raw: str, country_code: str) -> str:
    """Normalize a phone identifier to ``+<country code><subscriber>``.

    Values already starting with ``+`` are returned unchanged (minus the JID
    domain and separators). Otherwise the country code is prefixed; digits
    that already begin with the country code only get the ``+``, and a
    leading trunk ``0`` is replaced by the country code.
    """
    value = _STRIP_RE.sub("", jid_user(raw))
    if not value:
        return value
    if value.startswith("+"):
        return value

    cc = country_code if country_code.startswith("+") else f"+{country_code}"
    cc_digits = cc[1:]
    if cc_digits and value.startswith(cc_digits):
        return f"+{value}"
    if value.startswith("0"):
        return f"{cc}{value[1:]}"
    return f"{cc}{value}"


def effective_country_code(config_country_code: Optional[str], default: str) -> str:
    return (config_country_code or "").strip() or default
