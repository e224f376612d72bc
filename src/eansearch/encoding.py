"""Query string encoding in the form expected by api.ean-search.org."""

import string
from collections.abc import Mapping
from typing import Any

_KEEP = frozenset((string.ascii_letters + string.digits + " ").encode("ascii"))


def form_encode(value: Any) -> str:
    """Percent-encode *value* for use in a query string.

    ASCII letters, digits and spaces are left alone, every other UTF-8 byte
    becomes ``%XX``, and spaces are finally turned into ``+``.  Other
    whitespace (tabs, newlines) is escaped since it is not legal in a URL.
    """
    raw = str(value).encode("utf-8")
    encoded = "".join(chr(b) if b in _KEEP else f"%{b:02X}" for b in raw)
    return encoded.replace(" ", "+")


def build_query(params: Mapping[str, Any]) -> str:
    """Join *params* into ``key=value&...``, skipping ``None`` values."""
    return "&".join(f"{key}={form_encode(value)}" for key, value in params.items() if value is not None)
