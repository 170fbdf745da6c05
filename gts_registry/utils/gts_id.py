"""Helpers for GTS identifiers."""

import re
from typing import Any, Optional
from urllib.parse import unquote

GTS_URI_PREFIX = "gts://"

# gts.<vendor>.<package>.<namespace>.<type>.v<MAJOR>[.<MINOR>]~ chained with further segments
_GTS_ID_RE = re.compile(r"^gts\.[A-Za-z0-9_-]+(?:\.[A-Za-z0-9_-]+)*(?:~(?:[A-Za-z0-9_-]+(?:\.[A-Za-z0-9_-]+)*)?)*$")
_JSON_SCHEMA_META_RE = re.compile(r"^https?://json-schema\.org(?:/|$)")


def normalize_gts_id(value: str) -> str:
    """Strip surrounding whitespace and a leading ``gts://`` prefix."""
    value = value.strip()
    if value.startswith(GTS_URI_PREFIX):
        value = value[len(GTS_URI_PREFIX):]
    return value


def decode_gts_id(uri: str) -> str:
    """Decode a ``$ref`` URI into a normalized GTS id."""
    return normalize_gts_id(unquote(uri))


def is_gts_id(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return bool(_GTS_ID_RE.match(normalize_gts_id(value)))


def is_type_id(value: str) -> bool:
    """A type (schema) id ends with the ``~`` separator."""
    return normalize_gts_id(value).endswith("~")


def type_prefix(value: str) -> Optional[str]:
    """Return the type part of a chained instance id, up to and including the last ``~``.

    ``gts.x.core.ev.type.v1~x.app.ev.v1.0`` -> ``gts.x.core.ev.type.v1~``
    """
    value = normalize_gts_id(value)
    if is_type_id(value) or "~" not in value:
        return None
    return value[: value.rindex("~") + 1]


def is_json_schema_meta_uri(uri: str) -> bool:
    return bool(_JSON_SCHEMA_META_RE.match(uri))
