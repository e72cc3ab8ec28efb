"""Per-statement directives carried in magic comments.

A magic comment is a single-line comment whose text starts with ``set``::

    -- set consistency_level=QUORUM; fetch_size=500
    // set no_limit=true
    SELECT * FROM events

All such lines are honored in document order; a key repeated on a later
line overwrites the earlier value.
"""

import re
from types import MappingProxyType
from typing import Dict, Mapping

KEY_CONSISTENCY_LEVEL = "consistency_level"
KEY_FETCH_SIZE = "fetch_size"
KEY_NO_LIMIT = "no_limit"
KEY_NO_WAIT = "no_wait"
KEY_READ_TIMEOUT = "read_timeout"
KEY_REPLACE_NULL_VALUE = "replace_null_value"
KEY_SQL_PARSER = "sql_parser"
KEY_TRACING = "tracing"

KNOWN_OPTIONS = (
    KEY_CONSISTENCY_LEVEL,
    KEY_FETCH_SIZE,
    KEY_NO_LIMIT,
    KEY_NO_WAIT,
    KEY_READ_TIMEOUT,
    KEY_REPLACE_NULL_VALUE,
    KEY_SQL_PARSER,
    KEY_TRACING,
)

MAGIC_COMMENT_PATTERN = re.compile(r"^\s*(?://|--)\s*set\s+(.*)$", re.IGNORECASE | re.MULTILINE)


def extract_options(text: str) -> Mapping[str, str]:
    """Collect ``key=value`` directives from magic comments.

    Keys are lower-cased, keys and values trimmed. Fragments without ``=``
    or with an empty key are skipped. Never raises.
    """
    options: Dict[str, str] = {}
    if not text:
        return MappingProxyType(options)

    for match in MAGIC_COMMENT_PATTERN.finditer(text):
        for fragment in match.group(1).split(";"):
            fragment = fragment.strip()
            if not fragment:
                continue
            key, separator, value = fragment.partition("=")
            key = key.strip().lower()
            if not separator or not key:
                continue
            options[key] = value.strip()

    return MappingProxyType(options)
