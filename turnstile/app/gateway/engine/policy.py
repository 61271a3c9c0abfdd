"""
Key Policy Checks

The two restrictions a proxy key can carry, evaluated after the target has
been resolved and before anything is forwarded:

    1. Allow-list   - which tools the key may call
    2. Blacklist    - words that may not appear anywhere in the request body

Both checks are pure functions. They return nothing when the request passes
and raise GatewayError when it does not.
"""

import json
from typing import Any, Optional

from app.config.constants import GatewayErrorCode
from app.core.exceptions import GatewayError


def check_allow_list(allowed_tools: Optional[list[str]], tool_name: Optional[str]) -> None:
    """Reject a tool the key is not allowed to call.

    The allow-list only applies when the request names a tool and the key
    has a non-empty list. Matching is exact.

    Raises:
        GatewayError: TOOL_NOT_ALLOWED
    """
    if not tool_name or not allowed_tools:
        return
    if tool_name not in allowed_tools:
        raise GatewayError(
            GatewayErrorCode.TOOL_NOT_ALLOWED,
            f"Tool '{tool_name}' is not allowed for this API key",
            audit_detail={"allowed_tools": list(allowed_tools)},
        )


def serialize_for_scan(body: Any) -> str:
    """Serialize a request body into the case-folded text the blacklist scans."""
    return json.dumps(body, ensure_ascii=False).casefold()


def find_blacklisted_word(
    body: Any, blacklist_words: Optional[list[str]]
) -> Optional[str]:
    """Return the first blacklisted word found in the body, if any.

    Matching is case-insensitive substring matching over the serialized
    body, so keys and values are both covered. Blank words are ignored.
    """
    if not blacklist_words:
        return None
    haystack = serialize_for_scan(body)
    for word in blacklist_words:
        if not isinstance(word, str) or not word.strip():
            continue
        if word.casefold() in haystack:
            return word
    return None


def check_blacklist(body: Any, blacklist_words: Optional[list[str]]) -> None:
    """Reject a body containing a blacklisted word.

    The offending word goes into the audit detail only. The caller just
    learns that the request was blocked.

    Raises:
        GatewayError: BLACKLIST_VIOLATION
    """
    word = find_blacklisted_word(body, blacklist_words)
    if word is not None:
        raise GatewayError(
            GatewayErrorCode.BLACKLIST_VIOLATION,
            "Request blocked by content policy",
            audit_detail={"matched_word": word},
        )
