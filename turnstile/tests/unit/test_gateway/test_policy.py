"""
Unit tests for proxy key allow-list and blacklist checks.
"""

import pytest

from app.core.exceptions import GatewayError
from app.gateway.engine.policy import (
    check_allow_list,
    check_blacklist,
    find_blacklisted_word,
    serialize_for_scan,
)


class TestAllowList:
    """Test allow-list enforcement."""

    def test_empty_list_allows_everything(self):
        check_allow_list([], "delete_repo")
        check_allow_list(None, "delete_repo")

    def test_listed_tool_passes(self):
        check_allow_list(["search", "create_issue"], "create_issue")

    def test_request_without_tool_is_not_checked(self):
        check_allow_list(["search"], None)

    def test_unlisted_tool_is_rejected(self):
        with pytest.raises(GatewayError) as exc_info:
            check_allow_list(["search"], "delete_repo")

        error = exc_info.value
        assert error.error_code == "TOOL_NOT_ALLOWED"
        assert error.status_code == 403
        assert error.message == "Tool 'delete_repo' is not allowed for this API key"
        assert error.audit_detail == {"allowed_tools": ["search"]}

    def test_match_is_exact(self):
        with pytest.raises(GatewayError):
            check_allow_list(["search"], "Search")


class TestBlacklist:
    """Test blacklist scanning."""

    def test_no_words_passes(self):
        check_blacklist({"query": "anything"}, [])
        check_blacklist({"query": "anything"}, None)

    def test_case_insensitive_match_in_value(self):
        word = find_blacklisted_word({"params": {"q": "DROP table"}}, ["drop"])
        assert word == "drop"

    def test_match_in_key(self):
        """Keys are part of the scanned text too."""
        assert find_blacklisted_word({"password": "x"}, ["PASSWORD"]) == "PASSWORD"

    def test_substring_match(self):
        assert find_blacklisted_word({"q": "passwords.txt"}, ["password"]) == "password"

    def test_blank_words_are_ignored(self):
        assert find_blacklisted_word({"q": "hello world"}, ["", "   "]) is None

    def test_non_ascii_text(self):
        assert serialize_for_scan({"q": "Straße"}) == '{"q": "strasse"}'
        assert find_blacklisted_word({"q": "Straße"}, ["STRASSE"]) == "STRASSE"

    def test_violation_hides_matched_word(self):
        with pytest.raises(GatewayError) as exc_info:
            check_blacklist({"tool": "search", "q": "secret plans"}, ["secret"])

        error = exc_info.value
        assert error.error_code == "BLACKLIST_VIOLATION"
        assert error.status_code == 403
        assert "secret" not in str(error.to_dict())
        assert error.audit_detail == {"matched_word": "secret"}

    def test_first_listed_word_is_reported(self):
        body = {"q": "alpha beta"}
        assert find_blacklisted_word(body, ["beta", "alpha"]) == "beta"
