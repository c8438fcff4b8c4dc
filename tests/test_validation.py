"""Unit and property-based tests for payload validation."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from streamchat.config import MAX_INPUT_CHARS
from streamchat.errors import ChatError, ErrorKind
from streamchat.llm.models import ChatRequest, Role
from streamchat.server.validation import (
    total_input_length,
    truncate_content,
    validate_chat_payload,
)


class TestValidPayload:
    """Tests for payloads that pass validation."""

    def test_valid_payload(self, chat_payload):
        """Test that a valid payload becomes a ChatRequest."""
        result = validate_chat_payload(chat_payload)

        assert isinstance(result, ChatRequest)
        assert result.model == "gpt-5"
        assert result.temperature == 0.5
        assert result.max_tokens is None
        assert [m.role for m in result.messages] == [Role.SYSTEM, Role.USER]
        assert result.messages[1].content == "Hello"

    def test_max_tokens_used_when_number(self, chat_payload):
        chat_payload["max_tokens"] = 256
        result = validate_chat_payload(chat_payload)
        assert result.max_tokens == 256

    @pytest.mark.parametrize("value", ["0.5", True, None, [1], float("inf")])
    def test_non_number_options_are_ignored(self, chat_payload, value):
        """Test that non-numeric temperature/max_tokens are dropped, not rejected."""
        chat_payload["temperature"] = value
        chat_payload["max_tokens"] = value
        result = validate_chat_payload(chat_payload)

        assert isinstance(result, ChatRequest)
        assert result.temperature is None
        assert result.max_tokens is None

    def test_empty_message_list_is_valid(self):
        result = validate_chat_payload({"messages": [], "model": "gpt-5"})
        assert isinstance(result, ChatRequest)
        assert result.messages == []


class TestInvalidPayload:
    """Tests for InvalidPayload and InvalidMessage."""

    @pytest.mark.parametrize("body", [
        None,
        [],
        "messages",
        {"model": "gpt-5"},
        {"messages": "hi", "model": "gpt-5"},
        {"messages": [], "model": 5},
        {"messages": []},
    ])
    def test_invalid_payload(self, body):
        result = validate_chat_payload(body)

        assert isinstance(result, ChatError)
        assert result.kind == ErrorKind.INVALID_PAYLOAD
        assert result.status == 400
        assert result.message == "Invalid request payload."

    @pytest.mark.parametrize("message", [
        None,
        "hello",
        {"role": "tool", "content": "x"},
        {"role": "developer", "content": "x"},
        {"role": "user", "content": 42},
        {"role": "user", "content": None},
        {"role": "user"},
        {"role": ["user"], "content": "x"},
        {"content": "no role"},
    ])
    def test_invalid_message(self, message):
        body = {"messages": [{"role": "user", "content": "ok"}, message], "model": "gpt-5"}
        result = validate_chat_payload(body)

        assert isinstance(result, ChatError)
        assert result.kind == ErrorKind.INVALID_MESSAGE
        assert result.status == 400
        assert result.message == "Invalid message format."


class TestInputSizeGuard:
    """Tests for truncation and the total-length check."""

    def test_single_long_message_is_truncated_to_cap(self):
        """Test that one oversized message is cut to exactly the cap and passes."""
        body = {"messages": [{"role": "user", "content": "a" * (MAX_INPUT_CHARS + 5000)}], "model": "m"}
        result = validate_chat_payload(body)

        assert isinstance(result, ChatRequest)
        assert len(result.messages[0].content) == MAX_INPUT_CHARS

    def test_total_exactly_at_cap_passes(self):
        half = MAX_INPUT_CHARS // 2
        body = {
            "messages": [
                {"role": "user", "content": "a" * half},
                {"role": "assistant", "content": "b" * (MAX_INPUT_CHARS - half)},
            ],
            "model": "m",
        }
        assert isinstance(validate_chat_payload(body), ChatRequest)

    def test_total_one_over_cap_fails(self):
        half = MAX_INPUT_CHARS // 2
        body = {
            "messages": [
                {"role": "user", "content": "a" * half},
                {"role": "assistant", "content": "b" * (MAX_INPUT_CHARS - half + 1)},
            ],
            "model": "m",
        }
        result = validate_chat_payload(body)

        assert isinstance(result, ChatError)
        assert result.kind == ErrorKind.PAYLOAD_TOO_LARGE
        assert result.status == 413
        assert result.message == "Input too long. Please shorten your message."

    def test_truncate_content(self):
        assert truncate_content("abcdef", 3) == "abc"
        assert truncate_content("ab", 3) == "ab"

    @given(st.lists(st.integers(min_value=0, max_value=3 * MAX_INPUT_CHARS), max_size=6))
    def test_oversize_check_uses_truncated_lengths(self, lengths: list[int]):
        """Property test: the guard compares the sum of truncated lengths to the cap."""
        body = {
            "messages": [{"role": "user", "content": "x" * n} for n in lengths],
            "model": "m",
        }
        expected_total = sum(min(n, MAX_INPUT_CHARS) for n in lengths)
        result = validate_chat_payload(body)

        if expected_total > MAX_INPUT_CHARS:
            assert isinstance(result, ChatError)
            assert result.kind == ErrorKind.PAYLOAD_TOO_LARGE
        else:
            assert isinstance(result, ChatRequest)
            assert total_input_length(result.messages) == expected_total
