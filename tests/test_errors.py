"""
Tests for the description generation error taxonomy.
"""

from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from secondlook.errors import (
    GENERIC_ERROR_MESSAGE,
    AIError,
    ErrorCode,
    create_invalid_image_error,
    create_invalid_params_error,
    create_no_image_error,
    create_openai_error,
    create_rate_limit_error,
    create_timeout_error,
    create_validation_error,
    get_user_friendly_message,
    is_ai_error,
)


class TestErrorFactories:
    """Test the create_* helpers."""

    def test_each_factory_sets_its_code(self):
        assert create_no_image_error().code == ErrorCode.NO_IMAGE
        assert create_invalid_image_error().code == ErrorCode.INVALID_IMAGE
        assert create_invalid_params_error("x").code == ErrorCode.INVALID_PARAMS
        assert create_rate_limit_error().code == ErrorCode.RATE_LIMIT
        assert create_timeout_error().code == ErrorCode.TIMEOUT
        assert create_openai_error("x").code == ErrorCode.OPENAI_ERROR
        assert create_validation_error("x").code == ErrorCode.VALIDATION_FAILED

    def test_rate_limit_message_with_retry_after(self):
        error = create_rate_limit_error(retry_after=12)
        assert error.message == "Rate limit exceeded. Retry after 12 seconds."

    def test_rate_limit_message_without_retry_after(self):
        error = create_rate_limit_error()
        assert error.message == "Rate limit exceeded. Please try again later."

    def test_timeout_message(self):
        assert create_timeout_error(30).message == "Request timed out after 30 seconds"
        assert create_timeout_error(2.5).message == "Request timed out after 2.5 seconds"

    def test_str_includes_code_and_message(self):
        error = create_invalid_params_error("Invalid category: CARS")
        assert str(error) == "INVALID_PARAMS: Invalid category: CARS"

    def test_errors_are_immutable(self):
        error = create_no_image_error()
        with pytest.raises(ValidationError):
            error.message = "changed"

    def test_unknown_code_is_rejected(self):
        with pytest.raises(ValidationError):
            AIError(code="SOMETHING_ELSE", message="nope")


class TestIsAIError:
    """Test the is_ai_error discriminant check."""

    def test_instances(self):
        assert is_ai_error(create_timeout_error()) is True

    def test_serialized_form(self):
        dumped = create_openai_error("boom").model_dump(mode="json")
        assert dumped["kind"] == "ai_error"
        assert is_ai_error(dumped) is True

    def test_object_carrying_tag_and_code(self):
        value = SimpleNamespace(kind="ai_error", code=ErrorCode.TIMEOUT)
        assert is_ai_error(value) is True

    @pytest.mark.parametrize(
        "value",
        [
            None,
            "TIMEOUT",
            42,
            ValueError("TIMEOUT"),
            {"code": "TIMEOUT"},
            {"kind": "ai_error", "code": "UNKNOWN"},
            {"kind": "ai_error", "code": None},
            {"kind": "other", "code": "TIMEOUT"},
            SimpleNamespace(code=ErrorCode.TIMEOUT),
            SimpleNamespace(kind="ai_error", code="TIMEOUT"),
        ],
    )
    def test_non_members(self, value):
        assert is_ai_error(value) is False


class TestGetUserFriendlyMessage:
    """Test translation of errors into end user messages."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            (
                ErrorCode.NO_IMAGE,
                "Please upload an image to generate a description.",
            ),
            (
                ErrorCode.INVALID_IMAGE,
                "Image could not be processed. Please upload a different photo.",
            ),
            (
                ErrorCode.INVALID_PARAMS,
                "Please choose a valid category and condition for your item.",
            ),
            (
                ErrorCode.RATE_LIMIT,
                "Too many requests. Please wait a moment and try again.",
            ),
            (ErrorCode.TIMEOUT, "Request took too long. Please try again."),
            (
                ErrorCode.OPENAI_ERROR,
                "Failed to generate description. Please try again.",
            ),
            (
                ErrorCode.VALIDATION_FAILED,
                "Generated description did not meet quality standards. "
                "Please try again.",
            ),
        ],
    )
    def test_known_codes(self, code, expected):
        assert get_user_friendly_message(AIError(code=code)) == expected

    def test_every_code_has_a_specific_message(self):
        messages = {get_user_friendly_message(AIError(code=code)) for code in ErrorCode}
        assert len(messages) == len(ErrorCode)
        assert GENERIC_ERROR_MESSAGE not in messages

    def test_serialized_error(self):
        message = get_user_friendly_message({"kind": "ai_error", "code": "TIMEOUT"})
        assert message == "Request took too long. Please try again."

    @pytest.mark.parametrize(
        "value",
        [None, "boom", 3, ValueError("boom"), {"code": "NOPE"}, {"code": ["x"]}],
    )
    def test_unknown_values_fall_back_to_generic(self, value):
        assert get_user_friendly_message(value) == GENERIC_ERROR_MESSAGE
