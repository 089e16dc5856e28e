"""Tests for error types and codes."""

import pytest

from prcoverage.core.errors import (
    ConfigError,
    ErrorCode,
    MalformedCoverageReportError,
    MalformedDiffError,
    PlatformApiError,
    PrCoverageError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_MISSING_REQUIRED, 2000),
            (ErrorCode.MALFORMED_DIFF, 3000),
            (ErrorCode.MALFORMED_COVERAGE_REPORT, 3000),
            (ErrorCode.PLATFORM_API_ERROR, 4000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        assert expected_range <= code.value < expected_range + 1000


class TestPrCoverageError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = PrCoverageError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            retryable=True,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "retryable": True,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_includes_code_and_name(self) -> None:
        error = MalformedDiffError.at_line(4, "boom")
        assert str(error) == "[3001] MALFORMED_DIFF: Malformed diff at line 4: boom"

    def test_given_subclass_when_raised_then_caught_as_base(self) -> None:
        with pytest.raises(PrCoverageError):
            raise MalformedDiffError.at_line(3, "bad")


class TestFactories:
    """Factory classmethod tests."""

    def test_config_missing_required(self) -> None:
        error = ConfigError.missing_required("platform.token")
        assert error.code == ErrorCode.CONFIG_MISSING_REQUIRED
        assert error.details == {"field": "platform.token"}

    def test_malformed_diff_at_line(self) -> None:
        error = MalformedDiffError.at_line(12, "hunk ended early")
        assert error.message == "Malformed diff at line 12: hunk ended early"
        assert error.details["line"] == 12

    def test_malformed_coverage_report(self) -> None:
        error = MalformedCoverageReportError.invalid("clover", "missing <project> element")
        assert error.message == "Malformed clover coverage report: missing <project> element"
        assert error.details["format"] == "clover"

    def test_platform_api_error_status(self) -> None:
        error = PlatformApiError.from_response(404, "Not Found", url="/x")
        assert error.status_code == 404
        assert error.message == "(404) Not Found"
        assert error.details["url"] == "/x"
        assert not error.retryable
