from disc_insights.errors import CompletionError, MalformedAnalysisError, RateLimitedError


def test_rate_limited_error_message_and_floor():
    error = RateLimitedError(42)
    assert error.retry_after == 42
    assert error.code == "AI_429"
    assert "42 segundos" in error.message

    assert RateLimitedError(0).retry_after == 1
    assert RateLimitedError(5, message="custom").message == "custom"


def test_error_codes():
    assert CompletionError().code == "AI_001"
    assert MalformedAnalysisError().code == "AI_002"
