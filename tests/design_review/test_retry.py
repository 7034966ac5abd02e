import pytest


def test_retry_config_clamps_values():
    from design_review._retry import RetryConfig

    cfg = RetryConfig(max_retries=-3, base_delay_s=-1.0, max_delay_s=-5.0)

    assert cfg.max_retries == 0
    assert cfg.base_delay_s == 0.0
    assert cfg.max_delay_s == 0.0


def test_retry_config_max_attempts_alias():
    from design_review._retry import RetryConfig

    assert RetryConfig(max_attempts=3).max_retries == 2
    assert RetryConfig(max_attempts=0).max_retries == 0


def test_retry_config_clamps_max_delay_to_base_delay():
    from design_review._retry import RetryConfig

    cfg = RetryConfig(base_delay_s=5.0, max_delay_s=1.0)
    assert cfg.max_delay_s == 5.0


def test_is_retryable_transport_error_defaults():
    from design_review._retry import is_retryable_transport_error
    from design_review.llm.errors import TransportError, TransportErrorKind

    def err(kind):
        return TransportError(kind, "x")

    assert is_retryable_transport_error(err(TransportErrorKind.RATE_LIMITED)) is True
    assert is_retryable_transport_error(err(TransportErrorKind.TIMEOUT)) is True
    assert is_retryable_transport_error(err(TransportErrorKind.AUTH)) is False
    assert is_retryable_transport_error(err(TransportErrorKind.NETWORK)) is False


def test_is_retryable_transport_error_custom_kinds():
    from design_review._retry import RetryConfig, is_retryable_transport_error
    from design_review.llm.errors import TransportError, TransportErrorKind

    retry = RetryConfig(retryable_kinds=frozenset({TransportErrorKind.NETWORK}))

    assert is_retryable_transport_error(
        TransportError(TransportErrorKind.NETWORK, "reset"), retry
    )
    assert not is_retryable_transport_error(
        TransportError(TransportErrorKind.TIMEOUT, "slow"), retry
    )


def test_backoff_delay_is_exponential_and_capped(monkeypatch):
    from design_review._retry import RetryConfig, backoff_delay

    monkeypatch.setattr("design_review._retry.random.random", lambda: 0.5)
    retry = RetryConfig(base_delay_s=1.0, max_delay_s=3.0)

    assert [backoff_delay(n, retry) for n in (1, 2, 3, 4)] == pytest.approx(
        [1.0, 2.0, 3.0, 3.0]
    )


def test_backoff_delay_jitter_range(monkeypatch):
    from design_review._retry import RetryConfig, backoff_delay

    retry = RetryConfig(base_delay_s=2.0, max_delay_s=60.0)

    monkeypatch.setattr("design_review._retry.random.random", lambda: 0.0)
    assert backoff_delay(1, retry) == pytest.approx(1.4)

    monkeypatch.setattr("design_review._retry.random.random", lambda: 1.0)
    assert backoff_delay(1, retry) == pytest.approx(2.6)
