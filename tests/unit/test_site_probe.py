"""Tests for the site reachability probe."""

from unittest.mock import Mock, patch

import pytest
import requests

from carwale_e2e.transport import RetryPolicy, SiteProbe, no_retry_policy


def response(status_code: int, **headers: str) -> Mock:
    return Mock(status_code=status_code, headers=headers)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def probe(sleeps: list[float]) -> SiteProbe:
    return SiteProbe(retry_policy=RetryPolicy(max_retries=2, initial_delay=0.5), sleep=sleeps.append)


def test_retry_policy_backoff_is_capped() -> None:
    policy = RetryPolicy(initial_delay=1.0, backoff_factor=2.0, max_delay=3.0)

    assert [policy.get_delay(n) for n in range(4)] == [1.0, 2.0, 3.0, 3.0]


def test_reachable_site(probe: SiteProbe, sleeps: list[float]) -> None:
    with patch.object(probe._session, "get", return_value=response(200)) as get:
        result = probe.probe("https://www.carwale.com")

    assert result.reachable
    assert result.status_code == 200
    assert result.attempts == 1
    assert sleeps == []
    get.assert_called_once()
    assert str(result).startswith("https://www.carwale.com reachable (HTTP 200")


def test_client_errors_still_count_as_reachable(probe: SiteProbe) -> None:
    with patch.object(probe._session, "get", return_value=response(404)):
        result = probe.probe("https://www.carwale.com/missing")

    assert result.reachable
    assert result.status_code == 404


def test_server_errors_are_retried(probe: SiteProbe, sleeps: list[float]) -> None:
    with patch.object(probe._session, "get", side_effect=[response(503), response(502), response(200)]):
        result = probe.probe("https://www.carwale.com")

    assert result.reachable
    assert result.attempts == 3
    assert sleeps == [0.5, 1.0]


def test_connection_errors_are_reported(probe: SiteProbe, sleeps: list[float]) -> None:
    with patch.object(probe._session, "get", side_effect=requests.ConnectionError("refused")):
        result = probe.probe("https://www.carwale.com")

    assert not result.reachable
    assert result.attempts == 3
    assert result.error == "Connection failed: refused"
    assert len(sleeps) == 2
    assert "unreachable" in str(result)


def test_timeouts_are_reported() -> None:
    probe = SiteProbe(retry_policy=no_retry_policy(), request_timeout=2.0)
    with patch.object(probe._session, "get", side_effect=requests.Timeout()):
        result = probe.probe("https://www.carwale.com")

    assert not result.reachable
    assert result.attempts == 1
    assert result.error == "Timed out after 2.0s"


def test_retry_policy_classifies_answers() -> None:
    policy = RetryPolicy()

    assert policy.is_available(200)
    assert policy.is_available(404)
    assert not policy.is_available(429)
    assert not policy.is_available(501)
    assert policy.should_retry(0, status_code=503)
    assert policy.should_retry(0, status_code=429)
    assert not policy.should_retry(0, status_code=501)
    assert not policy.should_retry(2, status_code=503)


def test_retry_policy_classifies_errors() -> None:
    policy = RetryPolicy(retry_on_timeout=False)

    assert policy.should_retry(0, error=requests.ConnectionError("refused"))
    assert policy.should_retry(0, error=requests.ConnectTimeout("slow handshake"))
    assert not policy.should_retry(0, error=requests.ReadTimeout("slow body"))


def test_retry_after_header_overrides_backoff() -> None:
    policy = RetryPolicy(initial_delay=1.0, max_delay=5.0)

    assert policy.get_delay(0, "3") == 3.0
    assert policy.get_delay(0, "120") == 5.0
    assert policy.get_delay(1, "Wed, 21 Oct 2026 07:28:00 GMT") == 2.0


def test_non_transient_server_error_is_not_retried(probe: SiteProbe, sleeps: list[float]) -> None:
    with patch.object(probe._session, "get", side_effect=[response(501), response(200)]) as get:
        result = probe.probe("https://www.carwale.com")

    assert not result.reachable
    assert result.attempts == 1
    assert result.error == "HTTP 501"
    assert sleeps == []
    get.assert_called_once()


def test_rate_limited_probe_waits_as_told(probe: SiteProbe, sleeps: list[float]) -> None:
    with patch.object(probe._session, "get", side_effect=[response(429, **{"Retry-After": "4"}), response(200)]):
        result = probe.probe("https://www.carwale.com")

    assert result.reachable
    assert result.attempts == 2
    assert sleeps == [4.0]


def test_timeouts_not_retried_when_disabled(sleeps: list[float]) -> None:
    probe = SiteProbe(retry_policy=RetryPolicy(retry_on_timeout=False), sleep=sleeps.append)
    with patch.object(probe._session, "get", side_effect=requests.ReadTimeout()):
        result = probe.probe("https://www.carwale.com")

    assert not result.reachable
    assert result.attempts == 1
    assert sleeps == []
