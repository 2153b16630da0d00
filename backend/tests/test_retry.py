import logging

import httpx
import pytest

from timeline_pro.services import retry
from timeline_pro.services.retry import backoff_delay, is_transient_error, run_with_retry

logger = logging.getLogger("tests.retry")


def status_error(code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://example.com")
    return httpx.HTTPStatusError(
        f"HTTP {code}", request=request, response=httpx.Response(code, request=request)
    )


@pytest.fixture
def sleeps(monkeypatch):
    recorded: list[float] = []

    async def fake_sleep(delay):
        recorded.append(delay)

    monkeypatch.setattr(retry.asyncio, "sleep", fake_sleep)
    return recorded


class Flaky:
    """Operation that raises the queued errors before succeeding."""

    def __init__(self, *errors: Exception):
        self.errors = list(errors)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


class TestBackoff:

    def test_doubles_until_cap(self):
        assert [backoff_delay(a, 1.0, 16.0) for a in range(1, 7)] == [1, 2, 4, 8, 16, 16]

    @pytest.mark.parametrize(
        "error, expected",
        [
            (status_error(429), True),
            (status_error(503), True),
            (status_error(404), False),
            (status_error(400), False),
            (httpx.ConnectError("refused"), True),
            (httpx.ReadTimeout("slow"), True),
            (httpx.UnsupportedProtocol("ftp"), False),
            (ValueError("bad"), False),
        ],
    )
    def test_transient_classification(self, error, expected):
        assert is_transient_error(error) is expected


class TestRunWithRetry:

    async def test_success_without_retry(self, sleeps):
        operation = Flaky()

        assert await run_with_retry("op", operation, logger) == "ok"
        assert operation.calls == 1
        assert sleeps == []

    async def test_delays_follow_backoff_schedule(self, sleeps):
        operation = Flaky(*(httpx.ConnectError("down") for _ in range(4)))

        result = await run_with_retry("op", operation, logger, base_delay=1.0, max_delay=16.0)

        assert result == "ok"
        assert operation.calls == 5
        assert sleeps == [1.0, 2.0, 4.0, 8.0]

    async def test_final_failure_propagates(self, sleeps):
        operation = Flaky(*(status_error(503) for _ in range(5)))

        with pytest.raises(httpx.HTTPStatusError):
            await run_with_retry("op", operation, logger, max_attempts=3, base_delay=0.5)
        assert operation.calls == 3
        assert sleeps == [0.5, 1.0]

    async def test_non_retryable_raises_immediately(self, sleeps):
        operation = Flaky(status_error(404))

        with pytest.raises(httpx.HTTPStatusError):
            await run_with_retry("op", operation, logger, base_delay=1.0)
        assert operation.calls == 1
        assert sleeps == []

    async def test_custom_predicate(self, sleeps):
        operation = Flaky(KeyError("x"))

        result = await run_with_retry(
            "op", operation, logger, base_delay=0.0, is_retryable=lambda e: isinstance(e, KeyError)
        )

        assert result == "ok"
        assert sleeps == []

    async def test_logs_each_retry(self, sleeps, caplog):
        operation = Flaky(status_error(429))

        with caplog.at_level(logging.WARNING, logger="tests.retry"):
            await run_with_retry("Sheet fetch", operation, logger, base_delay=1.0)

        assert "Sheet fetch failed (attempt 1/5)" in caplog.text
