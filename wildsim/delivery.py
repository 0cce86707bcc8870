"""
Delivery client: ships readings to the ingestion endpoint with bounded retries.

Failure classification decides whether another attempt can help:

- Connection refused: nothing is listening. Retrying within the same tick
  cannot change that, so the reading fails immediately.
- Transient (timeout, HTTP 5xx, other network or protocol error): retried up
  to ``max_attempts`` in total with a fixed delay between attempts.
- Rejected (any other non-2xx status): the endpoint judged the body itself,
  so resending the identical body is pointless. Fails immediately. Any
  unexpected error raised while building or sending the request is treated
  the same way.

``DeliveryClient.deliver`` never raises. It always returns a DeliveryOutcome
that the orchestrator folds into its counters, so one agent's failing
delivery cannot disturb another agent's tick.
"""

from __future__ import annotations

import asyncio
import http.client
import json
import threading
from typing import Any, Callable, Dict, Optional
from urllib import error, request

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from wildsim.logging_utils import (
    LOG_TAG_ERROR,
    LOG_TAG_RETRY,
    LOG_TAG_SUCCESS,
    log_error,
    log_retry,
    log_success,
    sensor_line,
)
from wildsim.schemas import DeliveryOutcome, DeliveryStatus, FailureKind, Reading

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0

# (url, payload, timeout) -> HTTP status code
Transport = Callable[[str, Dict[str, Any], float], int]


class DeliveryError(Exception):
    """Base class for classified delivery failures."""

    kind: FailureKind = FailureKind.TRANSIENT


class EndpointUnreachableError(DeliveryError):
    """The ingestion endpoint refused the connection."""

    kind = FailureKind.REFUSED


class TransientDeliveryError(DeliveryError):
    """Timeout, 5xx or other network failure worth retrying."""

    kind = FailureKind.TRANSIENT


class DeliveryRejectedError(DeliveryError):
    """The endpoint answered with a non-retryable error status."""

    kind = FailureKind.REJECTED


def _perform_post(url: str, payload: Dict[str, Any], timeout: float) -> int:
    """Execute the blocking HTTP POST and return the response status code.

    HTTP error statuses are returned rather than raised so classification
    lives in one place. A refused connection surfaces as the builtin
    ConnectionRefusedError; other network failures propagate as OSError.
    """
    data = json.dumps(payload).encode("utf-8")
    req = request.Request(
        url,
        data=data,
        headers={"Content-Type": "application/json"},
        method="POST",
    )

    try:
        with request.urlopen(req, timeout=timeout) as resp:
            return resp.status
    except error.HTTPError as exc:
        return exc.code
    except error.URLError as exc:
        if isinstance(exc.reason, ConnectionRefusedError):
            raise exc.reason from exc
        raise


def _settle(future: asyncio.Future, result: Any, exc: Optional[BaseException]) -> None:
    if future.cancelled():
        return
    if exc is not None:
        future.set_exception(exc)
    else:
        future.set_result(result)


async def _run_in_daemon_thread(func: Transport, *args: Any) -> int:
    """Run a blocking transport call on a daemon thread and await its result.

    Unlike ``asyncio.to_thread``, an interrupted run can exit while the call
    is still blocked in the network: nothing joins daemon threads at shutdown.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def runner() -> None:
        result, failure = None, None
        try:
            result = func(*args)
        except Exception as exc:
            failure = exc
        try:
            loop.call_soon_threadsafe(_settle, future, result, failure)
        except RuntimeError:
            # Loop already closed after an interrupt; nobody awaits this call
            pass

    threading.Thread(target=runner, name="wildsim-delivery", daemon=True).start()
    return await future


class DeliveryClient:
    """POSTs readings to one ingestion URL with a bounded, fixed-delay retry policy."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        transport: Optional[Transport] = None,
    ):
        """Initialize the client.

        Args:
            url: Full ingestion URL (base URL plus ingest path)
            timeout: Per-attempt network timeout in seconds
            max_attempts: Total attempts for transient failures (first try included)
            retry_delay_seconds: Fixed pause between attempts
            transport: Optional blocking callable replacing the urllib POST
                (used by tests and alternative sinks)
        """
        self.url = url
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self._transport = transport

    async def _attempt(self, payload: Dict[str, Any]) -> None:
        """Run one network call and raise a classified DeliveryError on failure."""
        # Resolved per call so tests can monkeypatch the module-level transport
        transport = self._transport or _perform_post
        try:
            status = await _run_in_daemon_thread(transport, self.url, payload, self.timeout)
        except ConnectionRefusedError as exc:
            raise EndpointUnreachableError(f"connection refused by {self.url}") from exc
        except TimeoutError as exc:
            raise TransientDeliveryError(f"timed out after {self.timeout:g}s") from exc
        except (OSError, http.client.HTTPException) as exc:
            raise TransientDeliveryError(str(exc) or type(exc).__name__) from exc
        except Exception as exc:
            # Request could not be built or sent (bad URL encoding, broken
            # transport). The same body would fail the same way again.
            raise DeliveryRejectedError(
                f"unexpected {type(exc).__name__}: {exc}"
            ) from exc

        if 200 <= status < 300:
            return
        if status >= 500:
            raise TransientDeliveryError(f"server error {status}")
        raise DeliveryRejectedError(f"rejected with status {status}")

    def _log_retry(self, sensor_id: str) -> Callable[[RetryCallState], None]:
        def before_sleep(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            message = (
                f"attempt {retry_state.attempt_number}/{self.max_attempts} "
                f"failed ({exc}); retrying in {self.retry_delay_seconds:g}s"
            )
            log_retry(sensor_line(LOG_TAG_RETRY, sensor_id, message))

        return before_sleep

    async def deliver(self, reading: Reading) -> DeliveryOutcome:
        """Deliver one reading, retrying transient failures.

        Returns:
            DeliveryOutcome with status SUCCESS, or EXHAUSTED carrying the
            failure kind of the last attempt
        """
        payload = reading.to_payload()
        sensor_id = reading.sensor_id
        attempt_number = 0

        try:
            # Only transient failures re-enter the loop. Refused and rejected
            # deliveries propagate on their first occurrence.
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(TransientDeliveryError),
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_fixed(self.retry_delay_seconds),
                before_sleep=self._log_retry(sensor_id),
                reraise=True,
            ):
                with attempt:
                    attempt_number += 1
                    await self._attempt(payload)
        except DeliveryError as exc:
            log_error(sensor_line(
                LOG_TAG_ERROR,
                sensor_id,
                f"Error: {exc} (gave up after {attempt_number} attempt(s))",
            ))
            return DeliveryOutcome(
                sensor_id=sensor_id,
                status=DeliveryStatus.EXHAUSTED,
                attempts=attempt_number,
                failure=exc.kind,
                error=str(exc),
            )

        log_success(sensor_line(LOG_TAG_SUCCESS, sensor_id, "Data sent successfully"))
        return DeliveryOutcome(
            sensor_id=sensor_id,
            status=DeliveryStatus.SUCCESS,
            attempts=attempt_number,
        )


__all__ = [
    "DeliveryClient",
    "DeliveryError",
    "EndpointUnreachableError",
    "TransientDeliveryError",
    "DeliveryRejectedError",
]
