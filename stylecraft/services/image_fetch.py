"""Batched, retrying fetch of remote images into base64 payloads.

Inventory images are downloaded in consecutive batches of ``batch_size``
concurrent requests.  Each image gets its own bounded retry loop with a
linear backoff (1 s, 2 s, ...) and a hard per-request deadline.  A single
image that cannot be fetched never aborts the batch: it is logged and left
out of :attr:`BatchResult.images`.  Only when *nothing* could be fetched does
:func:`fetch_and_encode` raise :class:`NoImagesFetchedError`.
"""
from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, Literal, Optional, Sequence, TypeVar

import httpx

from stylecraft.config import Settings
from stylecraft.models import EncodedImage

logger = logging.getLogger(__name__)

T = TypeVar("T")

FailureKind = Literal["timeout", "network", "status"]
SleepFn = Callable[[float], Awaitable[None]]
ProgressFn = Callable[[int, int], None]


class ImageFetchError(Exception):
    """Base class for image pipeline errors."""


class NoImagesFetchedError(ImageFetchError):
    """Raised when every location in a batch failed."""

    def __init__(self, failures: Sequence["FetchFailure"]):
        super().__init__("Failed to fetch any inventory images. Please check your connection and try again.")
        self.failures = tuple(failures)


@dataclass(frozen=True)
class FetchOptions:
    batch_size: int = 4
    timeout_s: float = 30.0
    max_retries: int = 2
    inter_batch_delay_s: float = 0.1
    backoff_step_s: float = 1.0

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.inter_batch_delay_s < 0 or self.backoff_step_s < 0:
            raise ValueError("delays must be >= 0")

    @classmethod
    def from_settings(cls, settings: Settings) -> "FetchOptions":
        return cls(
            batch_size=settings.fetch_batch_size,
            timeout_s=settings.fetch_timeout_s,
            max_retries=settings.fetch_max_retries,
            inter_batch_delay_s=settings.fetch_inter_batch_delay_s,
        )


def backoff_delay(attempt: int, step_s: float = 1.0) -> float:
    """Delay before retrying after the 0-indexed *attempt* failed."""

    return step_s * (attempt + 1)


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    if size < 1:
        raise ValueError("size must be >= 1")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


# ------------------------------------------------------------------
# Per-item retry state
# ------------------------------------------------------------------


class FetchState(str, Enum):
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    RETRY_WAIT = "retry_wait"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class FetchAttempt:
    """Retry bookkeeping for one location.

    Transitions: PENDING -> IN_FLIGHT -> SUCCEEDED, or
    IN_FLIGHT -> RETRY_WAIT -> IN_FLIGHT ... -> FAILED once ``attempt``
    reaches ``max_retries``.
    """

    location: str
    max_retries: int
    backoff_step_s: float = 1.0
    attempt: int = 0
    state: FetchState = FetchState.PENDING
    started_at: Optional[float] = None
    _clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    @property
    def tries(self) -> int:
        return self.attempt + 1

    @property
    def elapsed_s(self) -> float:
        if self.started_at is None:
            return 0.0
        return self._clock() - self.started_at

    def begin(self) -> None:
        if self.state is FetchState.PENDING:
            self.started_at = self._clock()
        elif self.state is FetchState.RETRY_WAIT:
            self.attempt += 1
        else:
            raise RuntimeError(f"cannot start a fetch from state {self.state.value}")
        self.state = FetchState.IN_FLIGHT

    def succeed(self) -> None:
        self._require_in_flight()
        self.state = FetchState.SUCCEEDED

    def fail(self) -> Optional[float]:
        """Record a failed try; return the backoff delay, or None when exhausted."""

        self._require_in_flight()
        if self.attempt < self.max_retries:
            self.state = FetchState.RETRY_WAIT
            return backoff_delay(self.attempt, self.backoff_step_s)
        self.state = FetchState.FAILED
        return None

    def _require_in_flight(self) -> None:
        if self.state is not FetchState.IN_FLIGHT:
            raise RuntimeError(f"no fetch in flight (state {self.state.value})")


# ------------------------------------------------------------------
# Results
# ------------------------------------------------------------------


@dataclass(frozen=True)
class FetchFailure:
    location: str
    kind: FailureKind
    message: str
    attempts: int
    status_code: Optional[int] = None


@dataclass(frozen=True)
class FetchOutcome:
    location: str
    image: Optional[EncodedImage] = None
    failure: Optional[FetchFailure] = None

    @property
    def ok(self) -> bool:
        return self.image is not None


@dataclass(frozen=True)
class BatchResult:
    """One outcome per requested location, in input order."""

    outcomes: tuple[FetchOutcome, ...] = ()

    @property
    def images(self) -> list[EncodedImage]:
        return [o.image for o in self.outcomes if o.image is not None]

    @property
    def locations(self) -> list[str]:
        """Locations of the successful images, aligned with :attr:`images`."""
        return [o.location for o in self.outcomes if o.ok]

    @property
    def failures(self) -> list[FetchFailure]:
        return [o.failure for o in self.outcomes if o.failure is not None]


class _AttemptError(Exception):
    def __init__(self, kind: FailureKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------


async def fetch_and_encode(
    locations: Sequence[str],
    options: Optional[FetchOptions] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    sleep: SleepFn = asyncio.sleep,
    progress: Optional[ProgressFn] = None,
) -> BatchResult:
    """Fetch every location and return the base64-encoded images.

    Parameters
    ----------
    locations : Sequence[str]
        Image URLs; order is preserved in the result.
    options : FetchOptions, optional
        Batch size, per-request timeout, retry count and inter-batch delay.
    client : httpx.AsyncClient, optional
        Client to issue requests with.  A short-lived one is created when
        omitted.
    sleep : callable, optional
        Awaitable used for backoff and inter-batch pauses.
    progress : callable, optional
        Called with ``(batch_number, total_batches)`` before each batch.

    Raises
    ------
    NoImagesFetchedError
        If at least one location was requested and none could be fetched.
    """

    options = options or FetchOptions()
    if any(not loc for loc in locations):
        raise ValueError("Image locations must be non-empty")
    if not locations:
        return BatchResult()

    batches = chunked(list(locations), options.batch_size)
    outcomes: list[FetchOutcome] = []

    async with _client_scope(client, options.timeout_s) as http:
        for number, batch in enumerate(batches, start=1):
            if progress is not None:
                progress(number, len(batches))
            logger.debug("Fetching image batch %d/%d (%d items)", number, len(batches), len(batch))

            results = await asyncio.gather(*(_fetch_one(http, loc, options, sleep) for loc in batch))
            for outcome in results:
                if outcome.failure is not None:
                    logger.warning(
                        "Failed to fetch image %s after %d attempt(s): %s",
                        outcome.location,
                        outcome.failure.attempts,
                        outcome.failure.message,
                    )
            outcomes.extend(results)

            if number < len(batches) and options.inter_batch_delay_s > 0:
                await sleep(options.inter_batch_delay_s)

    result = BatchResult(tuple(outcomes))
    if not result.images:
        raise NoImagesFetchedError(result.failures)
    logger.info("Fetched %d/%d images", len(result.images), len(locations))
    return result


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


@asynccontextmanager
async def _client_scope(
    client: Optional[httpx.AsyncClient], timeout_s: float
) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=timeout_s, follow_redirects=True) as owned:
        yield owned


async def _fetch_one(
    client: httpx.AsyncClient,
    location: str,
    options: FetchOptions,
    sleep: SleepFn,
) -> FetchOutcome:
    attempt = FetchAttempt(location, options.max_retries, options.backoff_step_s)
    while True:
        attempt.begin()
        try:
            image = await _download(client, location, options.timeout_s)
        except _AttemptError as exc:
            delay = attempt.fail()
            if delay is None:
                message = str(exc)
                if exc.kind != "timeout":
                    message = f"{message} (after {attempt.tries} attempts)"
                failure = FetchFailure(location, exc.kind, message, attempt.tries, exc.status_code)
                return FetchOutcome(location, failure=failure)
            logger.debug("Retrying %s in %.1fs after: %s", location, delay, exc)
            await sleep(delay)
            continue
        attempt.succeed()
        return FetchOutcome(location, image=image)


async def _download(client: httpx.AsyncClient, location: str, timeout_s: float) -> EncodedImage:
    try:
        response = await asyncio.wait_for(client.get(location, timeout=timeout_s), timeout=timeout_s)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise _AttemptError("timeout", f"Request timeout while fetching image from {location}") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise _AttemptError("network", f"Failed to fetch image from {location}: {exc}") from exc
    except Exception as exc:
        logger.debug("Unexpected error while fetching image from %s", location, exc_info=True)
        raise _AttemptError("network", f"Failed to fetch image from {location}: {exc}") from exc

    if not response.is_success:
        raise _AttemptError(
            "status",
            f"Failed to fetch image from {location}: {response.status_code} {response.reason_phrase}",
            response.status_code,
        )

    if not response.content:
        raise _AttemptError("status", f"Empty response body for image {location}", response.status_code)

    media_type = response.headers.get("Content-Type", "application/octet-stream").split(";")[0].strip()
    return EncodedImage.from_bytes(response.content, media_type or "application/octet-stream")
