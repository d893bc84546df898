"""Bounded readiness polling against eventually consistent data."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..config import PayloadSettings
from ..types import PollOutcome

logger = logging.getLogger(__name__)

Probe = Callable[[], Awaitable[int]]


async def poll_until_ready(
    probe: Probe,
    minimum: int,
    max_attempts: int,
    interval: float,
    *,
    label: str = "probe",
    cancel_event: asyncio.Event | None = None,
) -> PollOutcome:
    """Invoke ``probe`` until it reports at least ``minimum`` or attempts run out.

    Sleeps ``interval`` seconds between attempts, never after the last one,
    so the wait is bounded by ``max_attempts * interval``. Insufficient
    readiness is reported through the outcome, never raised. A probe that
    raises counts as zero for that attempt.

    When ``cancel_event`` is set the loop stops before the next attempt,
    and a wait in progress ends as soon as the event fires. The caller
    decides what a cancelled outcome means.
    """

    count = 0
    attempts = 0
    for attempt in range(max_attempts):
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Readiness %s cancelled after %s attempt(s)", label, attempts)
            return PollOutcome(count=count, attempts=attempts, minimum=minimum)

        attempts = attempt + 1
        try:
            count = int(await probe())
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(
                "Readiness %s failed (attempt %s/%s): %s", label, attempts, max_attempts, exc
            )
            count = 0

        if count >= minimum:
            logger.debug("Readiness %s satisfied with %s after %s attempt(s)", label, count, attempts)
            return PollOutcome(count=count, attempts=attempts, minimum=minimum)

        if attempts < max_attempts:
            logger.warning(
                "Not ready: %s reported %s (need %s, attempt %s/%s). Retrying in %ss...",
                label,
                count,
                minimum,
                attempts,
                max_attempts,
                interval,
            )
            await _wait(interval, cancel_event)

    logger.error(
        "Still not ready after %s attempt(s): %s reported %s (need %s)",
        attempts,
        label,
        count,
        minimum,
    )
    return PollOutcome(count=count, attempts=attempts, minimum=minimum)


async def _wait(interval: float, cancel_event: asyncio.Event | None) -> None:
    if cancel_event is None:
        await asyncio.sleep(interval)
        return
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=interval)
    except asyncio.TimeoutError:
        pass


class ReadinessPoller:
    """Holds the polling policy so a pipeline can be configured once."""

    def __init__(self, minimum: int, max_attempts: int, interval: float):
        self.minimum = minimum
        self.max_attempts = max_attempts
        self.interval = interval

    @classmethod
    def from_settings(cls, settings: PayloadSettings) -> ReadinessPoller:
        return cls(
            minimum=settings.readiness_min_options,
            max_attempts=settings.readiness_max_attempts,
            interval=settings.readiness_interval,
        )

    async def poll(
        self,
        probe: Probe,
        *,
        label: str = "probe",
        cancel_event: asyncio.Event | None = None,
    ) -> PollOutcome:
        return await poll_until_ready(
            probe,
            self.minimum,
            self.max_attempts,
            self.interval,
            label=label,
            cancel_event=cancel_event,
        )
