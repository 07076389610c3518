from __future__ import annotations

import logging
import random
import threading

import httpx

from hutalarm.availability import fetch_hut_availability, free_beds_for_date
from hutalarm.config import Settings
from hutalarm.domain import FetchError, MissingDateError
from hutalarm.exceptions_filter import is_suppressed
from hutalarm.latch import AlarmLatch
from hutalarm.notifier import AlarmNotifier

logger = logging.getLogger(__name__)

JITTER_LOW = 0.67
JITTER_HIGH = 1.33


def jittered_interval(base_seconds: float, rng: random.Random | None = None) -> float:
    """Uniform draw in [base * 0.67, base * 1.33] so polling has no fixed period."""
    rng = rng or random
    return rng.uniform(base_seconds * JITTER_LOW, base_seconds * JITTER_HIGH)


def run_cycle(
    settings: Settings,
    *,
    latch: AlarmLatch,
    notifier: AlarmNotifier,
    client: httpx.Client | None = None,
) -> bool:
    """One pass over all huts and dates. Returns True if this pass fired the alarm."""

    if latch.is_set():
        return False

    for hut in settings.huts:
        try:
            records = fetch_hut_availability(
                hut.hut_id,
                api_base_url=settings.hut_api_url,
                timeout_seconds=settings.request_timeout_seconds,
                client=client,
            )
        except FetchError as e:
            logger.warning("%s: skipping this cycle (%s)", hut.name, e)
            continue

        for date in settings.watch_dates:
            try:
                free_beds = free_beds_for_date(records, date)
            except MissingDateError:
                logger.warning("%s: no data for %s, skipping", hut.name, date)
                continue

            logger.info("%s - free beds for %s: %d", hut.name, date, free_beds)

            if free_beds < settings.min_beds or latch.is_set():
                continue
            if is_suppressed(settings.exceptions, hut.hut_id, date):
                logger.info("%s on %s is in the exception list, ignoring", hut.name, date)
                continue

            if latch.try_fire():
                notifier.notify(hut, date)
                return True

    return False


def run_forever(
    settings: Settings,
    *,
    latch: AlarmLatch | None = None,
    notifier: AlarmNotifier | None = None,
    stop_event: threading.Event | None = None,
    rng: random.Random | None = None,
) -> bool:
    """Poll until the alarm fires (returns True) or stop_event is set (returns False)."""

    latch = latch or AlarmLatch()
    notifier = notifier or AlarmNotifier(settings)
    stop_event = stop_event or threading.Event()

    logger.info(
        "Watcher started. huts=%s dates=%s min_beds=%s interval=%ss",
        ", ".join(h.name for h in settings.huts),
        ", ".join(settings.watch_dates),
        settings.min_beds,
        settings.poll_interval_seconds,
    )

    with httpx.Client(timeout=settings.request_timeout_seconds) as client:
        while not stop_event.is_set():
            try:
                fired = run_cycle(settings, latch=latch, notifier=notifier, client=client)
            except Exception as e:
                # One broken cycle must not end monitoring; the next cycle tries again.
                logger.error("Cycle failed (%s: %s)", type(e).__name__, e)
                fired = False
            if fired:
                logger.info("Alarm fired, stopping.")
                return True
            if latch.is_set():
                return True

            delay = jittered_interval(settings.poll_interval_seconds, rng)
            logger.debug("Next cycle in %.1f sec.", delay)
            if stop_event.wait(delay):
                break

    logger.info("Watcher stopped without alarm.")
    return False
