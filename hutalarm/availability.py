from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from hutalarm.domain import AvailabilityRecord, FetchError, MissingDateError

logger = logging.getLogger(__name__)


def build_availability_url(api_base_url: str, hut_id: int) -> str:
    # e.g. ...getHutAvailability?hutId=213
    return f"{api_base_url}{hut_id}"


def build_wizard_url(reservation_base_url: str, hut_id: int) -> str:
    return f"{reservation_base_url}{hut_id}/wizard"


def _parse_record(item: Any) -> AvailabilityRecord:
    if not isinstance(item, dict):
        raise FetchError(f"Unexpected availability entry: {item!r}")

    date = item.get("dateFormatted")
    if not isinstance(date, str):
        raise FetchError(f"Availability entry without dateFormatted: {item!r}")

    if "freeBeds" not in item:
        raise FetchError(f"Availability entry without freeBeds: {item!r}")
    free_beds = item["freeBeds"]
    # Closed nights come back with freeBeds=null.
    if free_beds is None:
        free_beds = 0
    if isinstance(free_beds, bool) or not isinstance(free_beds, int) or free_beds < 0:
        raise FetchError(f"Invalid freeBeds for {date}: {free_beds!r}")

    return AvailabilityRecord(date_formatted=date, free_beds=free_beds)


def fetch_hut_availability(
    hut_id: int,
    *,
    api_base_url: str,
    timeout_seconds: float = 20.0,
    client: httpx.Client | None = None,
) -> list[AvailabilityRecord]:
    """Download the per-night availability list of one hut.

    Every failure (transport, HTTP status, payload shape) is raised as FetchError.
    No retries: the next poll cycle asks again.
    """

    url = build_availability_url(api_base_url, hut_id)

    try:
        if client is None:
            with httpx.Client(timeout=timeout_seconds) as own_client:
                r = own_client.get(url)
        else:
            r = client.get(url, timeout=timeout_seconds)
        r.raise_for_status()
        data = r.json()
    except httpx.HTTPStatusError as e:
        raise FetchError(f"HTTP {e.response.status_code} for hut {hut_id}") from e
    except httpx.HTTPError as e:
        raise FetchError(f"Request for hut {hut_id} failed ({type(e).__name__}: {e})") from e
    except (ValueError, RecursionError) as e:
        raise FetchError(f"Hut {hut_id} returned invalid JSON") from e

    if not isinstance(data, list):
        raise FetchError(f"Hut {hut_id} returned {type(data).__name__}, expected a list")

    records = [_parse_record(item) for item in data]
    logger.debug("Hut %s: %d availability records", hut_id, len(records))
    return records


def free_beds_for_date(records: Sequence[AvailabilityRecord], date: str) -> int:
    for record in records:
        if record.date_formatted == date:
            return record.free_beds
    raise MissingDateError(f"No availability for {date}")
