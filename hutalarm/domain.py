from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Hut:
    """A watched hut as known to hut-reservation.org."""

    hut_id: int
    name: str


@dataclass(frozen=True)
class AvailabilityRecord:
    """Free beds of one hut on one night."""

    date_formatted: str  # DD.MM.YYYY
    free_beds: int


class ConfigurationError(RuntimeError):
    """Required settings are missing or invalid. Raised before polling starts."""


class FetchError(RuntimeError):
    """Availability of a hut could not be fetched or parsed for this cycle."""


class MissingDateError(LookupError):
    """The requested date is not part of the hut's availability data."""


class NotificationError(RuntimeError):
    """One alarm channel (browser or email) failed."""
