from __future__ import annotations

from typing import Mapping


def is_suppressed(exceptions: Mapping[int, frozenset[str]], hut_id: int, date: str) -> bool:
    """True if (hut, date) is already booked or ignored and must not raise an alarm."""
    return date in exceptions.get(hut_id, frozenset())
