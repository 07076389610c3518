from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping

from dotenv import load_dotenv

from hutalarm.domain import ConfigurationError, Hut

DEFAULT_HUT_API_URL = "https://www.hut-reservation.org/api/v1/reservation/getHutAvailability?hutId="
DEFAULT_HUT_RESERVATION_URL = "https://www.hut-reservation.org/reservation/book-hut/"

DATE_FORMAT = "%d.%m.%Y"


def _parse_hut_id(raw: str, *, var: str) -> int:
    try:
        hut_id = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid hut id in {var}: {raw!r}. Expected integer.") from e
    if hut_id <= 0:
        raise ConfigurationError(f"Invalid hut id in {var}: {raw!r}. Expected positive integer.")
    return hut_id


def _parse_date(raw: str, *, var: str) -> str:
    try:
        datetime.strptime(raw, DATE_FORMAT)
    except ValueError as e:
        raise ConfigurationError(f"Invalid date in {var}: {raw!r}. Expected DD.MM.YYYY.") from e
    return raw


def _parse_huts(raw: str) -> tuple[Hut, ...]:
    # HUTS=213:Finsteraarhornhütte,9:Britanniahütte
    parts = [p.strip() for p in raw.split(",")]
    parts = [p for p in parts if p]

    seen: set[int] = set()
    result: list[Hut] = []
    for p in parts:
        hut_id_raw, sep, name = p.partition(":")
        if not sep or not name.strip():
            raise ConfigurationError(f"Invalid HUTS entry: {p!r}. Expected <id>:<name>.")
        hut_id = _parse_hut_id(hut_id_raw.strip(), var="HUTS")
        if hut_id in seen:
            continue
        seen.add(hut_id)
        result.append(Hut(hut_id=hut_id, name=name.strip()))

    if not result:
        raise ConfigurationError("HUTS is empty. Provide at least one hut.")

    return tuple(result)


def _parse_watch_dates(raw: str) -> tuple[str, ...]:
    # WATCH_DATES=27.03.2026,28.03.2026
    parts = [p.strip() for p in raw.split(",")]
    parts = [p for p in parts if p]

    result: list[str] = []
    for p in parts:
        date = _parse_date(p, var="WATCH_DATES")
        if date not in result:
            result.append(date)

    if not result:
        raise ConfigurationError("WATCH_DATES is empty. Provide at least one date.")

    return tuple(result)


def _parse_exceptions(raw: str) -> Mapping[int, frozenset[str]]:
    # HUT_EXCEPTIONS=9:26.03.2026 27.03.2026;213:01.01.2026
    table: dict[int, set[str]] = {}
    for entry in raw.split(";"):
        entry = entry.strip()
        if not entry:
            continue
        hut_id_raw, sep, dates_raw = entry.partition(":")
        if not sep:
            raise ConfigurationError(f"Invalid HUT_EXCEPTIONS entry: {entry!r}. Expected <id>:<date> [<date> ...].")
        hut_id = _parse_hut_id(hut_id_raw.strip(), var="HUT_EXCEPTIONS")
        dates = {_parse_date(d, var="HUT_EXCEPTIONS") for d in dates_raw.split()}
        table.setdefault(hut_id, set()).update(dates)

    return MappingProxyType({hut_id: frozenset(dates) for hut_id, dates in table.items()})


def _parse_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() not in {"0", "false", "no", ""}


def _parse_positive(name: str, default: str, cast=float):
    raw = os.getenv(name, default)
    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {name} value: {raw!r}") from e
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be a finite number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0")
    return value


@dataclass(frozen=True)
class Settings:
    huts: tuple[Hut, ...]
    watch_dates: tuple[str, ...]
    exceptions: Mapping[int, frozenset[str]] = field(default_factory=lambda: MappingProxyType({}))

    min_beds: int = 3
    poll_interval_seconds: float = 60.0
    request_timeout_seconds: float = 20.0

    hut_api_url: str = DEFAULT_HUT_API_URL
    hut_reservation_url: str = DEFAULT_HUT_RESERVATION_URL

    open_browser: bool = True
    headless: bool = False

    # Email channel; all transport fields are set whenever email_enabled is True.
    email_enabled: bool = False
    smtp_host: str | None = None
    smtp_port: int | None = None
    smtp_username: str | None = None
    smtp_password: str | None = None
    email_recipient: str | None = None


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(f"Missing required environment variable: {name}")
    return value


def load_settings(dotenv_path: str | None = None) -> Settings:
    # Prefer .env in repo root; dotenv_path allows overriding in tests.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    min_beds = _parse_positive("MIN_BEDS", "3", cast=int)
    poll_interval_seconds = _parse_positive("POLL_INTERVAL_SECONDS", "60")
    request_timeout_seconds = _parse_positive("REQUEST_TIMEOUT_SECONDS", "20")

    email_enabled = _parse_bool("EMAIL_ENABLED", "0")
    smtp: dict[str, object] = {}
    if email_enabled:
        smtp_port_raw = _require("SMTP_PORT")
        try:
            smtp_port = int(smtp_port_raw)
        except ValueError as e:
            raise ConfigurationError(f"Invalid SMTP_PORT value: {smtp_port_raw!r}") from e
        smtp = {
            "smtp_host": _require("SMTP_HOST"),
            "smtp_port": smtp_port,
            "smtp_username": _require("SMTP_USERNAME"),
            "smtp_password": _require("SMTP_PASSWORD"),
            "email_recipient": _require("EMAIL_RECIPIENT"),
        }

    return Settings(
        huts=_parse_huts(_require("HUTS")),
        watch_dates=_parse_watch_dates(_require("WATCH_DATES")),
        exceptions=_parse_exceptions(os.getenv("HUT_EXCEPTIONS", "")),
        min_beds=min_beds,
        poll_interval_seconds=poll_interval_seconds,
        request_timeout_seconds=request_timeout_seconds,
        hut_api_url=os.getenv("HUT_API_URL", DEFAULT_HUT_API_URL),
        hut_reservation_url=os.getenv("HUT_RESERVATION_URL", DEFAULT_HUT_RESERVATION_URL),
        open_browser=_parse_bool("OPEN_BROWSER", "1"),
        headless=_parse_bool("HEADLESS", "0"),
        email_enabled=email_enabled,
        **smtp,
    )
