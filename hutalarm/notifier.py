from __future__ import annotations

import logging
from typing import Protocol

from hutalarm.availability import build_wizard_url
from hutalarm.config import Settings
from hutalarm.domain import Hut
from hutalarm.email_notifier import send_email
from hutalarm.selenium_provider import ChromeOpener, LoggingOpener

logger = logging.getLogger(__name__)


class BrowserOpener(Protocol):
    def open(self, url: str) -> None: ...


def _format_subject(hut: Hut) -> str:
    return f"Hut alarm for {hut.name}"


def _format_body(hut: Hut, date: str, url: str) -> str:
    return f"Hut: {hut.name}. Date: {date}\n{url}"


class AlarmNotifier:
    """Side effects of an alarm: browser window plus optional email.

    Both channels are best-effort and independent; a failure of one is logged and
    never stops the other or propagates to the poll loop.
    """

    def __init__(self, settings: Settings, *, opener: BrowserOpener | None = None) -> None:
        self.settings = settings
        if opener is None:
            opener = ChromeOpener(headless=settings.headless) if settings.open_browser else LoggingOpener()
        self.opener = opener

    def notify(self, hut: Hut, date: str) -> None:
        url = build_wizard_url(self.settings.hut_reservation_url, hut.hut_id)
        logger.warning("ALARM! Enough free beds in %s on %s: %s", hut.name, date, url)

        try:
            self.opener.open(url)
        except Exception as e:
            logger.error("Failed to open reservation page (%s: %s)", type(e).__name__, e)

        if not self.settings.email_enabled:
            return

        logger.info("Sending email to %s", self.settings.email_recipient)
        try:
            send_email(
                host=self.settings.smtp_host,
                port=self.settings.smtp_port,
                username=self.settings.smtp_username,
                password=self.settings.smtp_password,
                recipient=self.settings.email_recipient,
                subject=_format_subject(hut),
                text=_format_body(hut, date, url),
            )
        except Exception as e:
            logger.error("Failed to send alarm email (%s: %s)", type(e).__name__, e)
            return
        logger.info("Alarm email sent.")
