from __future__ import annotations

import logging

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_fixed
from webdriver_manager.chrome import ChromeDriverManager

from hutalarm.domain import NotificationError

logger = logging.getLogger(__name__)

DRIVER_START_ATTEMPTS = 2


def _log_before_sleep(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome is not None else None
    reason = f"{type(exc).__name__}: {exc}" if exc is not None else "unknown"
    logger.info("Browser start attempt %s failed (%s), retrying", retry_state.attempt_number, reason)


@retry(
    stop=stop_after_attempt(DRIVER_START_ATTEMPTS),
    wait=wait_fixed(2),
    retry=retry_if_exception_type(WebDriverException),
    before_sleep=_log_before_sleep,
    reraise=True,
)
def start_driver(*, headless: bool) -> webdriver.Chrome:
    options = Options()
    if headless:
        options.add_argument("--headless=new")
    # Keep the window open after this process exits so the booking can be finished by hand.
    options.add_experimental_option("detach", True)
    options.add_argument("--remote-allow-origins=*")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--window-size=1080,800")

    service = Service(ChromeDriverManager().install())
    return webdriver.Chrome(service=service, options=options)


class ChromeOpener:
    """Opens the reservation wizard in a fresh Chrome window."""

    def __init__(self, *, headless: bool = False) -> None:
        self.headless = headless
        self.driver: webdriver.Chrome | None = None

    def open(self, url: str) -> None:
        try:
            driver = start_driver(headless=self.headless)
        except Exception as e:
            raise NotificationError(f"Could not start Chrome ({type(e).__name__}: {e})") from e

        self.driver = driver
        try:
            if not self.headless:
                driver.maximize_window()
            driver.get(url)
        except WebDriverException as e:
            raise NotificationError(f"Could not open {url} ({type(e).__name__})") from e


class LoggingOpener:
    """Stand-in used when OPEN_BROWSER is off: only logs the link."""

    def open(self, url: str) -> None:
        logger.info("Browser disabled, reservation link: %s", url)
