import logging
import signal
import threading

from hutalarm.config import load_settings
from hutalarm.domain import ConfigurationError
from hutalarm.latch import AlarmLatch
from hutalarm.notifier import AlarmNotifier
from hutalarm.worker import run_forever

logger = logging.getLogger(__name__)


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def main() -> int:
    _setup_logging()

    # Missing or invalid settings stop the process here, before any polling.
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        raise

    stop_event = threading.Event()
    signal.signal(signal.SIGTERM, lambda *_: stop_event.set())

    try:
        run_forever(settings, latch=AlarmLatch(), notifier=AlarmNotifier(settings), stop_event=stop_event)
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
