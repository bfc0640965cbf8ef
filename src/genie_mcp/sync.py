"""Background warm-up for the file index.

Runs a daemon thread that periodically asks the file index to refresh
itself, so the first query after a quiet period already sees fresh data.
"""

import logging
import threading

from genie_mcp.search import Launcher

logger = logging.getLogger(__name__)


class IndexWarmer:
    """Periodically triggers a file index refresh for the configured folders.

    The thread is a daemon, so it automatically terminates when the
    main process exits.
    """

    def __init__(self, launcher: Launcher, settings, interval: float):
        """Initialize the warmer.

        Args:
            launcher: Launcher whose file index is kept warm.
            settings: Settings store providing search_folders().
            interval: Seconds between warm-up checks. Must be > 0.
        """
        if interval <= 0:
            raise ValueError(f"Warm-up interval must be positive, got {interval}")

        self._launcher = launcher
        self._settings = settings
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the background warm-up thread."""
        if self._thread is not None and self._thread.is_alive():
            logger.warning("Warm-up thread already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._warm_loop,
            name="genie-warm",
            daemon=True,
        )
        self._thread.start()
        logger.info("Index warmer started (interval: %gs)", self._interval)

    def stop(self) -> None:
        """Stop the warm-up thread, waiting up to one interval."""
        if self._thread is None or not self._thread.is_alive():
            return

        self._stop_event.set()
        self._thread.join(timeout=self._interval + 1)
        if self._thread.is_alive():
            logger.warning("Warm-up thread did not stop cleanly")
        else:
            logger.info("Index warmer stopped")
        self._thread = None

    def _warm_loop(self) -> None:
        logger.debug("Warm-up loop started")

        while not self._stop_event.is_set():
            if self._stop_event.wait(timeout=self._interval):
                break

            try:
                folders = self._settings.search_folders()
                if self._launcher.files.maybe_refresh(folders):
                    logger.debug("Warm-up started a file index refresh")
            except Exception:
                logger.exception("Error during index warm-up")

        logger.debug("Warm-up loop stopped")
