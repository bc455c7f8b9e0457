"""Remediation actions — where the user is sent to update.

Both actions return immediately; the store page or update flow runs in
its own thread or process and its failures are only logged.
"""

import logging
import subprocess
import sys
import threading
import webbrowser

logger = logging.getLogger(__name__)


class StoreListingRemediation:
    """Opens the store listing in the system browser."""

    def __init__(self, url: str, opener=None):
        self.url = url
        self._opener = opener or webbrowser.open

    def __call__(self) -> threading.Thread:
        thread = threading.Thread(target=self._open, name='store-listing', daemon=True)
        thread.start()
        return thread

    def _open(self):
        try:
            if not self._opener(self.url, new=2):
                logger.warning("No browser accepted %s", self.url)
        except Exception as e:
            logger.warning("Failed to open store listing %s: %s", self.url, e)


class NativeUpdateRemediation:
    """Hands control to the platform's own update mechanism via a command."""

    def __init__(self, argv: list[str]):
        if not argv:
            raise ValueError("Native update command must not be empty")
        self.argv = list(argv)

    def __call__(self) -> subprocess.Popen | None:
        # Detached so the update flow survives the host exiting
        kwargs = {}
        if sys.platform == 'win32':
            kwargs['creationflags'] = (
                subprocess.DETACHED_PROCESS
                | subprocess.CREATE_NEW_PROCESS_GROUP
            )
        else:
            kwargs['start_new_session'] = True

        try:
            proc = subprocess.Popen(
                self.argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                **kwargs,
            )
        except OSError as e:
            logger.error("Failed to launch native update %s: %s", self.argv[0], e)
            return None

        logger.info("Native update launched: %s (pid %d)", self.argv[0], proc.pid)
        return proc


def android_market_intent(app_id: str, adb: str = 'adb',
                          device_id: str | None = None) -> list[str]:
    """adb command that opens the Play Store update page for ``app_id``."""
    argv = [adb]
    if device_id:
        argv += ['-s', device_id]
    argv += [
        'shell', 'am', 'start',
        '-a', 'android.intent.action.VIEW',
        '-d', f'market://details?id={app_id}',
    ]
    return argv
