"""
Detached timers for audio stops and highlight reverts.

Each timer is a daemon thread that sleeps once and acts once. Timers are
never cancelled, and overlapping timers for the same target are not merged.
Exiting the input loop leaves pending ones to finish or die with the process.
"""

import logging
import threading
import time
from typing import Callable

log = logging.getLogger(__name__)


def run_after(delay_ms: int, action: Callable[[], None], name: str = "timer") -> threading.Thread:
    """Run action on a detached thread after delay_ms milliseconds"""

    def _worker():
        time.sleep(delay_ms / 1000)
        try:
            action()
        except Exception:
            log.exception(f"{name} failed")

    thread = threading.Thread(target=_worker, name=name, daemon=True)
    thread.start()
    return thread
