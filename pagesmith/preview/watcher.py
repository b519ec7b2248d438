import sys
import threading
from pathlib import Path
from typing import Callable, Optional, TextIO

from pagesmith.models import WatchState, WatchStatus
from pagesmith.preview.fingerprint import fingerprint as fingerprint_folder


class ChangeWatcher:
    """Polls a source folder and regenerates the site when its contents change.

    The loop is sequential: a regeneration always finishes before the next
    wait starts, so two regenerations never overlap. Cancellation is
    cooperative and takes effect at the next wake-up, which happens at most
    one interval after `cancel()` is called.
    """

    def __init__(
        self,
        folder: Path,
        regenerate: Callable[[], None],
        interval: float = 1.0,
        fingerprint: Callable[[Path], str] = fingerprint_folder,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        self.state = WatchState(folder=folder)
        self.interval = interval
        self._regenerate = regenerate
        self._fingerprint = fingerprint
        self._stdout = stdout
        self._stderr = stderr
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self.run, name="pagesmith-watcher", daemon=True,
        )
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run(self) -> None:
        self.state.status = WatchStatus.RUNNING
        try:
            while True:
                self._cancelled.wait(self.interval)
                if self._cancelled.is_set():
                    self.state.status = WatchStatus.CANCELLED
                    return
                self.poll_once()
        except BaseException:
            self.state.status = WatchStatus.FAILED
            raise

    def poll_once(self) -> bool:
        """Take one sample; return True if it triggered a regeneration."""
        try:
            current = self._fingerprint(self.state.folder)
            previous = self.state.fingerprint
            self.state.fingerprint = current
            if previous is None or current == previous:
                return False
            print("Source changed, regenerating site ...", end=" ",
                  flush=True, file=self._stdout or sys.stdout)
            self._regenerate()
            print("done.", flush=True, file=self._stdout or sys.stdout)
            return True
        except Exception as exc:
            self._report(str(exc))
            return False

    def _report(self, message: str) -> None:
        print(f"\n❌ Failed live reloading website:\n{message}",
              file=self._stderr or sys.stderr, flush=True)
