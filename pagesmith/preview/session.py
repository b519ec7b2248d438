import queue
import sys
import threading
from pathlib import Path
from typing import Callable, Optional, TextIO

from pagesmith.errors import (
    FolderNotFound,
    OutputFolderNotFound,
    ServerError,
    WatchFolderNotFound,
)
from pagesmith.folders import resolve_subfolder
from pagesmith.models import Session
from pagesmith.preview.server import PreviewServer
from pagesmith.preview.watcher import ChangeWatcher

# Queued when the user presses ENTER
_STOP = object()


class SessionController:
    """Runs one preview session: generate, serve, optionally watch, stop.

    Args:
        root: Project folder that the session's paths are relative to.
        generator: Collaborator with a `generate()` method.
        supervisor: Owner of the server process (defaults to `PreviewServer()`).
        watcher_factory: Builds the change watcher for a live reload folder.
        interval: Polling interval of the watcher, in seconds.
        ready_timeout: How long to wait for the server to start serving.
    """

    def __init__(
        self,
        root: Path,
        generator,
        supervisor: Optional[PreviewServer] = None,
        watcher_factory: Callable[..., ChangeWatcher] = ChangeWatcher,
        interval: float = 1.0,
        ready_timeout: float = 10.0,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        self.root = root
        self.generator = generator
        self.supervisor = supervisor or PreviewServer()
        self.watcher_factory = watcher_factory
        self.interval = interval
        self.ready_timeout = ready_timeout
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr

    def run(self, session: Session) -> None:
        output_folder = self._resolve_output_folder(session.output_dir)
        self.generator.generate()

        # A bad live reload path aborts before anything is served
        watch_folder = None
        if session.watch_path is not None:
            watch_folder = self._resolve_watch_folder(session.watch_path)

        print(
            f"🌍 Starting web server at http://localhost:{session.port}\n\n"
            "Press ENTER to stop the server and exit",
            file=self._stdout, flush=True,
        )

        signals: queue.Queue = queue.Queue()
        watcher = None
        with self.supervisor.serving(output_folder, session.port, on_exit=signals.put) as handle:
            try:
                self.supervisor.wait_until_ready(handle, self.ready_timeout)
            except ServerError as exc:
                self._abort(exc)

            # Only watch once the server is known to be up
            if watch_folder is not None:
                watcher = self.watcher_factory(
                    watch_folder,
                    self.generator.generate,
                    interval=self.interval,
                    stdout=self._stdout,
                    stderr=self._stderr,
                )
                watcher.start()

            threading.Thread(
                target=self._wait_for_enter, args=(signals,),
                name="pagesmith-stdin", daemon=True,
            ).start()

            try:
                signal = signals.get()
            finally:
                if watcher is not None:
                    watcher.cancel()

            if isinstance(signal, ServerError):
                self._abort(signal)

    def _wait_for_enter(self, signals: queue.Queue) -> None:
        # A closed or missing stdin ends the session like ENTER does
        try:
            self._stdin.readline()
        finally:
            signals.put(_STOP)

    def _abort(self, error: ServerError) -> None:
        print(f"\n❌ Failed to start local web server:\n{error}",
              file=self._stderr, flush=True)
        raise SystemExit(1)

    def _resolve_output_folder(self, path: Path) -> Path:
        try:
            return resolve_subfolder(self.root, path)
        except FolderNotFound:
            raise OutputFolderNotFound(path) from None

    def _resolve_watch_folder(self, path: str) -> Path:
        try:
            return resolve_subfolder(self.root, path)
        except FolderNotFound:
            raise WatchFolderNotFound(path) from None
