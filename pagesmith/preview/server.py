import subprocess
import sys
import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Optional

from pagesmith.errors import PortInUse, ServerError, ServerStartFailure
from pagesmith.models import ServerState

# Printed by http.server once the socket is bound
_READY_MARKER = "Serving HTTP on"

# errno 98 on Linux, 48 on macOS, 10048 on Windows
_ADDRESS_IN_USE_SIGNATURES = (
    "Address already in use",
    "Only one usage of each socket address",
)

_STDERR_TAIL_LINES = 50
_TERMINATE_GRACE_SECONDS = 5.0


def classify_server_failure(message: str, port: int) -> ServerError:
    """Map the error output of a failed server process to a ServerError."""
    if any(signature in message for signature in _ADDRESS_IN_USE_SIGNATURES):
        return PortInUse(port)
    return ServerStartFailure(message.strip() or "The server process exited unexpectedly.")


@dataclass
class ServerHandle:
    process: subprocess.Popen
    port: int
    state: ServerState = ServerState.STARTING
    failure: Optional[ServerError] = None
    # Set once the server is either serving or gone
    settled: threading.Event = field(default_factory=threading.Event, repr=False)
    stderr_tail: deque = field(
        default_factory=lambda: deque(maxlen=_STDERR_TAIL_LINES), repr=False,
    )


class PreviewServer:
    """Owns the external static-file server process of a preview session.

    The process is `python -m http.server`, rooted at the output directory.
    Background threads drain its output, so the caller is never blocked and
    the pipes never fill up while the server logs requests.
    """

    def __init__(self, bind: Optional[str] = None, python: str = sys.executable):
        self.bind = bind
        self.python = python
        self._lock = threading.Lock()

    def command(self, output_dir: Path, port: int) -> list[str]:
        cmd = [self.python, "-u", "-m", "http.server", str(port), "--directory", str(output_dir)]
        if self.bind:
            cmd += ["--bind", self.bind]
        return cmd

    def start(
        self,
        output_dir: Path,
        port: int,
        on_exit: Optional[Callable[[ServerError], None]] = None,
    ) -> ServerHandle:
        try:
            process = subprocess.Popen(
                self.command(output_dir, port),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as exc:
            raise ServerStartFailure(f"Could not launch the server: {exc}") from exc

        handle = ServerHandle(process=process, port=port)
        stderr_reader = threading.Thread(
            target=self._drain_stderr, args=(handle,), daemon=True,
        )
        stdout_reader = threading.Thread(
            target=self._watch_stdout, args=(handle,), daemon=True,
        )
        monitor = threading.Thread(
            target=self._monitor, args=(handle, [stderr_reader, stdout_reader], on_exit),
            name="pagesmith-server", daemon=True,
        )
        stderr_reader.start()
        stdout_reader.start()
        monitor.start()
        return handle

    def wait_until_ready(self, handle: ServerHandle, timeout: float = 10.0) -> None:
        """Block until the server is serving; raise its failure otherwise."""
        if not handle.settled.wait(timeout):
            raise ServerStartFailure(
                f"The server did not start serving on port {handle.port} "
                f"within {timeout:g} seconds."
            )
        if handle.state is not ServerState.RUNNING:
            raise handle.failure or ServerStartFailure("The server was terminated before it started.")

    def terminate(self, handle: ServerHandle) -> None:
        with self._lock:
            if handle.state in (ServerState.TERMINATED, ServerState.FAILED):
                return
            handle.state = ServerState.TERMINATED
        process = handle.process
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=_TERMINATE_GRACE_SECONDS)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()
        handle.settled.set()

    @contextmanager
    def serving(
        self,
        output_dir: Path,
        port: int,
        on_exit: Optional[Callable[[ServerError], None]] = None,
    ) -> Iterator[ServerHandle]:
        handle = self.start(output_dir, port, on_exit)
        try:
            yield handle
        finally:
            self.terminate(handle)

    def _watch_stdout(self, handle: ServerHandle) -> None:
        for line in handle.process.stdout:
            if line.startswith(_READY_MARKER):
                with self._lock:
                    if handle.state is ServerState.STARTING:
                        handle.state = ServerState.RUNNING
                handle.settled.set()

    def _drain_stderr(self, handle: ServerHandle) -> None:
        for line in handle.process.stderr:
            handle.stderr_tail.append(line)

    def _monitor(
        self,
        handle: ServerHandle,
        readers: list[threading.Thread],
        on_exit: Optional[Callable[[ServerError], None]],
    ) -> None:
        handle.process.wait()
        for reader in readers:
            reader.join()
        with self._lock:
            if handle.state is ServerState.TERMINATED:
                return
            handle.state = ServerState.FAILED
            handle.failure = classify_server_failure("".join(handle.stderr_tail), handle.port)
        handle.settled.set()
        if on_exit is not None:
            on_exit(handle.failure)
