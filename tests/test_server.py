"""
Tests for the preview server supervisor.

These start a real `python -m http.server` process on a free localhost port.
"""

import io
import socket
import threading

import pytest
import requests

from pagesmith.errors import PortInUse, ServerStartFailure
from pagesmith.generator import SiteGenerator, create_project
from pagesmith.models import ServerState, Session
from pagesmith.preview.server import PreviewServer, classify_server_failure
from pagesmith.preview.session import SessionController

HOST = "127.0.0.1"


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((HOST, 0))
        return s.getsockname()[1]


@pytest.fixture
def site(tmp_path):
    out = tmp_path / "Output"
    (out / "blog").mkdir(parents=True)
    (out / "index.html").write_text("<h1>Home</h1>")
    (out / "blog" / "index.html").write_text("<h1>Blog</h1>")
    return out


def test_classify_address_in_use():
    message = (
        "Traceback (most recent call last):\n"
        "  ...\n"
        "OSError: [Errno 98] Address already in use\n"
    )
    error = classify_server_failure(message, 8000)
    assert isinstance(error, PortInUse)
    assert "port number 8000" in str(error)


def test_classify_windows_address_in_use():
    message = "OSError: [WinError 10048] Only one usage of each socket address is normally permitted"
    assert isinstance(classify_server_failure(message, 8000), PortInUse)


def test_classify_other_failure_keeps_message():
    error = classify_server_failure("PermissionError: [Errno 13] Permission denied\n", 80)
    assert isinstance(error, ServerStartFailure)
    assert "Permission denied" in str(error)


def test_classify_empty_output():
    error = classify_server_failure("", 8000)
    assert isinstance(error, ServerStartFailure)
    assert str(error)


def test_serves_output_directory(site):
    port = _free_port()
    server = PreviewServer(bind=HOST)
    with server.serving(site, port) as handle:
        server.wait_until_ready(handle, timeout=10)
        assert handle.state is ServerState.RUNNING

        base = f"http://{HOST}:{port}"
        assert "Home" in requests.get(f"{base}/", timeout=5).text
        assert "Blog" in requests.get(f"{base}/blog/", timeout=5).text
        assert requests.get(f"{base}/missing.html", timeout=5).status_code == 404

    assert handle.state is ServerState.TERMINATED
    assert handle.process.poll() is not None


def test_terminate_is_idempotent(site):
    port = _free_port()
    server = PreviewServer(bind=HOST)
    exits = []
    handle = server.start(site, port, on_exit=exits.append)
    server.wait_until_ready(handle, timeout=10)

    server.terminate(handle)
    server.terminate(handle)

    assert handle.state is ServerState.TERMINATED
    assert handle.process.poll() is not None
    # A requested termination is not reported as a failure
    handle.settled.wait(1)
    assert exits == []
    assert handle.failure is None


def test_port_in_use_is_reported(site):
    port = _free_port()
    server = PreviewServer(bind=HOST)
    failures = []
    reported = threading.Event()

    def _on_exit(error):
        failures.append(error)
        reported.set()

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
        blocker.bind((HOST, port))
        blocker.listen()
        with server.serving(site, port, on_exit=_on_exit) as handle:
            with pytest.raises(PortInUse):
                server.wait_until_ready(handle, timeout=10)
            assert reported.wait(5)

    assert handle.state is ServerState.FAILED
    assert isinstance(failures[0], PortInUse)


def test_launch_failure_raises(site, tmp_path):
    server = PreviewServer(python=str(tmp_path / "no-such-python"))
    with pytest.raises(ServerStartFailure):
        server.start(site, _free_port())


def test_command_includes_bind_only_when_set(site):
    assert "--bind" not in PreviewServer().command(site, 8000)
    cmd = PreviewServer(bind=HOST).command(site, 8000)
    assert cmd[-2:] == ["--bind", HOST]
    assert cmd[cmd.index("--directory") + 1] == str(site)


def test_session_serves_until_enter(tmp_path):
    create_project(tmp_path)
    generator = SiteGenerator(tmp_path, {})
    generator.generate()
    port = _free_port()
    pages = []

    class FetchThenEnter:
        def readline(self):
            pages.append(requests.get(f"http://{HOST}:{port}/about.html", timeout=5))
            return "\n"

    controller = SessionController(
        tmp_path, generator, supervisor=PreviewServer(bind=HOST),
        stdin=FetchThenEnter(), stdout=io.StringIO(), stderr=io.StringIO(),
    )
    controller.run(Session(output_dir="Output", port=port))

    assert pages[0].status_code == 200
    assert "About" in pages[0].text
    with pytest.raises(requests.ConnectionError):
        requests.get(f"http://{HOST}:{port}/", timeout=2)
