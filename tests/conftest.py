"""Shared pytest fixtures for all test modules."""

import asyncio
import os
import subprocess
import sys
from types import SimpleNamespace

import asyncssh
import pytest

import wgdeploy.redact as redact_module
from wgdeploy.config import InstallConfig, NewUserConfig, ServerConfig
from wgdeploy.install.plan import InstallPlan

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the wgdeploy CLI as a subprocess in *cwd*."""

    def _run(*args, cwd=None):
        env = dict(os.environ)
        env["PYTHONPATH"] = project_root + os.pathsep + env.get("PYTHONPATH", "")
        result = subprocess.run(
            [sys.executable, "-m", "wgdeploy.wgdeploy", *args],
            capture_output=True,
            text=True,
            cwd=cwd or project_root,
            env=env,
        )
        return result.returncode, result.stdout, result.stderr

    return _run


@pytest.fixture(autouse=True)
def _reset_redaction():
    redact_module.clear_registered_secrets()
    yield
    redact_module.clear_registered_secrets()


# ── Fake asyncssh ───────────────────────────────────────────────────


class _TextReader:
    """Decode a subprocess pipe the way asyncssh's text-mode readers do."""

    def __init__(self, stream, errors="strict", fail_with=None):
        self._stream = stream
        self._errors = errors
        self._fail_with = fail_with
        self._seen_data = False

    async def read(self, n=-1):
        if self._fail_with is not None and self._seen_data:
            raise self._fail_with
        data = await self._stream.read(n)
        self._seen_data = self._seen_data or bool(data)
        try:
            return data.decode(errors=self._errors)
        except UnicodeDecodeError as e:
            raise asyncssh.ProtocolError(str(e)) from e


class FakeProcess:
    """Runs the pipeline in a local shell so '&&' semantics are real."""

    def __init__(self, proc, events, errors="strict", stream_error=None):
        self._proc = proc
        self._events = events
        self.stdout = _TextReader(proc.stdout, errors, fail_with=stream_error)
        self.stderr = _TextReader(proc.stderr, errors)

    async def wait(self):
        rc = await self._proc.wait()
        self._events.append(f"exit:{rc}")
        return SimpleNamespace(exit_status=rc)


class FakeSFTPClient:
    def __init__(self, state):
        self._state = state

    async def __aenter__(self):
        self._state.events.append("sftp-open")
        return self

    async def __aexit__(self, *exc):
        self._state.events.append("sftp-close")
        return False

    async def makedirs(self, path, exist_ok=False):
        if "makedirs" in self._state.sftp_errors:
            raise self._state.sftp_errors["makedirs"]
        self._state.remote_dirs.add(path)

    async def put(self, local_path, remote_path):
        if "put" in self._state.sftp_errors:
            raise self._state.sftp_errors["put"]
        with open(local_path) as f:
            self._state.remote_files[remote_path] = f.read()
        self._state.events.append(f"put:{remote_path}")

    async def get(self, remote_path, local_path):
        if remote_path not in self._state.remote_files:
            raise asyncssh.SFTPNoSuchFile(f"No such file: {remote_path}")
        with open(local_path, "w") as f:
            f.write(self._state.remote_files[remote_path])
        self._state.events.append(f"get:{remote_path}")


class FakeConnection:
    def __init__(self, state):
        self._state = state
        self.closed = False

    def start_sftp_client(self):
        return FakeSFTPClient(self._state)

    async def create_process(self, command, errors="strict"):
        self._state.commands.append(command)
        self._state.events.append("exec")
        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        return FakeProcess(proc, self._state.events, errors, self._state.stream_error)

    def close(self):
        self.closed = True
        self._state.events.append("close")

    async def wait_closed(self):
        pass


class FakeSSH:
    """Records every connection, SFTP operation and command sent to the fake server."""

    def __init__(self):
        self.connect_calls = []
        self.connections = []
        self.connect_error = None
        # Raised by the stdout reader once some output has been read.
        self.stream_error = None
        self.sftp_errors = {}
        self.remote_dirs = set()
        self.remote_files = {}
        self.commands = []
        self.events = []


@pytest.fixture
def fake_ssh(monkeypatch):
    """Replace asyncssh.connect with an in-memory fake server."""
    state = FakeSSH()

    async def _connect(host, **kwargs):
        state.connect_calls.append((host, kwargs))
        if state.connect_error is not None:
            raise state.connect_error
        conn = FakeConnection(state)
        state.connections.append(conn)
        return conn

    monkeypatch.setattr(asyncssh, "connect", _connect)
    return state


# ── Config fixtures ─────────────────────────────────────────────────


@pytest.fixture
def make_server_config():
    """Return a factory for ServerConfig with overridable fields."""

    def _make(**overrides):
        values = {
            "host": "203.0.113.7",
            "username": "root",
            "password": "RootPassw0rd!",
            "new_user": NewUserConfig(ssh_port=2222, name="vpnadmin", password="NewUserPassw0rd"),
            "alert_email": "ops@example.com",
            "client_name": "laptop",
            "server_name": "gw-sgp",
            "install_plan": InstallPlan.WITH_VPN_DOWNLOAD,
        }
        values.update(overrides)
        return ServerConfig(**values)

    return _make


@pytest.fixture
def script_dir(tmp_path):
    """Local scripts directory containing the default setup scripts."""
    scripts = tmp_path / "scripts"
    scripts.mkdir()
    for name in ("common.sh", "harden.sh", "setup.sh", "wireguard.sh"):
        (scripts / name).write_text(f"#!/bin/bash\necho {name}\n")
    return scripts


@pytest.fixture
def install_config(script_dir, tmp_path):
    return InstallConfig(
        local_script_dir=str(script_dir),
        local_output_dir=str(tmp_path / "out"),
    )
