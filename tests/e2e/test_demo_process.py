"""
E2E tests for the demo command running as a real process.

Each test starts `python -m procexit demo` and checks the exit status the
operating system sees, including signal delivery and escalation.
"""

import os
import signal
import subprocess
import sys
import time

import pytest


def _env(project_root) -> dict[str, str]:
    env = {k: v for k, v in os.environ.items() if not k.startswith("PROCEXIT_")}
    env["PYTHONPATH"] = str(project_root)
    env["PYTHONUNBUFFERED"] = "1"
    return env


def _start(project_root, *args: str) -> subprocess.Popen:
    return subprocess.Popen(
        [sys.executable, "-m", "procexit", "demo", *args],
        cwd=project_root,
        env=_env(project_root),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )


def _wait_running(proc: subprocess.Popen) -> None:
    """Read stdout until the demo reports it is running (handlers installed)."""
    assert proc.stdout is not None
    for line in proc.stdout:
        if "demo running" in line:
            return
    pytest.fail(f"demo exited before running: {proc.wait()} {proc.stderr.read()}")


def _run(project_root, *args: str, timeout: float = 10) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "procexit", "demo", *args],
        cwd=project_root,
        env=_env(project_root),
        capture_output=True,
        text=True,
        timeout=timeout,
    )


@pytest.mark.e2e
@pytest.mark.slow
class TestDemoExitStatus:
    """Exit statuses observed by the parent process."""

    def test_no_outcome_exits_zero(self, project_root):
        result = _run(project_root, "--duration", "0.2")

        assert result.returncode == 0
        assert "demo finished" in result.stdout
        assert result.stderr == ""

    def test_explicit_exit_code(self, project_root):
        result = _run(project_root, "--exit-code", "7")

        assert result.returncode == 7
        assert "demo finished" not in result.stdout

    def test_reported_failure(self, project_root):
        result = _run(project_root, "--fail", "database unreachable")

        assert result.returncode == 2
        assert result.stderr.startswith("database unreachable\n")
        assert "_cmd_demo" in result.stderr

    def test_single_signal_drains_and_exits_130(self, project_root):
        proc = _start(project_root, "--workers", "3", "--unit-secs", "0.2")
        try:
            _wait_running(proc)
            proc.send_signal(signal.SIGTERM)
            status = proc.wait(timeout=10)
        finally:
            proc.kill()

        assert status == 130
        assert "demo finished" not in proc.stdout.read()

    def test_second_signal_forces_exit(self, project_root):
        proc = _start(project_root, "--unit-secs", "30")
        try:
            _wait_running(proc)
            started = time.monotonic()
            proc.send_signal(signal.SIGINT)
            time.sleep(0.3)
            proc.send_signal(signal.SIGINT)
            status = proc.wait(timeout=10)
            elapsed = time.monotonic() - started
        finally:
            proc.kill()

        assert status == 130
        assert elapsed < 10

    def test_configured_signal(self, project_root, temp_dir):
        path = temp_dir / "procexit.yaml"
        path.write_text("lifecycle:\n  signals: [SIGUSR1]\n")
        proc = subprocess.Popen(
            [sys.executable, "-m", "procexit", "-c", str(path), "demo"],
            cwd=project_root,
            env=_env(project_root),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
        try:
            _wait_running(proc)
            proc.send_signal(signal.SIGUSR1)
            status = proc.wait(timeout=10)
        finally:
            proc.kill()

        assert status == 130
