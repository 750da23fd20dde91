"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from forcerm.core.platform import HostCapabilities
from forcerm.core.settings import EngineSettings


@pytest.fixture
def posix_caps() -> HostCapabilities:
    """Unprivileged POSIX host without helper commands."""
    return HostCapabilities(windows=False, elevated=False, user="tester")


@pytest.fixture
def windows_caps() -> HostCapabilities:
    """Elevated Windows host with every helper command."""
    return HostCapabilities(
        windows=True,
        elevated=True,
        user="tester",
        commands=frozenset({"attrib", "takeown", "icacls", "cmd"}),
    )


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Directory receiving per-run logs."""
    return tmp_path / "logs"


@pytest.fixture
def thread_settings(log_dir: Path) -> EngineSettings:
    """Settings for in-process engine runs without host preparation."""
    return EngineSettings(
        max_threads=4,
        worker_timeout_seconds=30.0,
        isolation="thread",
        prepare=False,
        reap_handles=False,
        settle_delay_seconds=0.0,
        log_dir=log_dir,
    )


@pytest.fixture
def scenario_tree(tmp_path: Path) -> Path:
    """Tree with ``a/x.txt``, ``a/b/y.txt`` and an empty ``a/c`` (5 items)."""
    root = tmp_path / "target"
    (root / "a" / "b").mkdir(parents=True)
    (root / "a" / "c").mkdir()
    (root / "a" / "x.txt").write_text("x")
    (root / "a" / "b" / "y.txt").write_text("y")
    return root


@pytest.fixture
def mixed_tree(tmp_path: Path) -> Path:
    """Tree mixing temp files, logs and a kept directory."""
    root = tmp_path / "mixed"
    (root / "build" / "obj").mkdir(parents=True)
    (root / "keep").mkdir()
    (root / "a.tmp").write_text("1")
    (root / "notes.txt").write_text("2")
    (root / "build" / "out.TMP").write_text("3")
    (root / "build" / "obj" / "main.o").write_bytes(b"\x00" * 16)
    (root / "keep" / "data.bin").write_bytes(b"\x01" * 8)
    return root


def _snapshot(root: Path) -> dict[str, bytes | None]:
    return {
        str(p.relative_to(root)): (None if p.is_dir() else p.read_bytes())
        for p in sorted(root.rglob("*"))
    }


@pytest.fixture
def snapshot() -> Callable[[Path], dict[str, bytes | None]]:
    """Map every path under a root to its content (None for directories)."""
    return _snapshot
