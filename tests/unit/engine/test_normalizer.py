"""Unit tests for ownership, permission and attribute normalization."""

import os
import stat
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from forcerm.core.platform import HostCapabilities
from forcerm.engine.normalizer import Normalizer
from forcerm.utils.shell import CommandResult


@pytest.fixture
def elevated_posix_caps() -> HostCapabilities:
    """Root on a POSIX host with chattr available."""
    return HostCapabilities(
        windows=False, elevated=True, user="root", commands=frozenset({"chattr"})
    )


class TestNormalizerPosix:
    """Tests for Normalizer on POSIX hosts."""

    def test_ownership_skipped_when_unprivileged(
        self, posix_caps: HostCapabilities, tmp_path: Path
    ) -> None:
        """Ownership changes are skipped without root."""
        outcome = Normalizer(posix_caps).take_ownership(tmp_path)

        assert outcome.skipped is True
        assert outcome.success is True

    def test_attributes_skipped_when_unprivileged(
        self, posix_caps: HostCapabilities, tmp_path: Path
    ) -> None:
        """Clearing immutable flags is skipped without root."""
        assert Normalizer(posix_caps).clear_attributes(tmp_path).skipped is True

    def test_grant_permissions_adds_owner_bits(
        self, posix_caps: HostCapabilities, scenario_tree: Path
    ) -> None:
        """Files become owner read/write, directories owner rwx."""
        target = scenario_tree / "a" / "x.txt"
        os.chmod(target, 0)
        os.chmod(scenario_tree / "a" / "c", stat.S_IRUSR)

        outcome = Normalizer(posix_caps).grant_permissions(scenario_tree)

        assert outcome.success is True
        assert outcome.warning is None
        assert stat.S_IMODE(target.stat().st_mode) & 0o600 == 0o600
        assert stat.S_IMODE((scenario_tree / "a" / "c").stat().st_mode) & 0o700 == 0o700

    def test_grant_permissions_is_idempotent(
        self, posix_caps: HostCapabilities, scenario_tree: Path
    ) -> None:
        """Running twice leaves the same result and no warnings."""
        normalizer = Normalizer(posix_caps)
        normalizer.grant_permissions(scenario_tree)

        assert normalizer.grant_permissions(scenario_tree).warning is None

    @patch("forcerm.engine.normalizer.os.lchown")
    def test_ownership_walks_tree_when_elevated(
        self,
        mock_lchown: MagicMock,
        elevated_posix_caps: HostCapabilities,
        scenario_tree: Path,
    ) -> None:
        """Every item including the root is chowned to the effective user."""
        outcome = Normalizer(elevated_posix_caps).take_ownership(scenario_tree)

        assert outcome.success is True
        chowned = {c.args[0] for c in mock_lchown.call_args_list}
        assert str(scenario_tree) in chowned
        assert str(scenario_tree / "a" / "b" / "y.txt") in chowned
        assert len(chowned) == 6

    @patch("forcerm.engine.normalizer.os.lchown", side_effect=PermissionError("nope"))
    def test_partial_failures_become_warning(
        self,
        _mock_lchown: MagicMock,
        elevated_posix_caps: HostCapabilities,
        scenario_tree: Path,
    ) -> None:
        """Per-item failures are tolerated and summarized."""
        outcome = Normalizer(elevated_posix_caps).take_ownership(scenario_tree)

        assert outcome.success is True
        assert outcome.warning is not None
        assert "chown failed on 6 item(s)" in outcome.warning

    @patch("forcerm.engine.normalizer.try_command")
    def test_chattr_when_elevated(
        self,
        mock_try: MagicMock,
        elevated_posix_caps: HostCapabilities,
        tmp_path: Path,
    ) -> None:
        """chattr clears immutable and append-only flags recursively."""
        mock_try.return_value = CommandResult(stdout="", stderr="", returncode=0)

        outcome = Normalizer(elevated_posix_caps).clear_attributes(tmp_path)

        assert outcome.success is True
        assert mock_try.call_args.args[0] == ["chattr", "-R", "-f", "-i", "-a", str(tmp_path)]


class TestNormalizerWindows:
    """Tests for Normalizer on Windows hosts."""

    @patch("forcerm.engine.normalizer.try_command")
    def test_take_ownership_command(
        self, mock_try: MagicMock, windows_caps: HostCapabilities, tmp_path: Path
    ) -> None:
        """takeown runs recursively with default answers."""
        mock_try.return_value = CommandResult(stdout="", stderr="", returncode=0)

        outcome = Normalizer(windows_caps, timeout=5.0).take_ownership(tmp_path)

        assert outcome.success is True
        assert mock_try.call_args.args[0] == ["takeown", "/f", str(tmp_path), "/r", "/d", "y"]
        assert mock_try.call_args.kwargs["timeout"] == 5.0

    @patch("forcerm.engine.normalizer.try_command")
    def test_grant_permissions_command(
        self, mock_try: MagicMock, windows_caps: HostCapabilities, tmp_path: Path
    ) -> None:
        """icacls grants the acting user full control."""
        mock_try.return_value = CommandResult(stdout="", stderr="", returncode=0)

        Normalizer(windows_caps).grant_permissions(tmp_path)

        args = mock_try.call_args.args[0]
        assert args[:4] == ["icacls", str(tmp_path), "/grant", "tester:F"]

    @patch("forcerm.engine.normalizer.try_command")
    def test_clear_attributes_command(
        self, mock_try: MagicMock, windows_caps: HostCapabilities, tmp_path: Path
    ) -> None:
        """attrib clears flags on everything below the root."""
        mock_try.return_value = CommandResult(stdout="", stderr="", returncode=0)

        Normalizer(windows_caps).clear_attributes(tmp_path)

        args = mock_try.call_args.args[0]
        assert args[0] == "attrib"
        assert args[-2:] == ["/s", "/d"]

    @patch("forcerm.engine.normalizer.try_command")
    def test_nonzero_exit_is_warning(
        self, mock_try: MagicMock, windows_caps: HostCapabilities, tmp_path: Path
    ) -> None:
        """A partially failing command still counts as run."""
        mock_try.return_value = CommandResult(stdout="", stderr="Access denied", returncode=5)

        outcome = Normalizer(windows_caps).take_ownership(tmp_path)

        assert outcome.success is True
        assert outcome.warning is not None
        assert "Access denied" in outcome.warning

    @patch("forcerm.engine.normalizer.try_command", return_value=None)
    def test_timeout_is_failure(
        self, _mock_try: MagicMock, windows_caps: HostCapabilities, tmp_path: Path
    ) -> None:
        """A command that times out or cannot start fails the step."""
        outcome = Normalizer(windows_caps).grant_permissions(tmp_path)

        assert outcome.success is False
        assert outcome.warning is not None
