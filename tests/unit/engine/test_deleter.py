"""Unit tests for the escalating item deleter."""

import pickle
from pathlib import Path
from unittest.mock import MagicMock, patch

from forcerm.core.platform import HostCapabilities
from forcerm.engine.deleter import (
    ItemDeleter,
    Rung,
    build_ladder,
    force_remove_dir_command,
    make_escalated_file_delete,
    remove_empty_dir,
    unlink_file,
)
from forcerm.models.items import ItemKind
from forcerm.utils.shell import CommandResult


def _names(rungs: tuple[Rung, ...]) -> list[str]:
    return [rung.name for rung in rungs]


class TestBuildLadder:
    """Tests for build_ladder function."""

    def test_windows_file_ladder(self, windows_caps: HostCapabilities) -> None:
        """Windows files get all four rungs with growing budgets."""
        ladder = build_ladder(ItemKind.FILE, windows_caps)

        assert _names(ladder) == ["unlink", "attributes", "del", "takeown"]
        assert [r.timeout for r in ladder] == [0.3, 0.3, 0.5, 2.0]

    def test_windows_directory_ladder(self, windows_caps: HostCapabilities) -> None:
        """Windows directories get the directory variants of the rungs."""
        ladder = build_ladder(ItemKind.DIRECTORY, windows_caps)

        assert _names(ladder) == ["rmdir", "attributes", "rd", "takeown"]
        assert [r.timeout for r in ladder] == [0.3, 0.3, 1.0, 3.0]

    def test_posix_without_commands(self, posix_caps: HostCapabilities) -> None:
        """POSIX hosts without helpers only remove directly."""
        assert _names(build_ladder(ItemKind.FILE, posix_caps)) == ["unlink"]
        assert _names(build_ladder(ItemKind.DIRECTORY, posix_caps)) == ["rmdir"]

    def test_posix_with_commands(self) -> None:
        """rm and rmdir are added as best-effort system deletes."""
        caps = HostCapabilities(
            windows=False, elevated=False, user="u", commands=frozenset({"rm", "rmdir"})
        )

        assert _names(build_ladder(ItemKind.FILE, caps)) == ["unlink", "rm"]
        assert _names(build_ladder(ItemKind.DIRECTORY, caps)) == ["rmdir", "rmdir-command"]


class TestStrategies:
    """Tests for individual strategy functions."""

    def test_unlink_missing_counts_as_removed(self, tmp_path: Path) -> None:
        """Unlinking a missing file succeeds."""
        assert unlink_file(str(tmp_path / "missing"), 0.3) is True

    def test_remove_empty_dir_refuses_non_empty(self, tmp_path: Path) -> None:
        """Direct directory removal never removes contents."""
        (tmp_path / "d").mkdir()
        (tmp_path / "d" / "f").write_text("f")

        assert remove_empty_dir(str(tmp_path / "d"), 0.3) is False
        assert (tmp_path / "d" / "f").exists()

    @patch("forcerm.engine.deleter.try_command")
    def test_rd_is_not_recursive(self, mock_try: MagicMock, tmp_path: Path) -> None:
        """The directory command never passes /s."""
        mock_try.return_value = CommandResult(stdout="", stderr="", returncode=0)
        target = tmp_path / "d"
        target.mkdir()

        force_remove_dir_command(str(target), 1.0)

        args = mock_try.call_args.args[0]
        assert args == ["cmd", "/c", "rd", "/q", str(target)]
        assert "/s" not in args

    @patch("forcerm.engine.deleter.try_command")
    def test_escalated_delete_takes_ownership_first(
        self, mock_try: MagicMock, tmp_path: Path
    ) -> None:
        """takeown and icacls run before the forced delete."""
        mock_try.return_value = CommandResult(stdout="", stderr="", returncode=0)
        target = tmp_path / "f.txt"
        target.write_text("x")

        make_escalated_file_delete("alice")(str(target), 2.0)

        commands = [c.args[0][0] for c in mock_try.call_args_list]
        assert commands == ["takeown", "icacls", "cmd"]
        icacls_args = mock_try.call_args_list[1].args[0]
        assert "alice:F" in icacls_args

    @patch("forcerm.engine.deleter.try_command")
    def test_command_success_is_verified_by_absence(
        self, mock_try: MagicMock, tmp_path: Path
    ) -> None:
        """A command that exits 0 but leaves the item behind is a failure."""
        mock_try.return_value = CommandResult(stdout="", stderr="", returncode=0)
        target = tmp_path / "d"
        target.mkdir()

        assert force_remove_dir_command(str(target), 1.0) is False


class TestItemDeleter:
    """Tests for ItemDeleter class."""

    def test_deletes_file(self, posix_caps: HostCapabilities, tmp_path: Path) -> None:
        """A plain file is removed."""
        target = tmp_path / "f.txt"
        target.write_text("x")

        assert ItemDeleter(posix_caps).delete_file(str(target)) is True
        assert not target.exists()

    def test_already_gone_is_deleted(self, posix_caps: HostCapabilities, tmp_path: Path) -> None:
        """A path that no longer exists counts as deleted."""
        assert ItemDeleter(posix_caps).delete_file(str(tmp_path / "missing")) is True

    def test_empty_directory_removed(self, posix_caps: HostCapabilities, tmp_path: Path) -> None:
        """An empty directory is removed."""
        target = tmp_path / "d"
        target.mkdir()

        assert ItemDeleter(posix_caps).delete_directory(str(target)) is True
        assert not target.exists()

    def test_non_empty_directory_kept(self, posix_caps: HostCapabilities, tmp_path: Path) -> None:
        """A non-empty directory is reported as failed and left intact."""
        target = tmp_path / "d"
        target.mkdir()
        (target / "keep.txt").write_text("k")

        assert ItemDeleter(posix_caps).delete_directory(str(target)) is False
        assert (target / "keep.txt").exists()

    def test_escalates_until_a_rung_succeeds(
        self, posix_caps: HostCapabilities, tmp_path: Path
    ) -> None:
        """Later rungs run only after earlier ones fail."""
        target = tmp_path / "f.txt"
        target.write_text("x")
        first = MagicMock(return_value=False)
        third = MagicMock(return_value=True)
        ladder = (
            Rung("first", first, 0.1),
            Rung("second", unlink_file, 0.1),
            Rung("third", third, 0.1),
        )

        with patch("forcerm.engine.deleter.build_ladder", return_value=ladder):
            deleter = ItemDeleter(posix_caps)

        assert deleter.delete_file(str(target)) is True
        first.assert_called_once_with(str(target), 0.1)
        third.assert_not_called()

    def test_crashing_rung_does_not_stop_ladder(
        self, posix_caps: HostCapabilities, tmp_path: Path
    ) -> None:
        """An exception inside a strategy moves on to the next rung."""
        target = tmp_path / "f.txt"
        target.write_text("x")
        ladder = (
            Rung("broken", MagicMock(side_effect=RuntimeError("boom")), 0.1),
            Rung("unlink", unlink_file, 0.1),
        )

        with patch("forcerm.engine.deleter.build_ladder", return_value=ladder):
            deleter = ItemDeleter(posix_caps)

        assert deleter.delete_file(str(target)) is True

    def test_all_rungs_failing(self, posix_caps: HostCapabilities, tmp_path: Path) -> None:
        """When every rung fails the item is reported as failed."""
        target = tmp_path / "f.txt"
        target.write_text("x")
        ladder = (Rung("nope", MagicMock(return_value=False), 0.1),)

        with patch("forcerm.engine.deleter.build_ladder", return_value=ladder):
            deleter = ItemDeleter(posix_caps)

        assert deleter.delete_file(str(target)) is False
        assert target.exists()

    def test_pickles_for_worker_processes(self, windows_caps: HostCapabilities) -> None:
        """The deleter survives pickling with its ladders rebuilt."""
        clone = pickle.loads(pickle.dumps(ItemDeleter(windows_caps)))

        assert clone.capabilities == windows_caps
        assert _names(clone.ladder(ItemKind.FILE)) == ["unlink", "attributes", "del", "takeown"]
