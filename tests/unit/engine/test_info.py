"""Unit tests for folder info calculation."""

from pathlib import Path

import pytest
from forcerm.engine.errors import FolderNotFoundError, NotADirectoryPathError
from forcerm.engine.info import calculate_folder_info


class TestCalculateFolderInfo:
    """Tests for calculate_folder_info function."""

    def test_counts_and_size(self, scenario_tree: Path) -> None:
        """Files, folders and total size are reported."""
        (scenario_tree / "a" / "big.bin").write_bytes(b"\x00" * 1000)

        info = calculate_folder_info(scenario_tree)

        assert info.file_count == 3
        assert info.folder_count == 3
        assert info.size == 1002
        assert info.limited is False

    def test_item_cap(self, tmp_path: Path) -> None:
        """Counting stops at max_items and is marked limited."""
        for i in range(5):
            (tmp_path / f"f{i}.txt").write_text("x")

        info = calculate_folder_info(tmp_path, max_items=3)

        assert info.file_count == 3
        assert info.limited is True

    def test_depth_cap(self, tmp_path: Path) -> None:
        """Directories beyond max_depth are counted but not entered."""
        (tmp_path / "f1.txt").write_text("x")
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "f2.txt").write_text("y")

        info = calculate_folder_info(tmp_path, max_depth=1)

        assert info.file_count == 1
        assert info.folder_count == 1

    def test_empty_folder(self, tmp_path: Path) -> None:
        """An empty folder has zero counts."""
        info = calculate_folder_info(tmp_path)

        assert (info.size, info.file_count, info.folder_count) == (0, 0, 0)

    def test_missing_folder(self, tmp_path: Path) -> None:
        """A missing folder raises FolderNotFoundError."""
        with pytest.raises(FolderNotFoundError):
            calculate_folder_info(tmp_path / "missing")

    def test_file_path(self, tmp_path: Path) -> None:
        """A file path raises NotADirectoryPathError."""
        (tmp_path / "f").write_text("x")

        with pytest.raises(NotADirectoryPathError):
            calculate_folder_info(tmp_path / "f")
