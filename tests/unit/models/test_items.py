"""Unit tests for scanned item models."""

import pytest
from forcerm.models.items import FilterResult, ItemKind, ScannedItem, ScanResult


class TestScannedItem:
    """Tests for ScannedItem model."""

    def test_kind_helpers(self) -> None:
        """is_file and is_directory reflect the kind."""
        item = ScannedItem(path="/r/f", kind=ItemKind.FILE, order=0)

        assert item.is_file is True
        assert item.is_directory is False

    def test_empty_path_rejected(self) -> None:
        """An empty path is invalid."""
        with pytest.raises(ValueError, match="Path cannot be empty"):
            ScannedItem(path="", kind=ItemKind.FILE, order=0)

    def test_negative_order_rejected(self) -> None:
        """Discovery order cannot be negative."""
        with pytest.raises(ValueError, match="Order must be non-negative"):
            ScannedItem(path="/r/f", kind=ItemKind.FILE, order=-1)

    def test_kind_is_string_enum(self) -> None:
        """ItemKind values serialize as plain strings."""
        assert ItemKind.DIRECTORY.value == "directory"
        assert ItemKind("file") is ItemKind.FILE


class TestScanResult:
    """Tests for ScanResult model."""

    def test_splits_files_and_directories(self) -> None:
        """files and directories preserve discovery order."""
        items = (
            ScannedItem(path="/r/a", kind=ItemKind.DIRECTORY, order=0),
            ScannedItem(path="/r/x", kind=ItemKind.FILE, order=1),
            ScannedItem(path="/r/a/y", kind=ItemKind.FILE, order=2),
        )

        result = ScanResult(root="/r", items=items)

        assert [i.path for i in result.files] == ["/r/x", "/r/a/y"]
        assert [i.path for i in result.directories] == ["/r/a"]
        assert result.total == 3


class TestFilterResult:
    """Tests for FilterResult model."""

    def test_included_files_and_excluded_directories(self) -> None:
        """Convenience views pick the right kinds."""
        result = FilterResult(
            included=(
                ScannedItem(path="/r/a", kind=ItemKind.DIRECTORY, order=0),
                ScannedItem(path="/r/a/f", kind=ItemKind.FILE, order=1),
            ),
            excluded=(
                ScannedItem(path="/r/k", kind=ItemKind.DIRECTORY, order=2),
                ScannedItem(path="/r/k/g", kind=ItemKind.FILE, order=3),
            ),
        )

        assert result.included_files == ["/r/a/f"]
        assert result.excluded_directories == frozenset({"/r/k"})
