"""Exclusion filtering for scanned items.

Exclusion patterns are simple globs: ``*`` matches any run of
characters (including path separators), ``?`` matches one character,
and everything else is literal. Matching is anchored and
case-insensitive. A pattern is tested against both the path relative
to the root and the bare file name; either match excludes the item.
"""

import functools
import os
import re
from collections.abc import Iterable, Sequence
from collections.abc import Set as AbstractSet
from pathlib import Path

from forcerm.models.items import FilterDecision, FilterResult, ScannedItem


@functools.lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a glob pattern into an anchored, case-insensitive regex.

    Args:
        pattern: Glob pattern (already trimmed).

    Returns:
        Compiled regular expression matching the whole string.
    """
    parts: list[str] = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("^" + "".join(parts) + "$", re.IGNORECASE)


def _clean_patterns(patterns: Iterable[str]) -> list[str]:
    return [p.strip() for p in patterns if p and p.strip()]


def _candidates(path: str, root: str) -> list[str]:
    relative = os.path.relpath(path, root)
    posix_relative = relative.replace(os.sep, "/")
    candidates = [posix_relative, os.path.basename(path)]
    if posix_relative != relative:
        candidates.append(relative)
    return candidates


def matching_pattern(path: str, root: str, patterns: Sequence[str]) -> str | None:
    """Return the first pattern that excludes ``path``, if any.

    Args:
        path: Absolute path of the item.
        root: Deletion root the relative path is computed against.
        patterns: Exclusion patterns; blank entries are ignored.

    Returns:
        The matching (trimmed) pattern, or None.
    """
    cleaned = _clean_patterns(patterns)
    if not cleaned:
        return None

    candidates = _candidates(path, root)
    for pattern in cleaned:
        regex = glob_to_regex(pattern)
        if any(regex.match(candidate) for candidate in candidates):
            return pattern
    return None


def should_exclude(path: str | Path, root: str | Path, patterns: Sequence[str]) -> bool:
    """Check whether an item is excluded from deletion.

    Args:
        path: Absolute path of the item.
        root: Deletion root.
        patterns: Exclusion patterns. An empty list never excludes.

    Returns:
        True if any pattern matches the relative path or the file name.
    """
    return matching_pattern(str(path), str(root), patterns) is not None


class ExclusionFilter:
    """Splits scanned items into the delete-set and the kept set.

    A directory matched by a pattern protects its whole subtree: every
    item beneath it is excluded too, otherwise deleting its contents
    would defeat the exclusion.

    Args:
        root: Deletion root.
        patterns: Exclusion patterns in caller order.
    """

    def __init__(self, root: str | Path, patterns: Sequence[str]) -> None:
        self._root = str(root)
        self._patterns = _clean_patterns(patterns)

    @property
    def patterns(self) -> list[str]:
        return list(self._patterns)

    def decide(
        self, item: ScannedItem, protected_dirs: AbstractSet[str] = frozenset()
    ) -> FilterDecision:
        """Decide whether a single item is excluded.

        Args:
            item: The scanned item.
            protected_dirs: Already-excluded directories whose subtrees are kept.

        Returns:
            FilterDecision for the item.
        """
        pattern = matching_pattern(item.path, self._root, self._patterns)
        if pattern is not None:
            return FilterDecision(item=item, excluded=True, pattern=pattern)

        if protected_dirs and self._has_protected_ancestor(item.path, protected_dirs):
            return FilterDecision(item=item, excluded=True, pattern=None)

        return FilterDecision(item=item, excluded=False)

    def split(self, items: Iterable[ScannedItem]) -> FilterResult:
        """Partition items into included and excluded.

        Args:
            items: Scanned items in discovery order.

        Returns:
            FilterResult whose two halves are disjoint and together cover
            every input item.
        """
        ordered = list(items)
        if not self._patterns:
            return FilterResult(included=tuple(ordered), excluded=())

        # Decide directories first so the order of ``items`` cannot matter
        protected = {
            item.path for item in ordered if item.is_directory and self.decide(item).excluded
        }

        included: list[ScannedItem] = []
        excluded: list[ScannedItem] = []
        for item in ordered:
            decision = self.decide(item, protected)
            (excluded if decision.excluded else included).append(item)

        return FilterResult(included=tuple(included), excluded=tuple(excluded))

    def _has_protected_ancestor(self, path: str, protected_dirs: AbstractSet[str]) -> bool:
        """Walk up from ``path`` to the root, looking for a protected directory."""
        root = self._root.rstrip(os.sep) or os.sep
        parent = os.path.dirname(path)
        while len(parent) > len(root):
            if parent in protected_dirs:
                return True
            above = os.path.dirname(parent)
            if above == parent:
                break
            parent = above
        return False
