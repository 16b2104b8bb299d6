"""Series grouping module for clustering files by shared filename prefix."""

import logging

from .models import FileRecord
from .parser import CJK_NUMERALS

logger = logging.getLogger(__name__)


class FileGroup:
    """A node in the prefix tree built while grouping files into series."""

    def __init__(self, prefix: str, contents: list[FileRecord], min_size: int = 3):
        self.prefix = prefix
        self.contents = contents
        self.min_size = min_size
        self.groups: list["FileGroup"] = []

    def split(self) -> None:
        """
        Grow the shared prefix and split into child groups where it makes sense.

        The prefix is extended one character at a time while every member
        agrees on the next character. At the first disagreement, members are
        bucketed by their next character. Splitting stops when the
        distinguishing characters look like episode numbers or no bucket is
        large enough to form a series on its own.
        """
        if len(self.contents) < self.min_size:
            self._assign()
            return

        prefix = self.prefix
        while True:
            buckets: dict[str, list[FileRecord]] = {}
            pos = len(prefix)
            for record in self.contents:
                if pos < len(record.filename):
                    key = prefix + record.filename[pos]
                else:
                    key = prefix
                buckets.setdefault(key, []).append(record)

            if len(buckets) > 1:
                break

            (key,) = buckets
            if key == prefix:
                # every member is exhausted, so the names are identical
                self.prefix = prefix
                self._assign()
                return
            prefix = key

        self.prefix = prefix
        distinguishing = [key[-1] for key in buckets if key != prefix]
        largest = max(len(members) for members in buckets.values())

        if self._is_numbering(distinguishing) or largest < self.min_size:
            self._assign()
            return

        self.groups = [
            FileGroup(key, members, self.min_size) for key, members in sorted(buckets.items())
        ]
        for group in self.groups:
            group.split()

    @staticmethod
    def _is_numbering(chars: list[str]) -> bool:
        cjk_count = 0
        for char in chars:
            if char.isdecimal():
                return True
            if char in CJK_NUMERALS:
                cjk_count += 1
                if cjk_count >= 3:
                    return True
        return False

    def _assign(self) -> None:
        for record in self.contents:
            record.assign_series(self.prefix)

    def flatten(self) -> dict[str, list[FileRecord]]:
        """
        Collect the leaf groups of this tree.

        Members are keyed by the prefix they were assigned, so files whose
        whole name equals the leaf prefix land under the empty prefix.

        Returns:
            Dictionary mapping each series prefix to its member files
        """
        result: dict[str, list[FileRecord]] = {}

        def visit(group: "FileGroup") -> None:
            if group.groups:
                for child in group.groups:
                    visit(child)
            else:
                for record in group.contents:
                    result.setdefault(record.prefix, []).append(record)

        visit(self)
        return result

    def __repr__(self) -> str:
        return (
            f"FileGroup(prefix={self.prefix!r}, files={len(self.contents)}, "
            f"groups={len(self.groups)})"
        )


class SeriesGrouper:
    """Groups files of one media type into series."""

    def __init__(self, min_series_size: int = 3):
        """
        Initialize the grouper.

        Args:
            min_series_size: Smallest number of files considered a series
        """
        self.min_series_size = min_series_size

    def group(self, files: list[FileRecord]) -> FileGroup:
        """Build the prefix tree for a list of files and assign series prefixes."""
        root = FileGroup("", list(files), self.min_series_size)
        root.split()
        return root

    def group_by_series(self, files: list[FileRecord]) -> dict[str, list[FileRecord]]:
        """
        Group files by their series prefix.

        Args:
            files: Files of a single media type

        Returns:
            Dictionary mapping series prefixes to member files

        Example:
            >>> grouper = SeriesGrouper()
            >>> groups = grouper.group_by_series(videos)  # Show.S01E01 .. Show.S01E12
            >>> list(groups)
            ['Show.S01E']
        """
        series = self.group(files).flatten()
        logger.info(f"Grouped {len(files)} files into {len(series)} series")
        for prefix, members in series.items():
            logger.debug(f"Series {prefix!r}: {len(members)} files")
        return series
