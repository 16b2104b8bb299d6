"""Re-ranking of matched subtitles by user priority strings."""

import logging

from .models import FileRecord, MatchResult
from .parser import count_occurrences

logger = logging.getLogger(__name__)


def parse_priority_strings(raw: str | None) -> list[str]:
    """
    Split a comma-separated priority list into trimmed, non-empty entries.

    Example:
        >>> parse_priority_strings(" chs, eng ,,")
        ['chs', 'eng']
    """
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


class PriorityReorderer:
    """Moves subtitles mentioning priority strings to the front of a video's list."""

    def __init__(self, priority_strings: list[str]):
        """
        Initialize the reorderer.

        Args:
            priority_strings: Substrings that mark a preferred subtitle
        """
        self.priority_strings = priority_strings

    @classmethod
    def from_config_string(cls, raw: str | None) -> "PriorityReorderer":
        return cls(parse_priority_strings(raw))

    def count_occurrences(self, filename: str) -> int:
        """Total occurrences of all priority strings in a filename."""
        return sum(count_occurrences(filename, needle) for needle in self.priority_strings)

    def reorder(
        self, result: MatchResult, video: FileRecord, attached: list[FileRecord]
    ) -> list[str]:
        """
        Promote the subtitles attached to a video that stand out by priority.

        Counts shared by every attached subtitle are treated as noise: only
        subtitles scoring above the minimum count are promoted, in their
        existing relative order.

        Args:
            result: Mapping being built for the current run
            video: Video whose subtitle list is reordered
            attached: Subtitles attached to the video in this run

        Returns:
            URLs that were promoted
        """
        if not self.priority_strings or not attached:
            return []

        occurrences = {sub.url: self.count_occurrences(sub.filename) for sub in attached}
        minimum = min(occurrences.values())
        promoted = [
            url for url in result.subs_for(video) if occurrences.get(url, minimum) > minimum
        ]
        if promoted:
            result.promote(video, promoted)
            logger.debug(f"Promoted {len(promoted)} subtitles for {video}")
        return promoted
