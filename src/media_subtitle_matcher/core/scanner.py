"""Directory scanning for media files and extra subtitle locations."""

import logging
import os
from pathlib import Path

from .models import (
    Diagnostic,
    DiagnosticKind,
    FileRecord,
    Inventory,
    MatcherConfig,
    MediaType,
)
from .parser import is_hidden, natural_sort_key

logger = logging.getLogger(__name__)

# Directories that behave as opaque files on macOS
PACKAGE_SUFFIXES = frozenset(
    {".app", ".bundle", ".framework", ".plugin", ".kext", ".pkg", ".mpkg", ".photoslibrary"}
)


def _sorted_records(records: list[FileRecord]) -> list[FileRecord]:
    return sorted(records, key=lambda r: natural_sort_key(r.path.name))


class MediaFileScanner:
    """Lists a single directory level and classifies media files."""

    def __init__(self, config: MatcherConfig | None = None):
        """
        Initialize the scanner with configuration.

        Args:
            config: Matcher configuration, defaults to MatcherConfig()
        """
        self.config = config or MatcherConfig()
        self.diagnostics: list[Diagnostic] = []

    def is_package(self, path: Path) -> bool:
        """Check if a directory is a package bundle."""
        return path.suffix.lower() in PACKAGE_SUFFIXES

    def _read_entries(self, directory: Path) -> list[os.DirEntry] | None:
        try:
            with os.scandir(directory) as it:
                return [entry for entry in it if not is_hidden(entry.name)]
        except OSError as e:
            logger.warning(f"Cannot read directory {directory}: {e}")
            self.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.DIRECTORY_UNREADABLE,
                    message=str(e),
                    path=directory,
                )
            )
            return None

    def list_directory(self, directory: Path) -> list[Path]:
        """
        List the regular, non-hidden files directly inside a directory.

        Args:
            directory: Directory to list

        Returns:
            File paths in natural order; empty if the directory cannot be read
        """
        entries = self._read_entries(directory)
        if entries is None:
            return []

        files = []
        for entry in entries:
            try:
                if entry.is_file():
                    files.append(Path(entry.path))
            except OSError as e:
                logger.debug(f"Skipping {entry.path}: {e}")

        return sorted(files, key=lambda p: natural_sort_key(p.name))

    def list_subdirectories(self, directory: Path) -> list[Path]:
        """List immediate non-hidden, non-package subdirectories in natural order."""
        entries = self._read_entries(directory)
        if entries is None:
            return []

        dirs = []
        for entry in entries:
            try:
                if entry.is_dir() and not self.is_package(Path(entry.path)):
                    dirs.append(Path(entry.path))
            except OSError as e:
                logger.debug(f"Skipping {entry.path}: {e}")

        return sorted(dirs, key=lambda p: natural_sort_key(p.name))

    def classify(self, file_path: Path) -> FileRecord | None:
        """
        Build a record for a file if its extension is a known media type.

        Args:
            file_path: Path to the file

        Returns:
            FileRecord for media files, None otherwise
        """
        media_type = self.config.media_type_for(file_path.suffix)
        if media_type is None:
            return None
        return FileRecord.from_path(file_path, media_type)

    def build_inventory(self, directory: Path) -> Inventory:
        """
        Classify the media files of a directory.

        Args:
            directory: Directory containing the current media file

        Returns:
            Inventory with naturally sorted video, audio and subtitle lists
        """
        grouped: dict[MediaType, list[FileRecord]] = {
            MediaType.VIDEO: [],
            MediaType.AUDIO: [],
            MediaType.SUBTITLE: [],
        }

        for file_path in self.list_directory(directory):
            record = self.classify(file_path)
            if record:
                grouped[record.media_type].append(record)

        inventory = Inventory(
            videos=_sorted_records(grouped[MediaType.VIDEO]),
            audios=_sorted_records(grouped[MediaType.AUDIO]),
            subtitles=_sorted_records(grouped[MediaType.SUBTITLE]),
        )
        logger.info(
            f"Inventory of {directory}: {len(inventory.videos)} videos, "
            f"{len(inventory.audios)} audio files, {len(inventory.subtitles)} subtitles"
        )
        return inventory


class SubtitleLocator:
    """Collects subtitles from user-configured search paths."""

    def __init__(self, scanner: MediaFileScanner):
        self.scanner = scanner

    @staticmethod
    def split_patterns(raw: str) -> list[str]:
        """Split a colon-separated search path, dropping empty entries."""
        return [pattern for pattern in raw.split(":") if pattern]

    def resolve_pattern(self, pattern: str, media_dir: Path) -> list[Path]:
        """
        Turn one search path pattern into the directories it names.

        Args:
            pattern: A path, optionally starting with ``~`` and ending in ``/*``
            media_dir: Directory of the current media file, for relative patterns

        Returns:
            Directories to scan for subtitles

        Example:
            ``./*`` names every subdirectory of the media directory and
            ``~/Subtitles`` names that one directory.
        """
        path = pattern
        if path.startswith("~"):
            path = os.path.expanduser(path)
        if path.endswith("/"):
            path = path[:-1]
        has_wildcard = path.endswith("/*")
        if has_wildcard:
            path = path[:-2]

        if pattern.startswith("/") or pattern.startswith("~"):
            base = Path(path or "/")
        else:
            base = media_dir / path

        if has_wildcard:
            return self.scanner.list_subdirectories(base)
        return [base]

    def resolve_search_dirs(self, raw_patterns: str, media_dir: Path) -> list[Path]:
        """Resolve every pattern of a colon-separated search path."""
        dirs: list[Path] = []
        for pattern in self.split_patterns(raw_patterns):
            dirs.extend(self.resolve_pattern(pattern, media_dir))
        return dirs

    def locate(
        self, subtitles: list[FileRecord], raw_patterns: str, media_dir: Path
    ) -> list[FileRecord]:
        """
        Gather every subtitle available to the current directory.

        Args:
            subtitles: Subtitles already found next to the media file
            raw_patterns: Colon-separated search path patterns
            media_dir: Directory of the current media file

        Returns:
            The original subtitles followed by those found in search paths
        """
        found = list(subtitles)
        sub_exts = self.scanner.config.subtitle_extensions

        for sub_dir in self.resolve_search_dirs(raw_patterns, media_dir):
            for file_path in self.scanner.list_directory(sub_dir):
                if file_path.suffix.lstrip(".").lower() in sub_exts:
                    found.append(FileRecord.from_path(file_path, MediaType.SUBTITLE))

        logger.info(
            f"Found {len(found) - len(subtitles)} additional subtitles in search paths"
        )
        return found
