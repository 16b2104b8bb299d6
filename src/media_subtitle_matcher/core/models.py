"""Pydantic models for media subtitle matcher."""

import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from .parser import extract_episode_token


class MediaType(str, Enum):
    """Media category derived from a file extension."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"


class SubAutoLoadMode(str, Enum):
    """Which subtitle matching strategies are enabled."""

    DISABLED = "disabled"
    EPISODE_ALIGNED = "episode_aligned"
    SUBSTRING = "substring"
    BOTH = "both"

    @property
    def matches_episodes(self) -> bool:
        """Whether subtitles are aligned to videos by episode token."""
        return self in (SubAutoLoadMode.EPISODE_ALIGNED, SubAutoLoadMode.BOTH)

    @property
    def matches_substrings(self) -> bool:
        """Whether subtitles containing the video filename are loaded."""
        return self in (SubAutoLoadMode.SUBSTRING, SubAutoLoadMode.BOTH)


class FileRecord(BaseModel):
    """A classified filesystem entry taking part in a matching run."""

    path: Path = Field(..., frozen=True, description="Absolute path to the file")
    filename: str = Field(..., frozen=True, description="Filename without extension")
    extension: str = Field(..., frozen=True, description="Lowercased extension without dot")
    media_type: MediaType = Field(..., frozen=True, description="Classified media type")

    prefix: str = Field("", description="Series prefix shared with sibling files")
    suffix: str = Field("", description="Remainder of the filename after the prefix")
    name_in_series: str | None = Field(None, description="Episode token within the series")
    is_matched: bool = Field(False, description="Whether a subtitle match was recorded")
    related_subs: list["FileRecord"] = Field(
        default_factory=list, description="Subtitles sharing this file's episode token"
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: Path) -> Path:
        """Ensure path is absolute without following symlinks."""
        return Path(os.path.abspath(v))

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Store extensions lowercased without the leading dot."""
        return v.lstrip(".").lower()

    @classmethod
    def from_path(cls, path: Path, media_type: MediaType) -> "FileRecord":
        """Build a record from a path, splitting off the extension."""
        return cls(
            path=path,
            filename=path.stem,
            extension=path.suffix,
            media_type=media_type,
        )

    @property
    def url(self) -> str:
        """File URL handed to the playback side."""
        return self.path.as_uri()

    def assign_series(self, prefix: str) -> None:
        """
        Attach this record to a series and derive its suffix and episode token.

        A prefix covering the whole filename carries no series information,
        so it is reset to an empty string.
        """
        if len(prefix) >= len(self.filename):
            prefix = ""
        self.prefix = prefix
        self.suffix = self.filename[len(prefix):]
        self.name_in_series = extract_episode_token(self.suffix)

    def __str__(self) -> str:
        return f"{self.filename}.{self.extension}" if self.extension else self.filename


class Inventory(BaseModel):
    """Media files found in one directory, grouped by type."""

    videos: list[FileRecord] = Field(default_factory=list)
    audios: list[FileRecord] = Field(default_factory=list)
    subtitles: list[FileRecord] = Field(default_factory=list)


class MatchResult(BaseModel):
    """Video to subtitle mapping produced by a matching run."""

    matched_subs: dict[str, list[str]] = Field(
        default_factory=dict, description="Video path to ordered subtitle URLs"
    )
    videos: list[FileRecord] = Field(default_factory=list, description="Classified videos")
    subtitles: list[FileRecord] = Field(default_factory=list, description="Subtitle pool")

    def subs_for(self, video: FileRecord | str) -> list[str]:
        """Subtitle URLs attached to a video, most preferred first."""
        key = video if isinstance(video, str) else str(video.path)
        return self.matched_subs.get(key, [])

    def append(self, video: FileRecord, url: str) -> bool:
        """
        Attach a subtitle URL to a video.

        Returns:
            True if the URL was added, False if it was already attached
        """
        urls = self.matched_subs.setdefault(str(video.path), [])
        if url in urls:
            return False
        urls.append(url)
        return True

    def promote(self, video: FileRecord, urls: list[str]) -> None:
        """Move the given URLs to the front of a video's list, keeping their order."""
        current = self.matched_subs.get(str(video.path))
        if not current:
            return
        wanted = set(urls)
        front = [url for url in current if url in wanted]
        rest = [url for url in current if url not in wanted]
        self.matched_subs[str(video.path)] = front + rest

    def merge_into(self, accumulator: "MatchResult") -> "MatchResult":
        """Append this result's entries to a caller-owned accumulator."""
        for video_path, urls in self.matched_subs.items():
            target = accumulator.matched_subs.setdefault(video_path, [])
            target.extend(url for url in urls if url not in target)
        accumulator.videos = list(self.videos)
        accumulator.subtitles = list(self.subtitles)
        return accumulator

    @property
    def matched_video_count(self) -> int:
        """Number of videos with at least one subtitle."""
        return sum(1 for urls in self.matched_subs.values() if urls)

    def __str__(self) -> str:
        return (
            f"{self.matched_video_count} of {len(self.videos)} videos matched "
            f"against {len(self.subtitles)} subtitles"
        )


class MatchPhase(str, Enum):
    """Effectful phases after which listeners are notified."""

    PLAYLIST = "playlist"
    SUBTITLE_MATCH = "subtitle_match"
    FALLBACK_MATCH = "fallback_match"


class RunStatus(str, Enum):
    """Final state of a matching run."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DiagnosticKind(str, Enum):
    """Non-fatal conditions reported by a run."""

    DIRECTORY_UNREADABLE = "directory_unreadable"
    COMPLEXITY_EXCEEDED = "complexity_exceeded"
    TICKET_EXPIRED = "ticket_expired"


class Diagnostic(BaseModel):
    """A degraded path taken during a run."""

    kind: DiagnosticKind
    message: str
    path: Path | None = None


class PlaylistState(BaseModel):
    """Snapshot of the caller's playlist when a run starts."""

    count: int = Field(0, ge=0, description="Number of playlist entries")
    position: int = Field(0, ge=0, description="Index of the playing entry")
    current_path: Path | None = Field(None, description="File currently playing")


class PlaylistInsertion(BaseModel):
    """One file to add to the playlist, optionally moved into place."""

    path: Path
    move_from: int | None = Field(None, description="Index the new entry lands at")
    move_to: int | None = Field(None, description="Index to move the new entry to")


class MatchRun(BaseModel):
    """Everything a single matching run produced."""

    ticket: int
    status: RunStatus = RunStatus.COMPLETED
    cancelled_at: str | None = None
    result: MatchResult = Field(default_factory=MatchResult)
    audios: list[FileRecord] = Field(default_factory=list)
    playlist: list[PlaylistInsertion] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    phases: list[MatchPhase] = Field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.status is RunStatus.CANCELLED


VIDEO_EXTENSIONS = [
    "mkv", "mp4", "avi", "m4v", "mov", "3gp", "ts", "mts", "m2ts", "wmv", "flv", "f4v",
    "asf", "webm", "rm", "rmvb", "qt", "dv", "mpg", "mpeg", "mxf", "vob", "ogv", "ogm",
]
AUDIO_EXTENSIONS = [
    "mp3", "aac", "mka", "dts", "flac", "ogg", "oga", "mogg", "m4a", "ac3", "opus",
    "wav", "wv", "aiff", "aif", "ape", "tta", "tak",
]
SUBTITLE_EXTENSIONS = ["utf", "utf8", "utf-8", "idx", "sub", "srt", "smi", "rt", "ssa", "aqt",
                       "jss", "js", "ass", "mks", "vtt", "sup", "scc"]


class MatcherConfig(BaseModel):
    """Configuration settings for subtitle matching."""

    video_extensions: list[str] = Field(default=VIDEO_EXTENSIONS, description="Video extensions")
    audio_extensions: list[str] = Field(default=AUDIO_EXTENSIONS, description="Audio extensions")
    subtitle_extensions: list[str] = Field(
        default=SUBTITLE_EXTENSIONS, description="Subtitle extensions"
    )

    auto_add_to_playlist: bool = Field(
        default=True, description="Add sibling media files to the playlist"
    )
    sub_search_path: str = Field(
        default="./*", description="Colon-separated extra subtitle directories"
    )
    sub_auto_load: SubAutoLoadMode = Field(
        default=SubAutoLoadMode.BOTH, description="Subtitle auto-matching mode"
    )
    priority_strings: str = Field(
        default="", description="Comma-separated substrings that promote a subtitle"
    )
    enable_fallback_matching: bool = Field(
        default=True,
        description="Pair leftovers by direct filename distance, whether or not "
        "auto_add_to_playlist is set",
    )

    min_series_size: int = Field(
        default=3, ge=1, description="Smallest group treated as a series"
    )
    distance_ratio: float = Field(
        default=0.6, gt=0.0, le=1.0, description="Edit distance acceptance ratio"
    )
    fallback_max_pairs: int = Field(
        default=40000, gt=0, description="Video x subtitle product above which fallback is skipped"
    )

    enable_logging: bool = Field(default=True, description="Enable application logging")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("video_extensions", "audio_extensions", "subtitle_extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        """Ensure all extensions are lowercase without a leading dot."""
        return [ext.lstrip(".").lower() for ext in v]

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return v.upper()

    def media_type_for(self, extension: str) -> MediaType | None:
        """Classify an extension against the configured tables."""
        ext = extension.lstrip(".").lower()
        if ext in self.video_extensions:
            return MediaType.VIDEO
        if ext in self.audio_extensions:
            return MediaType.AUDIO
        if ext in self.subtitle_extensions:
            return MediaType.SUBTITLE
        return None
