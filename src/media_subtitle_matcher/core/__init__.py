"""Core functionality for media subtitle matcher."""

from .cancellation import CancellationToken, Cancelled, TicketCounter
from .grouper import FileGroup, SeriesGrouper
from .matcher import EpisodeMatcher, FallbackMatcher, SeriesMatcher
from .models import (
    Diagnostic,
    DiagnosticKind,
    FileRecord,
    Inventory,
    MatcherConfig,
    MatchPhase,
    MatchResult,
    MatchRun,
    MediaType,
    PlaylistInsertion,
    PlaylistState,
    RunStatus,
    SubAutoLoadMode,
)
from .pipeline import AutoFileMatcher
from .playlist import PlaylistController, apply_playlist, plan_playlist
from .prioritizer import PriorityReorderer, parse_priority_strings
from .scanner import MediaFileScanner, SubtitleLocator
from .similarity import DistanceThreshold, edit_distance

__all__ = [
    "AutoFileMatcher",
    "CancellationToken",
    "Cancelled",
    "Diagnostic",
    "DiagnosticKind",
    "DistanceThreshold",
    "EpisodeMatcher",
    "FallbackMatcher",
    "FileGroup",
    "FileRecord",
    "Inventory",
    "MatchPhase",
    "MatchResult",
    "MatchRun",
    "MatcherConfig",
    "MediaFileScanner",
    "MediaType",
    "PlaylistController",
    "PlaylistInsertion",
    "PlaylistState",
    "PriorityReorderer",
    "RunStatus",
    "SeriesGrouper",
    "SeriesMatcher",
    "SubAutoLoadMode",
    "SubtitleLocator",
    "TicketCounter",
    "apply_playlist",
    "edit_distance",
    "parse_priority_strings",
    "plan_playlist",
]
