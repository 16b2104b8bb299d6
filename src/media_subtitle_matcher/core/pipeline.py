"""End-to-end subtitle matching for the directory of the current media file."""

import logging
import time
from pathlib import Path
from typing import Protocol

from .cancellation import Cancelled, TicketCounter
from .grouper import SeriesGrouper
from .matcher import EpisodeMatcher, FallbackMatcher, SeriesMatcher
from .models import (
    Diagnostic,
    DiagnosticKind,
    MatcherConfig,
    MatchPhase,
    MatchRun,
    PlaylistState,
    RunStatus,
    SubAutoLoadMode,
)
from .playlist import plan_playlist
from .prioritizer import PriorityReorderer
from .scanner import MediaFileScanner, SubtitleLocator
from .similarity import DistanceThreshold

logger = logging.getLogger(__name__)


class ChangeListener(Protocol):
    """Protocol for callbacks fired after each effectful phase."""

    def __call__(self, phase: MatchPhase, run: MatchRun) -> None:
        """Called once a phase's output is available on the run."""
        ...


class AutoFileMatcher:
    """Runs inventory, grouping and matching for one media directory."""

    def __init__(
        self,
        config: MatcherConfig | None = None,
        tickets: TicketCounter | None = None,
        listener: ChangeListener | None = None,
    ):
        """
        Initialize the matcher.

        Args:
            config: Matcher configuration, defaults to MatcherConfig()
            tickets: Shared ticket counter; a private one is created if omitted
            listener: Optional callback notified after each phase
        """
        self.config = config or MatcherConfig()
        self.tickets = tickets or TicketCounter()
        self.listener = listener

        threshold = DistanceThreshold(self.config.distance_ratio)
        self.grouper = SeriesGrouper(self.config.min_series_size)
        self.series_matcher = SeriesMatcher(threshold)
        self.episode_matcher = EpisodeMatcher(
            self.config.sub_auto_load,
            PriorityReorderer.from_config_string(self.config.priority_strings),
        )
        self.fallback_matcher = FallbackMatcher(threshold, self.config.fallback_max_pairs)

    def _notify(self, phase: MatchPhase, run: MatchRun) -> None:
        run.phases.append(phase)
        if self.listener:
            self.listener(phase, run)

    def _cancel(self, run: MatchRun, cancelled: Cancelled) -> MatchRun:
        logger.info(f"Matching run {run.ticket} superseded during {cancelled.stage}")
        run.status = RunStatus.CANCELLED
        run.cancelled_at = cancelled.stage
        run.diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.TICKET_EXPIRED,
                message=f"Ticket {cancelled.ticket} expired during {cancelled.stage}",
            )
        )
        return run

    def run(
        self,
        current_file: Path,
        ticket: int | None = None,
        playlist: PlaylistState | None = None,
    ) -> MatchRun:
        """
        Match subtitles for every video next to the current file.

        Args:
            current_file: The file being played
            ticket: Ticket handed out for this run, defaults to the current one
            playlist: State of the player's playlist for insertion planning

        Returns:
            MatchRun holding the mapping, classified files and diagnostics
        """
        token = self.tickets.token(ticket)
        run = MatchRun(ticket=token.ticket)
        start_time = time.time()

        folder = current_file.absolute().parent
        logger.info(f"Starting subtitle matching in {folder} (ticket {token.ticket})")

        scanner = MediaFileScanner(self.config)
        cancelled = token.check("inventory")
        if cancelled:
            return self._finish(scanner, self._cancel(run, cancelled))

        inventory = scanner.build_inventory(folder)
        subtitles = SubtitleLocator(scanner).locate(
            inventory.subtitles, self.config.sub_search_path, folder
        )
        run.result.videos = inventory.videos
        run.result.subtitles = subtitles
        run.audios = inventory.audios

        if self.config.auto_add_to_playlist:
            cancelled = token.check("playlist")
            if cancelled:
                return self._finish(scanner, self._cancel(run, cancelled))
            state = playlist or PlaylistState(current_path=current_file)
            run.playlist = plan_playlist(inventory.videos + inventory.audios, state)
            self._notify(MatchPhase.PLAYLIST, run)

        video_series = self.grouper.group_by_series(inventory.videos)
        sub_series = self.grouper.group_by_series(subtitles)
        matched_series = self.series_matcher.match(
            video_series, sub_series, self.config.min_series_size
        )

        outcome = self.episode_matcher.match(
            inventory.videos, subtitles, matched_series, run.result, token
        )
        if isinstance(outcome, Cancelled):
            return self._finish(scanner, self._cancel(run, outcome))
        self._notify(MatchPhase.SUBTITLE_MATCH, run)

        if self.config.enable_fallback_matching and (
            self.config.sub_auto_load is not SubAutoLoadMode.DISABLED
        ):
            unmatched_subs = [s for s in subtitles if s.path not in outcome.matched_sub_paths]
            fallback = self.fallback_matcher.match(
                inventory.videos,
                outcome.unmatched_videos,
                unmatched_subs,
                run.result,
                token,
            )
            if isinstance(fallback, Cancelled):
                return self._finish(scanner, self._cancel(run, fallback))
            if fallback.diagnostic:
                run.diagnostics.append(fallback.diagnostic)
            self._notify(MatchPhase.FALLBACK_MATCH, run)

        logger.info(f"Matching complete in {time.time() - start_time:.2f} seconds: {run.result}")
        return self._finish(scanner, run)

    def _finish(self, scanner: MediaFileScanner, run: MatchRun) -> MatchRun:
        run.diagnostics[:0] = scanner.diagnostics
        return run

    def start(self, current_file: Path, playlist: PlaylistState | None = None) -> MatchRun:
        """Supersede any running match and run a new one."""
        ticket = self.tickets.advance()
        return self.run(current_file, ticket, playlist)
