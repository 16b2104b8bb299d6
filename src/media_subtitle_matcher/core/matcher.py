"""Matching of videos to subtitles at series, episode and filename level."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .cancellation import CancellationToken, Cancelled
from .models import (
    Diagnostic,
    DiagnosticKind,
    FileRecord,
    MatchResult,
    SubAutoLoadMode,
)
from .parser import episode_tokens_equal
from .prioritizer import PriorityReorderer
from .similarity import INFINITE, DistanceThreshold, edit_distance

logger = logging.getLogger(__name__)


class SeriesMatcher:
    """Pairs video series with subtitle series by mutual nearest prefix."""

    def __init__(self, threshold: DistanceThreshold | None = None):
        self.threshold = threshold or DistanceThreshold()

    def match(
        self,
        video_series: dict[str, list[FileRecord]],
        sub_series: dict[str, list[FileRecord]],
        min_series_size: int = 3,
    ) -> dict[str, str]:
        """
        Match video series prefixes to subtitle series prefixes.

        A pair is accepted when each prefix is the other's closest one and
        their edit distance is below the threshold. Keys are visited in
        sorted order, so the lexicographically first prefix wins a tie.

        Args:
            video_series: Video series keyed by prefix
            sub_series: Subtitle series keyed by prefix
            min_series_size: Smallest video series taking part

        Returns:
            Dictionary mapping video prefixes to subtitle prefixes
        """
        video_keys = sorted(
            prefix for prefix, members in video_series.items() if len(members) >= min_series_size
        )
        sub_keys = sorted(sub_series)

        distances: dict[tuple[str, str], int] = {}
        closest_video: dict[str, str | None] = {}
        for sp in sub_keys:
            min_dist = INFINITE
            min_video = None
            for vp in video_keys:
                dist = edit_distance(vp, sp)
                distances[(vp, sp)] = dist
                if dist < min_dist:
                    min_dist = dist
                    min_video = vp
            closest_video[sp] = min_video

        matched: dict[str, str] = {}
        for vp in video_keys:
            min_dist = INFINITE
            min_sub = None
            for sp in sub_keys:
                dist = distances[(vp, sp)]
                if dist < min_dist:
                    min_dist = dist
                    min_sub = sp
            if min_sub is None:
                continue
            if closest_video[min_sub] == vp and self.threshold.accepts(min_dist, vp, min_sub):
                matched[vp] = min_sub
                logger.debug(f"Matched series {vp!r} with {min_sub!r} (distance {min_dist})")

        logger.info(f"Matched {len(matched)} of {len(video_keys)} video series")
        return matched


@dataclass
class EpisodeMatchOutcome:
    """What the per-video matching stage left behind."""

    unmatched_videos: list[FileRecord] = field(default_factory=list)
    matched_sub_paths: set[Path] = field(default_factory=set)
    attached: int = 0


class EpisodeMatcher:
    """Attaches subtitles to each video by episode token and by filename containment."""

    STAGE = "subtitle_match"

    def __init__(
        self,
        mode: SubAutoLoadMode = SubAutoLoadMode.BOTH,
        reorderer: PriorityReorderer | None = None,
    ):
        """
        Initialize the matcher.

        Args:
            mode: Which matching strategies are enabled
            reorderer: Applied to each video's newly attached subtitles
        """
        self.mode = mode
        self.reorderer = reorderer or PriorityReorderer([])

    def find_episode_subs(
        self,
        video: FileRecord,
        subtitles: list[FileRecord],
        matched_series: dict[str, str],
    ) -> list[FileRecord]:
        """
        Find subtitles for the same episode in the matched subtitle series.

        Every subtitle sharing the video's episode token is recorded in the
        video's related subtitles, whichever series it belongs to.
        """
        if not video.prefix or video.prefix not in matched_series:
            return []
        sub_prefix = matched_series[video.prefix]

        found = []
        for sub in subtitles:
            if not episode_tokens_equal(video.name_in_series, sub.name_in_series):
                continue
            video.related_subs.append(sub)
            if sub.prefix == sub_prefix:
                found.append(sub)
        return found

    def find_containing_subs(
        self, video: FileRecord, subtitles: list[FileRecord]
    ) -> list[FileRecord]:
        """Find subtitles whose filename contains the video filename."""
        return [sub for sub in subtitles if video.filename in sub.filename]

    def match(
        self,
        videos: list[FileRecord],
        subtitles: list[FileRecord],
        matched_series: dict[str, str],
        result: MatchResult,
        token: CancellationToken,
    ) -> EpisodeMatchOutcome | Cancelled:
        """
        Attach subtitles to every video.

        Args:
            videos: Videos in natural order
            subtitles: The full subtitle pool
            matched_series: Video prefix to subtitle prefix pairs
            result: Mapping to attach subtitles to
            token: Cancellation token for the current run

        Returns:
            The stage outcome, or Cancelled if the ticket expired
        """
        outcome = EpisodeMatchOutcome()
        if self.mode is SubAutoLoadMode.DISABLED:
            return outcome

        for video in videos:
            cancelled = token.check(self.STAGE)
            if cancelled:
                return cancelled

            candidates: list[FileRecord] = []
            if self.mode.matches_episodes:
                candidates.extend(self.find_episode_subs(video, subtitles, matched_series))
            if self.mode.matches_substrings:
                candidates.extend(self.find_containing_subs(video, subtitles))

            attached: dict[Path, FileRecord] = {}
            for sub in candidates:
                if result.append(video, sub.url):
                    outcome.attached += 1
                sub.is_matched = True
                outcome.matched_sub_paths.add(sub.path)
                attached.setdefault(sub.path, sub)

            if not attached:
                outcome.unmatched_videos.append(video)
                continue

            logger.debug(f"Attached {len(attached)} subtitles to {video}")
            self.reorderer.reorder(result, video, list(attached.values()))

        logger.info(
            f"Attached {outcome.attached} subtitles; "
            f"{len(outcome.unmatched_videos)} of {len(videos)} videos unmatched"
        )
        return outcome


@dataclass
class FallbackOutcome:
    """What the fallback stage did."""

    attached: int = 0
    skipped: bool = False
    diagnostic: Diagnostic | None = None


class FallbackMatcher:
    """Pairs leftover videos and subtitles by direct filename distance."""

    STAGE = "fallback_match"

    def __init__(self, threshold: DistanceThreshold | None = None, max_pairs: int = 40000):
        """
        Initialize the matcher.

        Args:
            threshold: Acceptance threshold on combined prefix and suffix distance
            max_pairs: Unmatched video x subtitle product at which the stage is skipped
        """
        self.threshold = threshold or DistanceThreshold()
        self.max_pairs = max_pairs

    def distance(self, video: FileRecord, sub: FileRecord) -> float:
        """Combined prefix and suffix distance, infinite when not acceptable."""
        raw = edit_distance(video.prefix, sub.prefix) + edit_distance(video.suffix, sub.suffix)
        if self.threshold.accepts(raw, video.filename, sub.filename):
            return raw
        return INFINITE

    def match(
        self,
        videos: list[FileRecord],
        unmatched_videos: list[FileRecord],
        unmatched_subs: list[FileRecord],
        result: MatchResult,
        token: CancellationToken,
    ) -> FallbackOutcome | Cancelled:
        """
        Attach subtitles to unmatched videos when both are each other's closest file.

        Args:
            videos: Every video in the directory
            unmatched_videos: Videos with no subtitle after the previous stage
            unmatched_subs: Subtitles not attached by the previous stage
            result: Mapping to attach subtitles to
            token: Cancellation token for the current run

        Returns:
            The stage outcome, or Cancelled if the ticket expired
        """
        outcome = FallbackOutcome()
        pairs = len(unmatched_videos) * len(unmatched_subs)
        if pairs >= self.max_pairs:
            message = (
                f"Stopped auto matching subs - too many files "
                f"({len(unmatched_videos)} videos x {len(unmatched_subs)} subtitles)"
            )
            logger.warning(message)
            outcome.skipped = True
            outcome.diagnostic = Diagnostic(
                kind=DiagnosticKind.COMPLEXITY_EXCEEDED, message=message
            )
            return outcome
        if not unmatched_videos or not unmatched_subs:
            return outcome

        known = {video.path for video in videos}
        videos = list(videos) + [v for v in unmatched_videos if v.path not in known]

        distances: dict[tuple[Path, Path], float] = {}
        min_peers: dict[Path, set[Path]] = {}

        for sub in unmatched_subs:
            cancelled = token.check(self.STAGE)
            if cancelled:
                return cancelled

            min_dist = INFINITE
            for video in videos:
                dist = self.distance(video, sub)
                distances[(video.path, sub.path)] = dist
                if dist < min_dist:
                    min_dist = dist
            if min_dist == INFINITE:
                continue
            min_peers[sub.path] = {
                video.path for video in videos if distances[(video.path, sub.path)] == min_dist
            }

        for video in unmatched_videos:
            cancelled = token.check(self.STAGE)
            if cancelled:
                return cancelled

            video_dists = [distances[(video.path, sub.path)] for sub in unmatched_subs]
            min_dist = min(video_dists)
            if min_dist == INFINITE:
                continue
            for sub, dist in zip(unmatched_subs, video_dists):
                if dist == min_dist and video.path in min_peers.get(sub.path, ()):
                    if result.append(video, sub.url):
                        outcome.attached += 1
                        logger.debug(f"Fallback matched {sub} to {video} (distance {dist})")

        logger.info(f"Fallback attached {outcome.attached} subtitles")
        return outcome
