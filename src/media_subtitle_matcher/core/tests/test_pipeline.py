"""Tests for the end-to-end matching pipeline."""

from pathlib import Path

from ..cancellation import TicketCounter
from ..models import (
    DiagnosticKind,
    MatcherConfig,
    MatchPhase,
    MatchRun,
    PlaylistState,
    RunStatus,
    SubAutoLoadMode,
)
from ..pipeline import AutoFileMatcher


def touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


class TestAutoFileMatcher:
    """Test cases for AutoFileMatcher."""

    def create_show(self, root: Path) -> tuple[list[Path], list[Path]]:
        """Helper method to lay out a season with subtitles in a subdirectory."""
        videos = [touch(root / f"Show.S01E0{i}.mkv") for i in range(1, 4)]
        subs = [touch(root / "Subs" / f"Show.S01E0{i}.en.srt") for i in range(1, 4)]
        touch(root / "Show.OST.flac")
        return videos, subs

    def test_matches_season(self, tmp_path: Path) -> None:
        """Test that each episode gets its subtitle."""
        videos, subs = self.create_show(tmp_path)

        run = AutoFileMatcher().run(videos[0])

        assert run.status == RunStatus.COMPLETED
        for video, sub in zip(videos, subs):
            assert run.result.subs_for(str(video)) == [sub.as_uri()]
        assert [v.path for v in run.result.videos] == videos
        assert [a.path.name for a in run.audios] == ["Show.OST.flac"]
        assert [p.path.name for p in run.playlist] == [
            "Show.S01E02.mkv",
            "Show.S01E03.mkv",
            "Show.OST.flac",
        ]
        assert run.phases == [
            MatchPhase.PLAYLIST,
            MatchPhase.SUBTITLE_MATCH,
            MatchPhase.FALLBACK_MATCH,
        ]

    def test_idempotent(self, tmp_path: Path) -> None:
        """Test that the same snapshot and ticket give the same result."""
        videos, _ = self.create_show(tmp_path)
        touch(tmp_path / "Bonus.Feature.mkv")
        touch(tmp_path / "Bonus.Feature.chs.srt")
        matcher = AutoFileMatcher(MatcherConfig(priority_strings="en"))

        first = matcher.run(videos[1], ticket=0)
        second = matcher.run(videos[1], ticket=0)

        assert first.result.matched_subs == second.result.matched_subs
        assert first.playlist == second.playlist

    def test_fallback_pairs_leftovers(self, tmp_path: Path) -> None:
        """Test that a lone video and subtitle with close names are paired."""
        video = touch(tmp_path / "Holiday.Trip.2019.mkv")
        sub = touch(tmp_path / "Holiday Trip 2019.srt")

        run = AutoFileMatcher().run(video)

        assert run.result.subs_for(str(video)) == [sub.as_uri()]

    def test_fallback_disabled(self, tmp_path: Path) -> None:
        """Test that disabling fallback leaves leftovers alone."""
        video = touch(tmp_path / "Holiday.Trip.2019.mkv")
        touch(tmp_path / "Holiday Trip 2019.srt")

        run = AutoFileMatcher(MatcherConfig(enable_fallback_matching=False)).run(video)

        assert run.result.subs_for(str(video)) == []
        assert MatchPhase.FALLBACK_MATCH not in run.phases

    def test_disabled_mode(self, tmp_path: Path) -> None:
        """Test that disabled auto-loading matches nothing."""
        videos, _ = self.create_show(tmp_path)

        run = AutoFileMatcher(MatcherConfig(sub_auto_load=SubAutoLoadMode.DISABLED)).run(
            videos[0]
        )

        assert run.result.matched_subs == {}
        assert len(run.result.subtitles) == 3

    def test_no_playlist(self, tmp_path: Path) -> None:
        """Test that the playlist phase can be turned off."""
        videos, _ = self.create_show(tmp_path)

        run = AutoFileMatcher(MatcherConfig(auto_add_to_playlist=False)).run(videos[0])

        assert run.playlist == []
        assert MatchPhase.PLAYLIST not in run.phases

    def test_fallback_runs_without_playlist(self, tmp_path: Path) -> None:
        """Test that fallback matching does not depend on playlist auto-add."""
        video = touch(tmp_path / "Holiday.Trip.2019.mkv")
        sub = touch(tmp_path / "Holiday Trip 2019.srt")

        run = AutoFileMatcher(MatcherConfig(auto_add_to_playlist=False)).run(video)

        assert MatchPhase.FALLBACK_MATCH in run.phases
        assert run.result.subs_for(str(video)) == [sub.as_uri()]
        assert "auto_add_to_playlist" in (
            MatcherConfig.model_fields["enable_fallback_matching"].description
        )

    def test_playlist_state_respected(self, tmp_path: Path) -> None:
        """Test that earlier episodes are planned in front of the current one."""
        videos, _ = self.create_show(tmp_path)
        state = PlaylistState(count=1, position=0, current_path=videos[1])

        run = AutoFileMatcher().run(videos[1], playlist=state)

        assert run.playlist[0].path == videos[0]
        assert run.playlist[0].move_to == 0

    def test_superseded_run_is_cancelled(self, tmp_path: Path) -> None:
        """Test that a newer ticket stops the run after the current phase."""
        videos, _ = self.create_show(tmp_path)
        tickets = TicketCounter()

        def listener(phase: MatchPhase, run: MatchRun) -> None:
            if phase is MatchPhase.PLAYLIST:
                tickets.advance()

        matcher = AutoFileMatcher(tickets=tickets, listener=listener)
        run = matcher.run(videos[0], ticket=tickets.current)

        assert run.status == RunStatus.CANCELLED
        assert run.cancelled_at == "subtitle_match"
        assert run.phases == [MatchPhase.PLAYLIST]
        assert run.result.matched_subs == {}
        assert run.diagnostics[-1].kind == DiagnosticKind.TICKET_EXPIRED

    def test_start_supersedes(self, tmp_path: Path) -> None:
        """Test that start hands out a fresh ticket."""
        videos, _ = self.create_show(tmp_path)
        tickets = TicketCounter()
        matcher = AutoFileMatcher(tickets=tickets)

        run = matcher.start(videos[0])

        assert run.ticket == 1
        assert run.status == RunStatus.COMPLETED

    def test_stale_ticket(self, tmp_path: Path) -> None:
        """Test that a run started with an old ticket does nothing."""
        videos, _ = self.create_show(tmp_path)
        tickets = TicketCounter(start=3)

        run = AutoFileMatcher(tickets=tickets).run(videos[0], ticket=2)

        assert run.cancelled
        assert run.cancelled_at == "inventory"
        assert run.result.videos == []

    def test_unreadable_directory(self, tmp_path: Path) -> None:
        """Test that a missing directory yields an empty, completed run."""
        run = AutoFileMatcher().run(tmp_path / "missing" / "video.mkv")

        assert run.status == RunStatus.COMPLETED
        assert run.result.videos == []
        assert run.diagnostics[0].kind == DiagnosticKind.DIRECTORY_UNREADABLE

    def test_symlinked_current_file(self, tmp_path: Path) -> None:
        """Test that a symlinked file is matched in the directory holding the link."""
        target = touch(tmp_path / "store" / "a1b2c3.mkv")
        video = tmp_path / "library" / "Movie.mkv"
        video.parent.mkdir()
        video.symlink_to(target)
        sub = touch(tmp_path / "library" / "Movie.en.srt")

        run = AutoFileMatcher().run(video)

        assert [v.path for v in run.result.videos] == [video]
        assert run.result.subs_for(str(video)) == [sub.as_uri()]

    def test_superscript_directory_name(self, tmp_path: Path) -> None:
        """Test that a subdirectory named with non-decimal digits is listed."""
        video = touch(tmp_path / "Movie.mkv")
        sub = touch(tmp_path / "Movie.en.srt")
        (tmp_path / "²").mkdir()

        run = AutoFileMatcher().run(video)

        assert run.status == RunStatus.COMPLETED
        assert run.result.subs_for(str(video)) == [sub.as_uri()]
