"""Tests for the command-line interface."""

import json
from pathlib import Path

import pytest

from .. import main as cli_main
from ..main import create_parser, main


def touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


class TestCli:
    """Test cases for the CLI entry point."""

    def test_parser_defaults(self) -> None:
        """Test default argument values."""
        args = create_parser().parse_args(["movie.mkv"])

        assert args.file == Path("movie.mkv")
        assert args.search_path == "./*"
        assert args.mode == "both"
        assert args.output_format == "text"
        assert args.no_logging is False

    def test_logging_configured_from_config(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that the log level reaches setup_logging and --no-logging skips it."""
        video = touch(tmp_path / "MyMovie.mkv")
        calls: list[str] = []
        monkeypatch.setattr(cli_main, "setup_logging", calls.append)

        assert main([str(video), "--log-level", "DEBUG"]) == 0
        assert main([str(video), "--no-logging"]) == 0

        assert calls == ["DEBUG"]

    def test_json_output(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        """Test that JSON output lists the matched subtitles."""
        video = touch(tmp_path / "MyMovie.720p.mkv")
        sub = touch(tmp_path / "MyMovie.720p.en.srt")

        exit_code = main([str(video), "--output-format", "json"])

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["status"] == "completed"
        assert data["matched_subs"] == {str(video): [sub.as_uri()]}

    def test_text_output(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        """Test the human-readable summary."""
        video = touch(tmp_path / "MyMovie.mkv")
        touch(tmp_path / "MyMovie.eng.srt")
        touch(tmp_path / "MyMovie.chs.srt")

        exit_code = main([str(video), "--priority", "eng", "--mode", "substring"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Videos with subtitles: 1" in out
        assert out.index("MyMovie.eng.srt") < out.index("MyMovie.chs.srt")

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        """Test that a missing file is reported with exit code 1."""
        exit_code = main([str(tmp_path / "nope.mkv")])

        assert exit_code == 1
        assert "File not found" in capsys.readouterr().out

    def test_directory_rejected(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        """Test that passing a directory is an error."""
        assert main([str(tmp_path)]) == 1
        assert "is a directory" in capsys.readouterr().out
