from application.dto.stream_units import MILLISECOND
from snipper.engine import RunAccumulators
from snipper.printer import OutputPrinter


def finished_run() -> RunAccumulators:
    return RunAccumulators(
        input_bytes=41814,
        effective_bytes=41804,
        predicted_frames=100,
        frames_encountered=100,
        frames_dropped=26,
        frames_included=74,
        cumulative_duration=100 * 26_122_448,
        output_duration=74 * 26_122_448,
        output_bytes=30858,
        tags_passed=1,
        summary_header_skipped=True,
    )


class TestOutputPrinter:
    """Tests for the CLI output formatter."""

    def test_success_prints_to_stdout(self, capsys) -> None:
        printer: OutputPrinter = OutputPrinter(no_color=True)
        printer.success("short.mp3", details={"Frames": "74", "Size": "0.03 MB"})
        captured = capsys.readouterr()
        assert "short.mp3" in captured.out
        assert "Frames" in captured.out
        assert "0.03 MB" in captured.out

    def test_error_prints_to_stderr(self, capsys) -> None:
        printer: OutputPrinter = OutputPrinter(no_color=True)
        printer.error("File not found.", hint="Check the path.")
        captured = capsys.readouterr()
        assert "File not found." in captured.err
        assert "Check the path." in captured.err
        assert captured.out == ""

    def test_warning_prints_with_hint(self, capsys) -> None:
        printer: OutputPrinter = OutputPrinter(no_color=True)
        printer.warning("No frames found.", hint="Is it an MP3?")
        captured = capsys.readouterr()
        assert "No frames found." in captured.out
        assert "Is it an MP3?" in captured.out

    def test_quiet_suppresses_everything_but_errors(self, capsys) -> None:
        printer: OutputPrinter = OutputPrinter(quiet=True, no_color=True)
        printer.success("out.mp3")
        printer.warning("w")
        printer.info("i")
        printer.rule()
        printer.summary("out.mp3", finished_run(), 0.5)
        printer.error("Critical failure.")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Critical failure." in captured.err

    def test_no_color_disables_ansi(self, capsys) -> None:
        printer: OutputPrinter = OutputPrinter(no_color=True)
        printer.success("test.mp3")
        assert "\033[" not in capsys.readouterr().out

    def test_color_enabled_includes_ansi(self, capsys, monkeypatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        printer: OutputPrinter = OutputPrinter(no_color=False)
        printer.success("test.mp3")
        assert "\033[" in capsys.readouterr().out

    def test_no_color_env_variable(self, monkeypatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        assert OutputPrinter().no_color is True

    def test_colorize_returns_ansi_when_color_enabled(self, monkeypatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        printer: OutputPrinter = OutputPrinter(no_color=False)
        assert printer._colorize("hello", "32") == "\033[32mhello\033[0m"

    def test_plan_mentions_both_sides(self, capsys) -> None:
        printer: OutputPrinter = OutputPrinter(no_color=True)
        printer.plan("show.mp3", 25_000 * MILLISECOND, 10_000 * MILLISECOND)
        out = capsys.readouterr().out
        assert "Snip 25.0s leading from show.mp3" in out
        assert "Snip 10.0s trailing from show.mp3" in out

    def test_plan_without_tail(self, capsys) -> None:
        printer: OutputPrinter = OutputPrinter(no_color=True)
        printer.plan("show.mp3", 25_000 * MILLISECOND, 0)
        assert "trailing" not in capsys.readouterr().out

    def test_summary_block(self, capsys) -> None:
        printer: OutputPrinter = OutputPrinter(no_color=True)
        printer.summary("short.mp3", finished_run(), 0.25)
        out = capsys.readouterr().out
        assert "saw 100 vs 100 predicted" in out
        assert "26 frames" in out
        assert "1.9s vs 2.6s original" in out
        assert "0.25s" in out
        assert "summary header removed" in out
        # Keys are padded to COL_WIDTH
        assert "Dropped   " in out
