# snipper/printer.py
# Centralized terminal output for the mp3-snip CLI.

import os
import sys
from typing import Optional

from application.dto.stream_units import SECOND
from snipper.engine import RunAccumulators
from snipper.utils import format_duration


class OutputPrinter:
    """
    Formats everything the CLI prints.

    Results go to stdout, errors always to stderr. Color is optional and
    switched off by ``no_color`` or the NO_COLOR environment variable;
    symbols carry the meaning either way.
    """

    SYMBOLS : dict[str, str] = {
        "success" : "✅",
        "error"   : "❌",
        "warning" : "⚠️ ",
        "info"    : "✂️ ",
        "hint"    : "→",
    }

    COLORS : dict[str, str] = {
        "green"  : "32",
        "red"    : "31",
        "yellow" : "33",
        "cyan"   : "36",
        "dim"    : "90",
    }

    COL_WIDTH : int = 10
    RULE      : str = "-" * 72

    def __init__(self, quiet : bool = False, no_color : bool = False) -> None:
        self.quiet    : bool = quiet
        self.no_color : bool = no_color or bool(os.environ.get("NO_COLOR", ""))

    # ── Internal ─────────────────────────────────────────────────

    def _colorize(self, text : str, code : str) -> str:
        """Apply ANSI color code if color output is enabled."""
        if self.no_color:
            return text
        return f"\033[{code}m{text}\033[0m"

    def _hint(self, hint : str) -> str:
        return self._colorize(f"{self.SYMBOLS['hint']} {hint}", self.COLORS["cyan"])

    # ── Messages ─────────────────────────────────────────────────

    def success(self, title : str, details : Optional[dict[str, str]] = None) -> None:
        """Print a success line followed by an aligned detail block."""
        if self.quiet:
            return
        symbol : str = self._colorize(self.SYMBOLS["success"], self.COLORS["green"])
        label  : str = self._colorize(title, self.COLORS["green"])
        print(f"\n{symbol}  {label}")
        if details:
            for key, value in details.items():
                dim_key : str = self._colorize(f"{key:<{self.COL_WIDTH}}", self.COLORS["dim"])
                print(f"    {dim_key}: {value}")

    def error(self, message : str, hint : Optional[str] = None) -> None:
        """Print an error to stderr, never suppressed by quiet mode."""
        symbol : str = self._colorize(self.SYMBOLS["error"], self.COLORS["red"])
        msg    : str = self._colorize(message, self.COLORS["red"])
        print(f"\n{symbol}  {msg}", file=sys.stderr)
        if hint:
            print(f"    {self._hint(hint)}", file=sys.stderr)

    def warning(self, message : str, hint : Optional[str] = None) -> None:
        if self.quiet:
            return
        symbol : str = self._colorize(self.SYMBOLS["warning"], self.COLORS["yellow"])
        msg    : str = self._colorize(message, self.COLORS["yellow"])
        print(f"\n{symbol} {msg}")
        if hint:
            print(f"    {self._hint(hint)}")

    def info(self, message : str) -> None:
        if self.quiet:
            return
        symbol : str = self._colorize(self.SYMBOLS["info"], self.COLORS["cyan"])
        print(f"{symbol} {message}")

    def rule(self) -> None:
        if self.quiet:
            return
        print(self._colorize(self.RULE, self.COLORS["dim"]))

    # ── Run summary ──────────────────────────────────────────────

    def plan(self, input_path : str, start_after : int, end_at : int) -> None:
        """Announce what is about to be cut. Durations are in nanoseconds."""
        self.rule()
        self.info(f"Snip {start_after / SECOND:.1f}s leading from {input_path}")
        if end_at > 0:
            self.info(f"Snip {end_at / SECOND:.1f}s trailing from {input_path}")

    def summary(self, output_path : str, acc : RunAccumulators, elapsed : float) -> None:
        """Print the end-of-run report for a finished trim."""
        size_mb : float = acc.output_bytes / (1024 * 1024)
        details : dict[str, str] = {
            "Frames"   : f"saw {acc.frames_encountered} vs {acc.predicted_frames} predicted",
            "Dropped"  : f"{acc.frames_dropped} frames",
            "Duration" : (
                f"{format_duration(acc.output_duration)} "
                f"vs {format_duration(acc.cumulative_duration)} original"
            ),
            "Size"     : f"{size_mb:.2f} MB",
            "Time"     : f"{elapsed:.2f}s",
        }
        if acc.summary_header_skipped:
            details["VBR"] = "summary header removed"
        self.success(title=output_path, details=details)
        self.rule()
