import os
import re

from application.dto.stream_units import (
    NANOSECOND, MICROSECOND, MILLISECOND, SECOND, MINUTE, HOUR,
)

# Supported formats
SUPPORTED_FORMATS: set[str] = {".mp3", ".mp2", ".mp1", ".mpa"}

# Default parameters
DEFAULT_PARAMS: dict[str, str] = {
    "end": "0s",
    "prediction": "first-frame",
    "suffix": "_snipped",
}

# Duration strings: one or more <decimal><unit> groups, e.g. 1m30s, 500ms, 1.5h
DURATION_UNITS: dict[str, int] = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,  # U+00B5 micro sign
    "μs": MICROSECOND,  # U+03BC greek mu
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}
_DURATION_PART = re.compile(r"(?:(\d+)(?:\.(\d*))?|\.(\d+))(ns|us|µs|μs|ms|s|m|h)")


# Duration helpers

def parse_duration(text: str, name: str = "duration") -> int:
    """
    Parse a duration string into integer nanoseconds.

    Fractions are scaled with integer arithmetic, so '1.176s' is exactly
    1_176_000_000. Digits finer than a nanosecond are truncated.

    Example: '25s' → 25 * SECOND, '500ms' → 500 * MILLISECOND, '0' → 0
    """
    value: str = (text or "").strip()
    if not value:
        raise ValueError(
            f"Missing {name}.\n" f"    → Example: 25s, 1m30s or 500ms."
        )
    if value.startswith("-"):
        raise ValueError(
            f"{name.capitalize()} must not be negative: '{text}'.\n"
            f"    → Use 0 to disable it."
        )
    if value.startswith("+"):
        value = value[1:]
    if value == "0":
        return 0

    total: int = 0
    pos: int = 0
    while pos < len(value):
        match = _DURATION_PART.match(value, pos)
        if match is None:
            raise ValueError(
                f"Invalid {name}: '{text}'.\n"
                f"    Units: {', '.join(DURATION_UNITS)}\n"
                f"    → Example: 25s, 1m30s or 500ms."
            )
        whole: str = match.group(1) or ""
        fraction: str = match.group(2) or match.group(3) or ""
        unit: int = DURATION_UNITS[match.group(4)]
        total += int(whole or "0") * unit
        if fraction:
            total += int(fraction) * unit // 10 ** len(fraction)
        pos = match.end()
    return total


def format_duration(nanoseconds: int) -> str:
    """Human-readable duration. Example: 93.4 s → '1m 33.4s', 0.52 s → '0.5s'"""
    minutes: float
    rest: float
    minutes, rest = divmod(nanoseconds / SECOND, 60.0)
    if minutes:
        return f"{int(minutes)}m {rest:.1f}s"
    return f"{rest:.1f}s"


# Validation helpers

def validate_input_file(path: str) -> None:
    """Raise FileNotFoundError / ValueError if the input path is invalid."""
    if not path:
        raise ValueError(
            "Missing input file path.\n" "    → Pass the MPEG audio file to trim."
        )
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Input file not found: '{path}'.\n" f"    → Check the path and try again."
        )
    if not os.path.isfile(path):
        raise ValueError(
            f"Input path is not a file: '{path}'.\n"
            f"    → Provide a path to an MPEG audio file, not a directory."
        )

    ext: str = os.path.splitext(path)[1].lower()
    if ext not in SUPPORTED_FORMATS:
        raise ValueError(
            f"Unsupported input format: '{ext}'.\n"
            f"    Supported: {', '.join(sorted(SUPPORTED_FORMATS))}\n"
            f"    → Frames are copied, not re-encoded, so only MPEG audio works."
        )


def validate_output_path(path: str, input_path: str = "") -> None:
    """Raise ValueError / FileNotFoundError if the output path is invalid."""
    if not path:
        raise ValueError(
            "Missing output file path.\n" "    → Pass OUTPUT or use --auto-output."
        )
    ext: str = os.path.splitext(path)[1].lower()
    if ext not in SUPPORTED_FORMATS:
        raise ValueError(
            f"Unsupported output format: '{ext}'.\n"
            f"    Supported: {', '.join(sorted(SUPPORTED_FORMATS))}\n"
            f"    → Example: mp3-snip song.mp3 song_short.mp3 --start 25s"
        )

    if input_path and os.path.abspath(path) == os.path.abspath(input_path):
        raise ValueError(
            f"Output would overwrite the input: '{path}'.\n"
            f"    → Choose a different output path."
        )

    output_dir: str = os.path.dirname(os.path.abspath(path))
    if not os.path.exists(output_dir):
        raise FileNotFoundError(
            f"Output directory does not exist: '{output_dir}'.\n"
            f"    → Create the directory first, or choose an existing path."
        )


# Path helpers

def get_output_path(input_path: str, suffix: str = DEFAULT_PARAMS["suffix"]) -> str:
    """
    Auto-generate an output path from an input path.

    Example: song.mp3,  suffix='_snipped'  →  song_snipped.mp3
    """
    base: str
    ext: str
    base, ext = os.path.splitext(input_path)
    return f"{base}{suffix}{ext}"
