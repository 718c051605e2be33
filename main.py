#!/usr/bin/env python3
"""
mp3-snip CLI
Cut a leading and/or trailing stretch off an MP3 without re-encoding.

Usage:
    python main.py input.mp3 output.mp3 --start 25s
    python main.py input.mp3 output.mp3 --start 25s --end 10s
    python main.py input.mp3 --auto-output --start 1m30s --quiet
"""

import argparse
import logging
import os
import sys
import time

from tqdm import tqdm

from snipper.core import snip_file
from snipper.engine import PredictionPolicy, RunAccumulators
from snipper.printer import OutputPrinter
from snipper.utils import get_output_path, parse_duration, DEFAULT_PARAMS


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="mp3-snip",
        description="Remove the start and/or end of an MP3 by dropping whole frames.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py show.mp3 show_short.mp3 --start 25s
  python main.py show.mp3 show_short.mp3 --start 25s --end 10s
  python main.py show.mp3 --auto-output --start 1m30s --quiet

Durations:
  A sequence of numbers with units: ns, us, ms, s, m, h
  e.g. 25s | 500ms | 1m30s | 1.5h    (a bare 0 is also accepted)
        """,
    )

    # Positional arguments
    parser.add_argument(
        "input",
        metavar="INPUT",
        help="Path to the input MPEG audio file (.mp3, .mp2, .mp1, .mpa).",
    )
    parser.add_argument(
        "output",
        metavar="OUTPUT",
        nargs="?",
        default=None,
        help="Path for the output file. Omit if using --auto-output.",
    )

    # Trim window
    trim_group = parser.add_argument_group("Trim Window")
    trim_group.add_argument(
        "--start",
        "-s",
        required=True,
        metavar="DURATION",
        help="Drop audio before this point, e.g. 25s.",
    )
    trim_group.add_argument(
        "--end",
        "-e",
        default=DEFAULT_PARAMS["end"],
        metavar="DURATION",
        help="Drop this much audio from the end, e.g. 10s (default: keep the end).",
    )
    trim_group.add_argument(
        "--prediction",
        default=DEFAULT_PARAMS["prediction"],
        choices=[p.value for p in PredictionPolicy],
        help=(
            "How the total frame count is estimated for --end "
            f"(default: {DEFAULT_PARAMS['prediction']})."
        ),
    )

    # Output options
    out_group = parser.add_argument_group("Output Options")
    out_group.add_argument(
        "--auto-output",
        action="store_true",
        help=f"Auto-generate output filename (e.g., song.mp3 -> song{DEFAULT_PARAMS['suffix']}.mp3).",
    )
    out_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress all output except errors.",
    )
    out_group.add_argument(
        "--no-color",
        "-n",
        action="store_true",
        help="Disable colored output (also auto-disabled when NO_COLOR env var is set).",
    )
    out_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log frame-level decisions to stderr.",
    )

    return parser


def main() -> None:
    parser: argparse.ArgumentParser = build_parser()
    args: argparse.Namespace = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    printer: OutputPrinter = OutputPrinter(
        quiet=args.quiet,
        no_color=args.no_color,
    )

    # Resolve output path
    output_path: str
    if args.output is not None:
        output_path = args.output
    elif args.auto_output:
        output_path = get_output_path(args.input)
    else:
        parser.error(
            "Provide an OUTPUT path, or use --auto-output to generate one automatically."
        )
        return  # unreachable but satisfies type checkers

    # Durations are checked before any file is touched
    try:
        start_after: int = parse_duration(args.start, "start time")
        end_at: int = parse_duration(args.end, "end time")
    except ValueError as exc:
        printer.error(str(exc))
        sys.exit(1)

    printer.plan(args.input, start_after, end_at)

    start_time: float = time.time()
    try:
        acc: RunAccumulators
        if args.quiet:
            acc = snip_file(
                input_path=args.input,
                output_path=output_path,
                start_after=start_after,
                end_at=end_at,
                prediction=args.prediction,
            )
        else:
            total: int = os.path.getsize(args.input) if os.path.isfile(args.input) else 0
            with tqdm(total=total, desc="Snipping", unit="B", unit_scale=True) as pbar:

                def cli_callback(done: int, _total: int) -> None:
                    pbar.update(done - pbar.n)

                acc = snip_file(
                    input_path=args.input,
                    output_path=output_path,
                    start_after=start_after,
                    end_at=end_at,
                    prediction=args.prediction,
                    progress_callback=cli_callback,
                )

        elapsed: float = time.time() - start_time
        printer.summary(output_path, acc, elapsed)

        if acc.frames_encountered == 0:
            printer.warning(
                "No MPEG audio frames were found in the input.",
                hint="Check that the file really is an MP3.",
            )

    except (FileNotFoundError, ValueError) as exc:
        printer.error(str(exc))
        sys.exit(1)
    except OSError as exc:
        printer.error(
            f"I/O error: {exc}",
            hint=f"'{output_path}' may be incomplete; delete it before retrying.",
        )
        sys.exit(1)
    except KeyboardInterrupt:
        printer.warning("Snip cancelled.", hint=f"'{output_path}' is incomplete.")
        sys.exit(130)


if __name__ == "__main__":
    main()
