import logging
import os
from typing import Optional, Callable

from application.dto.stream_units import SECOND
from infrastructure.audio import MpegFrameSource, StreamFrameSink, VbrHeaderClassifier
from snipper.engine import PredictionPolicy, RunAccumulators, TrimEngine, TrimWindow
from snipper.utils import validate_input_file, validate_output_path

logger = logging.getLogger(__name__)


def snip_file(
    input_path  : str,
    output_path : str,
    start_after : int,
    end_at      : int = 0,
    prediction  : PredictionPolicy = PredictionPolicy.FIRST_FRAME,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> RunAccumulators:
    """
    Full pipeline: validate → open → one forward pass → close.

    Args:
        input_path:  Source MPEG audio file (.mp3/.mp2/.mp1/.mpa).
        output_path: Destination file; created or truncated.
        start_after: Nanoseconds to remove from the start.
        end_at:      Nanoseconds to remove from the end (0 = keep the tail).
        prediction:  How the total frame count is estimated.
        progress_callback: Optional callback (bytes_consumed, input_bytes).

    Returns:
        The run accumulators (frame counts, durations, byte totals).

    Raises:
        ValueError / FileNotFoundError: before any output is created.
        OSError: on read/write failure. The partial output file is left in
                 place for the caller to deal with.
    """
    # ── Validate inputs ──────────────────────────────────────────
    validate_input_file(input_path)
    validate_output_path(output_path, input_path=input_path)
    window: TrimWindow = TrimWindow(start_after=start_after, end_at=end_at)
    policy: PredictionPolicy = PredictionPolicy(prediction)

    input_bytes: int = os.path.getsize(input_path)
    logger.debug(
        "snip %s -> %s start=%.3fs end=%.3fs bytes=%d policy=%s",
        input_path, output_path, window.start_after / SECOND, window.end_at / SECOND,
        input_bytes, policy.value,
    )

    # ── Single pass ──────────────────────────────────────────────
    with open(input_path, "rb") as in_stream, open(output_path, "wb") as out_stream:
        engine: TrimEngine = TrimEngine(
            window,
            classifier=VbrHeaderClassifier(),
            input_bytes=input_bytes,
            policy=policy,
        )
        acc: RunAccumulators = engine.run(
            MpegFrameSource(in_stream),
            StreamFrameSink(out_stream),
            progress_callback=progress_callback,
        )

    logger.debug(
        "done: %d frames seen, %d predicted, %d included, %d dropped",
        acc.frames_encountered, acc.predicted_frames,
        acc.frames_included, acc.frames_dropped,
    )
    return acc
