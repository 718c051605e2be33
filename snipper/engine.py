# snipper/engine.py
# Streaming trim decision engine: one forward pass, one decision per frame.

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from application.dto.stream_units import Frame, Tag, EndOfStream, SECOND
from application.ports.frame_sink_port import IFrameSink
from application.ports.frame_source_port import IFrameSource
from application.ports.summary_header_port import ISummaryHeaderClassifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrimWindow:
    """Leading and trailing durations to remove, in nanoseconds."""
    start_after: int
    end_at: int = 0

    def __post_init__(self) -> None:
        if self.start_after < 0 or self.end_at < 0:
            raise ValueError(
                f"Trim durations must not be negative. "
                f"Got start={self.start_after}ns, end={self.end_at}ns.\n"
                f"    → Use 0 to disable a side of the trim."
            )


class PredictionPolicy(str, Enum):
    FIRST_FRAME = "first-frame"
    RUNNING_AVERAGE = "running-average"


class TrimState(Enum):
    SCANNING = "scanning"
    TRIMMING_HEAD = "trimming-head"
    PASSING = "passing"
    TRIMMING_TAIL = "trimming-tail"
    DONE = "done"


class Decision(Enum):
    SUMMARY_HEADER = "summary-header"
    DROP_HEAD = "drop-head"
    DROP_TAIL = "drop-tail"
    INCLUDE = "include"


@dataclass
class RunAccumulators:
    """Counters for one pass over one input."""
    input_bytes: int = 0
    effective_bytes: int = 0
    predicted_frames: int = 0
    frames_encountered: int = 0
    frames_dropped: int = 0
    frames_included: int = 0
    cumulative_duration: int = 0
    output_duration: int = 0
    output_bytes: int = 0
    tags_passed: int = 0
    summary_header_skipped: bool = False

    @classmethod
    def for_input(cls, input_bytes: int) -> "RunAccumulators":
        return cls(input_bytes=input_bytes, effective_bytes=input_bytes)


class DurationTracker:
    """
    Accumulates playback time and predicts the total frame count.

    The total byte size of the input is known up front but its duration is
    not, so the frame count is predicted from the byte budget divided by a
    representative frame size. Under FIRST_FRAME that size is the first real
    frame's, fixed for the rest of the run. RUNNING_AVERAGE instead
    re-predicts after every frame from the mean size observed so far.
    """

    def __init__(
        self,
        accumulators: RunAccumulators,
        policy: PredictionPolicy = PredictionPolicy.FIRST_FRAME,
    ) -> None:
        self.acc: RunAccumulators = accumulators
        self.policy: PredictionPolicy = policy
        self._observed_bytes: int = 0

    def observe(self, frame: Frame) -> int:
        """Count *frame*, add its duration and update the prediction."""
        duration: int = frame.duration
        self.acc.cumulative_duration += duration
        self.acc.frames_encountered += 1
        self._observed_bytes += frame.byte_length
        self._predict(frame)
        return duration

    def _predict(self, frame: Frame) -> None:
        if self.policy is PredictionPolicy.RUNNING_AVERAGE:
            # effective_bytes / (observed_bytes / frames), kept in integers
            if self._observed_bytes > 0:
                self.acc.predicted_frames = (
                    self.acc.effective_bytes * self.acc.frames_encountered // self._observed_bytes
                )
            return

        if self.acc.frames_encountered == 1 and frame.byte_length > 0:
            self.acc.predicted_frames = self.acc.effective_bytes // frame.byte_length
            logger.debug(
                "predicted %d frames from %d effective bytes / %d byte frame",
                self.acc.predicted_frames, self.acc.effective_bytes, frame.byte_length,
            )

    def stop_point(self, end_at: int, frame_duration: int) -> Optional[int]:
        """
        Last frame number to keep when *end_at* nanoseconds are cut from the tail.

        Uses the current frame's duration, not a stream-wide average. Returns
        None when there is no prediction or the frame has no duration.
        """
        if self.acc.predicted_frames <= 0 or frame_duration <= 0:
            return None
        return self.acc.predicted_frames - end_at // frame_duration


class TrimEngine:
    """
    Classifies every frame of a stream as dropped or included.

    Tags are always written. The first frame may be discarded as a VBR summary
    header. Real frames are dropped while the running duration is below
    ``window.start_after``, dropped once their number passes the predicted
    stop point, and written otherwise. Entering the tail is final: later
    frames are dropped even if their own stop point would be looser.
    """

    def __init__(
        self,
        window: TrimWindow,
        classifier: Optional[ISummaryHeaderClassifier] = None,
        input_bytes: int = 0,
        policy: PredictionPolicy = PredictionPolicy.FIRST_FRAME,
    ) -> None:
        self.window: TrimWindow = window
        self.classifier: Optional[ISummaryHeaderClassifier] = classifier
        self.accumulators: RunAccumulators = RunAccumulators.for_input(input_bytes)
        self.tracker: DurationTracker = DurationTracker(self.accumulators, policy)
        self._state: TrimState = TrimState.SCANNING

    @property
    def state(self) -> TrimState:
        return self._state

    def _enter(self, state: TrimState) -> None:
        if state is not self._state:
            logger.debug(
                "%s -> %s at frame %d (%.3fs)",
                self._state.value, state.value,
                self.accumulators.frames_encountered,
                self.accumulators.cumulative_duration / SECOND,
            )
            self._state = state

    # ── Units ────────────────────────────────────────────────────

    def handle_tag(self, tag: Tag, sink: IFrameSink) -> None:
        sink.write_raw(tag.raw_bytes)
        self.accumulators.effective_bytes -= tag.byte_length
        self.accumulators.tags_passed += 1

    def handle_frame(self, frame: Frame, sink: IFrameSink) -> Decision:
        acc: RunAccumulators = self.accumulators

        if (
            acc.frames_encountered == 0
            and self.classifier is not None
            and self.classifier.is_summary_header(frame)
        ):
            acc.summary_header_skipped = True
            logger.debug("skipped VBR summary header (%d bytes)", frame.byte_length)
            return Decision.SUMMARY_HEADER

        frame_duration: int = self.tracker.observe(frame)

        if acc.cumulative_duration < self.window.start_after:
            self._enter(TrimState.TRIMMING_HEAD)
            acc.frames_dropped += 1
            return Decision.DROP_HEAD

        if self._state is TrimState.TRIMMING_TAIL:
            acc.frames_dropped += 1
            return Decision.DROP_TAIL

        if self.window.end_at > 0:
            stop: Optional[int] = self.tracker.stop_point(self.window.end_at, frame_duration)
            if stop is not None and acc.frames_encountered > stop:
                self._enter(TrimState.TRIMMING_TAIL)
                acc.frames_dropped += 1
                return Decision.DROP_TAIL

        self._enter(TrimState.PASSING)
        sink.write_raw(frame.raw_bytes)
        acc.frames_included += 1
        acc.output_duration += frame_duration
        acc.output_bytes += frame.byte_length
        return Decision.INCLUDE

    # ── Pass ─────────────────────────────────────────────────────

    def run(
        self,
        source: IFrameSource,
        sink: IFrameSink,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> RunAccumulators:
        """
        Drive *source* to end-of-stream, writing kept units to *sink*.

        Args:
            source: Frame/tag source positioned at the start of the input.
            sink:   Destination for tags and included frames.
            progress_callback: Optional callback (bytes_consumed, input_bytes).

        Returns:
            The run accumulators.

        Raises:
            OSError: on the first read or write failure. Nothing is retried.
        """
        try:
            while True:
                unit = source.next_unit()

                if isinstance(unit, EndOfStream):
                    break
                if isinstance(unit, Tag):
                    self.handle_tag(unit, sink)
                elif isinstance(unit, Frame):
                    self.handle_frame(unit, sink)
                # SKIP carries no data and touches no counter

                if progress_callback:
                    progress_callback(source.position, self.accumulators.input_bytes)
        finally:
            self._enter(TrimState.DONE)

        return self.accumulators
