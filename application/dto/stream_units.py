# application/dto/stream_units.py
# Units produced by a frame source: frames, tags and the two control signals.

from dataclasses import dataclass
from typing import Union

# Durations are integer nanoseconds so frame boundaries compare exactly
NANOSECOND: int = 1
MICROSECOND: int = 1000 * NANOSECOND
MILLISECOND: int = 1000 * MICROSECOND
SECOND: int = 1000 * MILLISECOND
MINUTE: int = 60 * SECOND
HOUR: int = 60 * MINUTE


@dataclass(frozen=True)
class Frame:
    """One independently decodable audio frame, carried verbatim."""
    raw_bytes: bytes
    sample_count: int
    sampling_rate: int
    mpeg_version: str = "1"      # "1" | "2" | "2.5"
    layer: int = 3
    bitrate: int = 0             # bits per second
    channel_mode: int = 0        # 3 = mono
    crc_protected: bool = False

    @property
    def byte_length(self) -> int:
        return len(self.raw_bytes)

    @property
    def duration(self) -> int:
        """Playback duration in nanoseconds (0 for a degenerate header)."""
        if self.sampling_rate <= 0 or self.sample_count <= 0:
            return 0
        return self.sample_count * SECOND // self.sampling_rate


@dataclass(frozen=True)
class Tag:
    """Out-of-band metadata block, passed through untouched."""
    raw_bytes: bytes
    kind: str = "ID3v2"          # "ID3v2" | "ID3v1"

    @property
    def byte_length(self) -> int:
        return len(self.raw_bytes)


class EndOfStream:
    """Signals that the source has no more units."""

    def __repr__(self) -> str:
        return "END_OF_STREAM"


class Skip:
    """Signals bytes the source could not parse; carries no data."""

    def __repr__(self) -> str:
        return "SKIP"


END_OF_STREAM: EndOfStream = EndOfStream()
SKIP: Skip = Skip()

StreamUnit = Union[Frame, Tag, EndOfStream, Skip]
