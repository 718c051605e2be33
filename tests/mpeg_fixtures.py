# Byte-level builders for synthetic MPEG audio streams used across the tests.

from typing import Optional

from application.dto.stream_units import (
    Frame, Tag, StreamUnit, END_OF_STREAM,
)
from application.ports.frame_sink_port import IFrameSink
from application.ports.frame_source_port import IFrameSource

_VERSION_BITS: dict[str, int] = {"1": 0b11, "2": 0b10, "2.5": 0b00}
_LAYER_BITS: dict[int, int] = {1: 0b11, 2: 0b10, 3: 0b01}
_RATE_INDEX: dict[str, dict[int, int]] = {
    "1":   {44100: 0, 48000: 1, 32000: 2},
    "2":   {22050: 0, 24000: 1, 16000: 2},
    "2.5": {11025: 0, 12000: 1, 8000: 2},
}
_BITRATE_INDEX: dict[tuple[str, int], tuple[int, ...]] = {
    ("1", 1): (0, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448),
    ("1", 2): (0, 32, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 384),
    ("1", 3): (0, 32, 40, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320),
    ("2", 3): (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
}


def frame_header(
    version: str = "1",
    layer: int = 3,
    bitrate_kbps: int = 128,
    sampling_rate: int = 44100,
    padding: int = 0,
    channel_mode: int = 0,
    crc: bool = False,
) -> bytes:
    """Encode a 4-byte MPEG audio frame header."""
    table: str = "1" if version == "1" else "2"
    bitrate_index: int = _BITRATE_INDEX[(table, layer)].index(bitrate_kbps)
    b1: int = 0xE0 | (_VERSION_BITS[version] << 3) | (_LAYER_BITS[layer] << 1) | (0 if crc else 1)
    b2: int = (bitrate_index << 4) | (_RATE_INDEX[version][sampling_rate] << 2) | (padding << 1)
    b3: int = channel_mode << 6
    return bytes([0xFF, b1, b2, b3])


def frame_length(
    version: str = "1", layer: int = 3, bitrate_kbps: int = 128,
    sampling_rate: int = 44100, padding: int = 0,
) -> int:
    if layer == 1:
        return (12 * bitrate_kbps * 1000 // sampling_rate + padding) * 4
    samples: int = 576 if (layer == 3 and version != "1") else 1152
    return (samples // 8) * bitrate_kbps * 1000 // sampling_rate + padding


def mpeg_frame(index: int = 0, marker: Optional[tuple[int, bytes]] = None, **header) -> bytes:
    """
    A complete frame: header, the frame index in bytes 4-7, zero padding.

    *marker* places (offset, bytes) into the payload, e.g. (36, b"Xing").
    """
    head: bytes = frame_header(**header)
    length: int = frame_length(
        header.get("version", "1"), header.get("layer", 3),
        header.get("bitrate_kbps", 128), header.get("sampling_rate", 44100),
        header.get("padding", 0),
    )
    body: bytearray = bytearray(length - 4)
    body[0:4] = index.to_bytes(4, "big")
    if marker is not None:
        offset, data = marker
        body[offset - 4:offset - 4 + len(data)] = data
    return head + bytes(body)


def xing_frame(**header) -> bytes:
    """LAME-style summary frame for MPEG-1 stereo (tag at offset 36)."""
    return mpeg_frame(index=0, marker=(36, b"Xing"), **header)


def id3v2_tag(payload_size: int = 0, footer: bool = False) -> bytes:
    """An ID3v2.4 tag whose body is *payload_size* zero bytes."""
    size: bytes = bytes([
        (payload_size >> 21) & 0x7F,
        (payload_size >> 14) & 0x7F,
        (payload_size >> 7) & 0x7F,
        payload_size & 0x7F,
    ])
    flags: int = 0x10 if footer else 0x00
    tag: bytes = b"ID3" + b"\x04\x00" + bytes([flags]) + size + bytes(payload_size)
    if footer:
        tag += b"3DI" + b"\x04\x00" + bytes([flags]) + size
    return tag


def id3v1_tag(title: bytes = b"Title") -> bytes:
    return (b"TAG" + title).ljust(128, b"\x00")


def audio_frame(
    index: int,
    sample_count: int = 1152,
    sampling_rate: int = 44100,
    size: int = 417,
) -> Frame:
    """A Frame record carrying *index* in its payload, for engine-level tests."""
    raw: bytearray = bytearray(size)
    raw[0:4] = frame_header()
    raw[4:8] = index.to_bytes(4, "big")
    return Frame(raw_bytes=bytes(raw), sample_count=sample_count, sampling_rate=sampling_rate)


def frame_index(raw: bytes) -> int:
    return int.from_bytes(raw[4:8], "big")


class ListFrameSource(IFrameSource):
    """Replays a fixed list of units, then END_OF_STREAM forever."""

    def __init__(self, units: list[StreamUnit]) -> None:
        self._units: list[StreamUnit] = list(units)
        self._position: int = 0

    @property
    def position(self) -> int:
        return self._position

    def next_unit(self) -> StreamUnit:
        if not self._units:
            return END_OF_STREAM
        unit: StreamUnit = self._units.pop(0)
        if isinstance(unit, (Frame, Tag)):
            self._position += unit.byte_length
        return unit


class ListFrameSink(IFrameSink):
    """Collects every write in order."""

    def __init__(self) -> None:
        self.writes: list[bytes] = []

    def write_raw(self, data: bytes) -> None:
        self.writes.append(data)

    @property
    def data(self) -> bytes:
        return b"".join(self.writes)
