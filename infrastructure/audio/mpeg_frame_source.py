# infrastructure/audio/mpeg_frame_source.py
# Implementation of IFrameSource for MPEG-1/2/2.5 audio (Layers I-III).
# Walks the byte stream forward only; never seeks.

import logging
from typing import BinaryIO, Optional

from application.dto.stream_units import Frame, Tag, StreamUnit, END_OF_STREAM, SKIP
from application.ports.frame_source_port import IFrameSource

logger = logging.getLogger(__name__)

# Bitrates in kbps, indexed by the 4-bit header field. 0 is free format.
BITRATES_KBPS: dict[tuple[str, int], tuple[int, ...]] = {
    ("1", 1): (0, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448),
    ("1", 2): (0, 32, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 384),
    ("1", 3): (0, 32, 40, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320),
    ("2", 1): (0, 32, 48, 56, 64, 80, 96, 112, 128, 144, 160, 176, 192, 224, 256),
    ("2", 2): (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
    ("2", 3): (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
}

SAMPLING_RATES: dict[str, tuple[int, int, int]] = {
    "1":   (44100, 48000, 32000),
    "2":   (22050, 24000, 16000),
    "2.5": (11025, 12000, 8000),
}

# 2-bit version field → version label (0b01 is reserved)
VERSIONS: dict[int, str] = {0b00: "2.5", 0b10: "2", 0b11: "1"}

# 2-bit layer field → layer number (0b00 is reserved)
LAYERS: dict[int, int] = {0b01: 3, 0b10: 2, 0b11: 1}

ID3V2_HEADER_SIZE: int = 10
ID3V1_SIZE: int = 128
FRAME_HEADER_SIZE: int = 4


def samples_per_frame(version: str, layer: int) -> int:
    if layer == 1:
        return 384
    if layer == 3 and version != "1":
        return 576
    return 1152


def parse_frame_header(header: bytes) -> Optional[dict]:
    """
    Decode a 4-byte MPEG audio frame header.

    Returns a dict with version, layer, bitrate, sampling_rate, padding,
    channel_mode, crc_protected, sample_count and frame_length, or None when
    the bytes are not a usable header (no sync, reserved fields, free format).
    """
    if len(header) < FRAME_HEADER_SIZE:
        return None
    if header[0] != 0xFF or (header[1] & 0xE0) != 0xE0:
        return None

    version: Optional[str] = VERSIONS.get((header[1] >> 3) & 0b11)
    layer: Optional[int] = LAYERS.get((header[1] >> 1) & 0b11)
    if version is None or layer is None:
        return None

    bitrate_index: int = (header[2] >> 4) & 0b1111
    rate_index: int = (header[2] >> 2) & 0b11
    if bitrate_index in (0, 0b1111) or rate_index == 0b11:
        return None

    table_version: str = "1" if version == "1" else "2"
    bitrate: int = BITRATES_KBPS[(table_version, layer)][bitrate_index] * 1000
    sampling_rate: int = SAMPLING_RATES[version][rate_index]
    padding: int = (header[2] >> 1) & 0b1
    sample_count: int = samples_per_frame(version, layer)

    if layer == 1:
        frame_length: int = (12 * bitrate // sampling_rate + padding) * 4
    else:
        frame_length = (sample_count // 8) * bitrate // sampling_rate + padding

    return {
        "version": version,
        "layer": layer,
        "bitrate": bitrate,
        "sampling_rate": sampling_rate,
        "padding": padding,
        "channel_mode": (header[3] >> 6) & 0b11,
        "crc_protected": (header[1] & 0b1) == 0,
        "sample_count": sample_count,
        "frame_length": frame_length,
    }


def id3v2_tag_length(header: bytes) -> Optional[int]:
    """Total byte length of an ID3v2 tag from its 10-byte header, or None."""
    if len(header) < ID3V2_HEADER_SIZE or header[:3] != b"ID3":
        return None
    if header[3] == 0xFF or header[4] == 0xFF:
        return None
    size_bytes: bytes = header[6:10]
    if any(b & 0x80 for b in size_bytes):
        return None  # not synchsafe

    size: int = 0
    for b in size_bytes:
        size = (size << 7) | b
    footer: int = ID3V2_HEADER_SIZE if header[5] & 0x10 else 0
    return ID3V2_HEADER_SIZE + size + footer


class MpegFrameSource(IFrameSource):
    """
    Pull MPEG audio frames and ID3 tags from a binary stream.

    Unparseable bytes are consumed up to the next plausible unit boundary
    (0xFF sync byte, "ID3" or "TAG") and reported as SKIP. "TAG" only becomes
    an ID3v1 tag when exactly 128 bytes remain. A truncated unit at the end
    of the input is consumed and reported as SKIP as well.
    """

    CHUNK_SIZE: int = 64 * 1024

    def __init__(self, stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> None:
        self._stream: BinaryIO = stream
        self._chunk_size: int = chunk_size
        self._buffer: bytearray = bytearray()
        self._offset: int = 0
        self._position: int = 0
        self._exhausted: bool = False

    @property
    def position(self) -> int:
        return self._position

    # ── Buffer ───────────────────────────────────────────────────

    def _available(self) -> int:
        return len(self._buffer) - self._offset

    def _fill(self, n: int) -> bool:
        """Make at least *n* bytes available; False if the input ends first."""
        while self._available() < n and not self._exhausted:
            chunk: bytes = self._stream.read(max(self._chunk_size, n))
            if not chunk:
                self._exhausted = True
                break
            if self._offset:
                del self._buffer[:self._offset]
                self._offset = 0
            self._buffer.extend(chunk)
        return self._available() >= n

    def _peek(self, n: int) -> bytes:
        self._fill(n)
        return bytes(self._buffer[self._offset:self._offset + n])

    def _take(self, n: int) -> bytes:
        self._fill(n)
        data: bytes = bytes(self._buffer[self._offset:self._offset + n])
        self._offset += len(data)
        self._position += len(data)
        return data

    def _resync(self) -> StreamUnit:
        """Consume junk up to the next candidate unit start and report SKIP."""
        start: int = self._position
        self._take(1)
        while self._fill(1):
            window: bytes = bytes(self._buffer[self._offset:])
            hits: list[int] = [
                i for i in (window.find(b"\xff"), window.find(b"ID3"), window.find(b"TAG"))
                if i != -1
            ]
            if hits:
                self._take(min(hits))
                break
            # Keep two bytes back so a marker split across chunks is still found
            keep: int = min(2, len(window))
            self._take(len(window) - keep)
            if not self._fill(keep + 1):
                self._take(keep)
                break
        logger.debug("skipped %d unparseable bytes at offset %d", self._position - start, start)
        return SKIP

    # ── Units ────────────────────────────────────────────────────

    def next_unit(self) -> StreamUnit:
        if not self._fill(1):
            return END_OF_STREAM

        head: bytes = self._peek(ID3V2_HEADER_SIZE)

        if head[:3] == b"ID3":
            tag_length: Optional[int] = id3v2_tag_length(head)
            if tag_length is not None:
                return self._read_tag(tag_length, "ID3v2")

        if head[:3] == b"TAG" and self._at_trailing_id3v1():
            return self._read_tag(ID3V1_SIZE, "ID3v1")

        header: Optional[dict] = parse_frame_header(head[:FRAME_HEADER_SIZE])
        if header is None:
            return self._resync()

        frame_length: int = header["frame_length"]
        if not self._fill(frame_length):
            return self._drain_truncated("frame")

        return Frame(
            raw_bytes=self._take(frame_length),
            sample_count=header["sample_count"],
            sampling_rate=header["sampling_rate"],
            mpeg_version=header["version"],
            layer=header["layer"],
            bitrate=header["bitrate"],
            channel_mode=header["channel_mode"],
            crc_protected=header["crc_protected"],
        )

    def _at_trailing_id3v1(self) -> bool:
        """ID3v1 lives in the last 128 bytes; "TAG" anywhere else is junk."""
        return not self._fill(ID3V1_SIZE + 1) and self._available() == ID3V1_SIZE

    def _read_tag(self, length: int, kind: str) -> StreamUnit:
        if not self._fill(length):
            return self._drain_truncated(kind)
        return Tag(raw_bytes=self._take(length), kind=kind)

    def _drain_truncated(self, what: str) -> StreamUnit:
        start: int = self._position
        remaining: int = self._available()
        self._take(remaining)
        logger.debug("dropped truncated %s (%d bytes) at offset %d", what, remaining, start)
        return SKIP
