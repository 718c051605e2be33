# infrastructure/audio/vbr_header_classifier.py
# Implementation of ISummaryHeaderClassifier for Xing/Info and VBRI headers.

from application.dto.stream_units import Frame
from application.ports.summary_header_port import ISummaryHeaderClassifier

XING_TAGS: tuple[bytes, ...] = (b"Xing", b"Info")
VBRI_TAG: bytes = b"VBRI"
VBRI_OFFSET: int = 36  # 4-byte header + 32 bytes, fixed by the Fraunhofer encoder


def side_info_size(mpeg_version: str, channel_mode: int) -> int:
    """Layer III side information size in bytes."""
    mono: bool = channel_mode == 3
    if mpeg_version == "1":
        return 17 if mono else 32
    return 9 if mono else 17


def xing_offset(frame: Frame) -> int:
    """Byte offset of the Xing/Info tag inside *frame*."""
    crc: int = 2 if frame.crc_protected else 0
    return 4 + crc + side_info_size(frame.mpeg_version, frame.channel_mode)


def is_xing_header(frame: Frame) -> bool:
    if frame.layer != 3:
        return False
    offset: int = xing_offset(frame)
    return frame.raw_bytes[offset:offset + 4] in XING_TAGS


def is_vbri_header(frame: Frame) -> bool:
    if frame.layer != 3:
        return False
    return frame.raw_bytes[VBRI_OFFSET:VBRI_OFFSET + 4] == VBRI_TAG


class VbrHeaderClassifier(ISummaryHeaderClassifier):
    """Recognises the LAME/Xing and Fraunhofer VBRI summary frames."""

    def is_summary_header(self, frame: Frame) -> bool:
        return is_xing_header(frame) or is_vbri_header(frame)
