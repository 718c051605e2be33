# infrastructure/audio/__init__.py
from .mpeg_frame_source import MpegFrameSource
from .stream_frame_sink import StreamFrameSink
from .vbr_header_classifier import VbrHeaderClassifier

__all__ = [
    "MpegFrameSource",
    "StreamFrameSink",
    "VbrHeaderClassifier",
]
