# infrastructure/audio/stream_frame_sink.py
# Implementation of IFrameSink over any writable binary stream.

from typing import BinaryIO

from application.ports.frame_sink_port import IFrameSink


class StreamFrameSink(IFrameSink):
    """Write units verbatim to *stream*; the caller owns and closes it."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream: BinaryIO = stream
        self.bytes_written: int = 0

    def write_raw(self, data: bytes) -> None:
        self._stream.write(data)
        self.bytes_written += len(data)
