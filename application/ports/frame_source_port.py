# application/ports/frame_source_port.py
# Port interface for anything that yields frames and tags from a byte stream.
# Domain layer — must not import infrastructure or adapter code.

from abc import ABC, abstractmethod

from application.dto.stream_units import StreamUnit


class IFrameSource(ABC):
    """Abstract base class for sequential frame/tag sources."""

    @property
    @abstractmethod
    def position(self) -> int:
        """Number of input bytes consumed so far."""
        ...

    @abstractmethod
    def next_unit(self) -> StreamUnit:
        """
        Pull the next unit from the input.

        Returns:
            A Frame, a Tag, END_OF_STREAM once the input is exhausted, or SKIP
            when the bytes at the read position could not be parsed.

        Raises:
            OSError: if the underlying stream cannot be read.
        """
        ...
