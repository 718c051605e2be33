# application/ports/frame_sink_port.py
# Port interface for the destination of kept frames and tags.

from abc import ABC, abstractmethod


class IFrameSink(ABC):
    """Abstract base class for verbatim byte sinks."""

    @abstractmethod
    def write_raw(self, data: bytes) -> None:
        """Write *data* unchanged. Raises OSError on failure."""
        ...
