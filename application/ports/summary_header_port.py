# application/ports/summary_header_port.py
# Port interface for detecting encoder summary headers (Xing/Info, VBRI).

from abc import ABC, abstractmethod

from application.dto.stream_units import Frame


class ISummaryHeaderClassifier(ABC):
    """Decides whether a frame is a VBR summary header rather than audio."""

    @abstractmethod
    def is_summary_header(self, frame: Frame) -> bool:
        ...
