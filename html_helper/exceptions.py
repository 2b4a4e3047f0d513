"""Package-specific exception types."""

from __future__ import annotations


class HelperError(ValueError):
    """Base class for html-helper errors.

    The indentation engine itself never raises; these errors come from the
    edges (buffer offsets, document templates).
    """


class BufferRangeError(HelperError):
    """Raised when a buffer offset falls outside the document.

    Args:
        offset: The rejected offset.
        length: Length of the buffer text at the time of the call.
    """

    def __init__(self, offset: int, length: int):
        self.offset = offset
        self.length = length
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return f"Offset {self.offset} is outside the buffer (length {self.length})"


class TimestampError(HelperError):
    """Raised when a document has no complete timestamp block.

    Args:
        start_marker: Marker that opens the timestamp block.
        end_marker: Marker that closes the timestamp block.
    """

    def __init__(self, start_marker: str, end_marker: str):
        self.start_marker = start_marker
        self.end_marker = end_marker
        super().__init__(f"No timestamp block found ({start_marker} ... {end_marker})")
