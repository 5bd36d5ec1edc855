# Re-export segment components
from .core import PaymentRow, Segment, segment_description
from .generator import SegmentGenerator, segments_for

__all__ = [
    "PaymentRow",
    "Segment",
    "SegmentGenerator",
    "segment_description",
    "segments_for",
]
