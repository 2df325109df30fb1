"""Range domain."""
from .models import UNKNOWN_RANGE_NAME, Range

__all__ = ["UNKNOWN_RANGE_NAME", "Range"]
