from . import assignments, range_analysis

__all__ = ["assignments", "range_analysis"]
