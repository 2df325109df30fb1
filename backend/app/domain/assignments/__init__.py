"""Assignment domain."""
from .models import Assignment

__all__ = ["Assignment"]
