"""Route group exports."""

from . import allocation, health

__all__ = ["allocation", "health"]
