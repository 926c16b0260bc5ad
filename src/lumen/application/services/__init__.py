"""Application services."""

from lumen.application.services.memory_manager import MemoryManager

__all__ = ["MemoryManager"]
