"""Lumen: LLM orchestration with rolling memory, intent routing and guarded command execution."""

__version__ = "0.1.0"
