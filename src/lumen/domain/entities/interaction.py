"""Conversation interaction and summary entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Role(Enum):
    """Speaker of an interaction."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Interaction:
    """One turn in a conversation.

    Attributes:
        role: Who produced the text.
        text: Content of the turn.
        sequence_id: Monotonic id, unique per memory, never reused.
        timestamp: Creation time.
    """

    role: Role
    text: str
    sequence_id: int
    timestamp: datetime = field(default_factory=_now)

    def format_line(self) -> str:
        """Render as a ``[role]: text`` transcript line."""
        return f"[{self.role.value}]: {self.text}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role.value,
            "text": self.text,
            "id": self.sequence_id,
            "ts": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Interaction":
        return cls(
            role=Role(data["role"]),
            text=data["text"],
            sequence_id=data["id"],
            timestamp=datetime.fromisoformat(data["ts"]) if "ts" in data else _now(),
        )


@dataclass(frozen=True)
class SummaryRange:
    """Inclusive range of interaction sequence ids."""

    start_sequence_id: int
    end_sequence_id: int

    def __post_init__(self) -> None:
        if self.start_sequence_id > self.end_sequence_id:
            raise ValueError(
                f"Invalid summary range: {self.start_sequence_id}"
                f"-{self.end_sequence_id}"
            )


@dataclass(frozen=True)
class Summary:
    """Compressed representation of a contiguous range of interactions.

    Attributes:
        range: Interactions covered by the summary.
        text: Model-produced condensation.
        reasoning: Model-produced justification (best effort).
        timestamp: Creation time.
    """

    range: SummaryRange
    text: str
    reasoning: str | None = None
    timestamp: datetime = field(default_factory=_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "range": {
                "startId": self.range.start_sequence_id,
                "endId": self.range.end_sequence_id,
            },
            "text": self.text,
            "reasoning": self.reasoning,
            "ts": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Summary":
        range_data = data["range"]
        return cls(
            range=SummaryRange(
                start_sequence_id=range_data["startId"],
                end_sequence_id=range_data["endId"],
            ),
            text=data["text"],
            reasoning=data.get("reasoning"),
            timestamp=datetime.fromisoformat(data["ts"]) if "ts" in data else _now(),
        )


@dataclass(frozen=True)
class SummarizationResult:
    """Output of a summarization call."""

    text: str
    reasoning: str | None = None


@dataclass(frozen=True)
class HydratedContext:
    """Recent interactions plus historical summaries for a model call.

    Attributes:
        recent_history: Window contents, oldest first.
        context_summaries: Summaries, newest first.
    """

    recent_history: tuple[Interaction, ...]
    context_summaries: tuple[Summary, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "recentHistory": [i.to_dict() for i in self.recent_history],
            "contextSummaries": [s.to_dict() for s in self.context_summaries],
        }


@dataclass(frozen=True)
class MemoryStatus:
    """Snapshot of memory counters."""

    total_interactions: int
    current_window_size: int
    summaries_count: int
    oldest_interaction_id: int | None
    newest_interaction_id: int | None
