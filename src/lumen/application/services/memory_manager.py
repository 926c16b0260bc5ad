"""Rolling conversational memory."""

import asyncio
import logging
from collections import deque
from typing import Any

from lumen.config.models import CompactionMode, MemoryConfig
from lumen.domain.entities import (
    HydratedContext,
    Interaction,
    MemoryStatus,
    Role,
    Summary,
    SummaryRange,
)
from lumen.domain.services.protocols import ConversationSummarizer
from lumen.infrastructure.llm.exceptions import ProviderError

logger = logging.getLogger(__name__)


class MemoryManager:
    """Bounded window of recent interactions plus rolling summaries.

    When an append pushes the window past ``window_size``, the window is
    summarized before anything is dropped, then trimmed back under the
    bound. Summarization is a trigger, not a schedule: it fires only on
    overflow.

    A failed summarization loses that summary, never interactions beyond
    the ones the bound requires dropping, and never leaves the window
    above ``window_size``.
    """

    def __init__(
        self,
        summarizer: ConversationSummarizer,
        window_size: int = 21,
        max_summaries: int = 3,
        compaction_mode: CompactionMode = CompactionMode.SLIDE,
    ) -> None:
        """Initialize the memory.

        Args:
            summarizer: Summarization service used on overflow.
            window_size: Maximum interactions kept verbatim.
            max_summaries: Maximum summaries kept.
            compaction_mode: How an overflowing window is compacted.
        """
        if window_size < 1 or max_summaries < 1:
            raise ValueError("window_size and max_summaries must be at least 1")

        self._summarizer = summarizer
        self._window_size = window_size
        self._max_summaries = max_summaries
        self._compaction_mode = compaction_mode
        self._window: deque[Interaction] = deque()
        self._summaries: deque[Summary] = deque()
        self._counter = 0
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(
        cls, summarizer: ConversationSummarizer, config: MemoryConfig
    ) -> "MemoryManager":
        return cls(
            summarizer,
            window_size=config.window_size,
            max_summaries=config.max_summaries,
            compaction_mode=config.compaction_mode,
        )

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def max_summaries(self) -> int:
        return self._max_summaries

    @property
    def interactions(self) -> tuple[Interaction, ...]:
        return tuple(self._window)

    @property
    def summaries(self) -> tuple[Summary, ...]:
        """Summaries in creation order (oldest first)."""
        return tuple(self._summaries)

    async def add_interaction(self, role: Role | str, text: str) -> Interaction:
        """Append an interaction, compacting if the window overflows.

        Args:
            role: Speaker role.
            text: Content.

        Returns:
            The stored interaction.
        """
        async with self._lock:
            self._counter += 1
            interaction = Interaction(
                role=Role(role), text=text, sequence_id=self._counter
            )
            self._window.append(interaction)

            if len(self._window) > self._window_size:
                try:
                    await self._compact()
                finally:
                    self._evict()

            return interaction

    async def _compact(self) -> None:
        segment = self._compaction_segment()
        try:
            result = await self._summarizer.summarize(segment)
        except ProviderError as e:
            logger.error(
                "Failed to create summary for interactions %d-%d: %s",
                segment[0].sequence_id,
                segment[-1].sequence_id,
                e,
            )
            return

        summary = Summary(
            range=SummaryRange(
                start_sequence_id=segment[0].sequence_id,
                end_sequence_id=segment[-1].sequence_id,
            ),
            text=result.text,
            reasoning=result.reasoning,
        )
        self._summaries.append(summary)
        while len(self._summaries) > self._max_summaries:
            self._summaries.popleft()

        logger.info(
            "Memory compaction: created summary for interactions %d-%d",
            summary.range.start_sequence_id,
            summary.range.end_sequence_id,
        )

    def _compaction_segment(self) -> list[Interaction]:
        if self._compaction_mode == CompactionMode.BLOCK:
            return list(self._window)[:-1]
        return list(self._window)

    def _evict(self) -> None:
        if self._compaction_mode == CompactionMode.BLOCK:
            newest = self._window[-1]
            self._window.clear()
            self._window.append(newest)
        else:
            while len(self._window) > self._window_size:
                self._window.popleft()

    def get_hydrated_context(self) -> HydratedContext:
        """Recent interactions plus summaries, newest summary first."""
        return HydratedContext(
            recent_history=tuple(self._window),
            context_summaries=tuple(reversed(self._summaries)),
        )

    def get_memory_status(self) -> MemoryStatus:
        return MemoryStatus(
            total_interactions=self._counter,
            current_window_size=len(self._window),
            summaries_count=len(self._summaries),
            oldest_interaction_id=self._window[0].sequence_id if self._window else None,
            newest_interaction_id=(
                self._window[-1].sequence_id if self._window else None
            ),
        )

    def export_state(self) -> dict[str, Any]:
        """Serialize the full state for an external store."""
        return {
            "interactions": [i.to_dict() for i in self._window],
            "summaries": [s.to_dict() for s in self._summaries],
            "globalCounter": self._counter,
            "config": {
                "windowSize": self._window_size,
                "maxSummaries": self._max_summaries,
                "compactionMode": self._compaction_mode.value,
            },
        }

    def import_state(self, state: dict[str, Any]) -> None:
        """Restore state produced by ``export_state``.

        ``config`` is merged shallowly over the current settings; missing
        fields default to empty or zero.
        """
        config = {
            "windowSize": self._window_size,
            "maxSummaries": self._max_summaries,
            "compactionMode": self._compaction_mode.value,
            **(state.get("config") or {}),
        }
        self._window_size = config["windowSize"]
        self._max_summaries = config["maxSummaries"]
        self._compaction_mode = CompactionMode(config["compactionMode"])

        self._window = deque(
            Interaction.from_dict(i) for i in state.get("interactions") or []
        )
        self._summaries = deque(
            Summary.from_dict(s) for s in state.get("summaries") or []
        )
        self._counter = state.get("globalCounter") or 0

    def reset(self) -> None:
        self._window.clear()
        self._summaries.clear()
        self._counter = 0
