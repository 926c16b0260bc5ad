"""Domain services."""

from lumen.domain.services.command_safety import DANGEROUS_PATTERNS, is_dangerous
from lumen.domain.services.protocols import (
    AuditSink,
    CommandRunner,
    ConversationSummarizer,
    EventChannel,
    IntentRouter,
)
from lumen.domain.services.war_room_policy import (
    MIN_TEST_CASES,
    QUALITY_THRESHOLD,
    evaluate_verdict,
    requires_war_room,
)

__all__ = [
    "DANGEROUS_PATTERNS",
    "MIN_TEST_CASES",
    "QUALITY_THRESHOLD",
    "AuditSink",
    "CommandRunner",
    "ConversationSummarizer",
    "EventChannel",
    "IntentRouter",
    "evaluate_verdict",
    "is_dangerous",
    "requires_war_room",
]
