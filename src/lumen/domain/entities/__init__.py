"""Domain entities."""

from lumen.domain.entities.agent import AgentResponse, AgentType, ResponseChoice
from lumen.domain.entities.command import (
    AuditEntry,
    CommandProposal,
    ExecutionOptions,
    ExecutionResult,
    ExecutionStatus,
)
from lumen.domain.entities.execution_event import ExecutionEvent, ExecutionEventType
from lumen.domain.entities.interaction import (
    HydratedContext,
    Interaction,
    MemoryStatus,
    Role,
    SummarizationResult,
    Summary,
    SummaryRange,
)
from lumen.domain.entities.session import Session
from lumen.domain.entities.verdict import (
    AnalysisFindings,
    DebateEntry,
    PlannedTest,
    ReviewIssue,
    Severity,
    TestPlan,
    Verdict,
    WarRoomVerdict,
)

__all__ = [
    "AgentResponse",
    "AgentType",
    "AnalysisFindings",
    "AuditEntry",
    "CommandProposal",
    "DebateEntry",
    "ExecutionEvent",
    "ExecutionEventType",
    "ExecutionOptions",
    "ExecutionResult",
    "ExecutionStatus",
    "HydratedContext",
    "Interaction",
    "MemoryStatus",
    "PlannedTest",
    "ResponseChoice",
    "ReviewIssue",
    "Role",
    "Session",
    "Severity",
    "SummarizationResult",
    "Summary",
    "SummaryRange",
    "TestPlan",
    "Verdict",
    "WarRoomVerdict",
]
