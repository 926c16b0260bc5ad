"""War Room entities."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Verdict(Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Severity(Enum):
    """Issue severity reported by the analysis role."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class ReviewIssue:
    description: str
    severity: Severity


@dataclass(frozen=True)
class AnalysisFindings:
    """Analysis role output after defaults are applied."""

    quality_score: float
    issues: tuple[ReviewIssue, ...] = ()
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True)
class PlannedTest:
    name: str
    description: str
    test_type: str


@dataclass(frozen=True)
class TestPlan:
    """Testing role output after defaults are applied."""

    __test__ = False  # not a pytest class

    tests: tuple[PlannedTest, ...] = ()
    coverage_target: float = 80


@dataclass(frozen=True)
class DebateEntry:
    """Raw structured output of one role."""

    role: str
    findings: dict[str, Any]


@dataclass(frozen=True)
class WarRoomVerdict:
    """Result of one War Room run.

    Attributes:
        verdict: APPROVED or REJECTED.
        is_safe: True when every threshold passed.
        quality_score: Analysis score (0-100).
        test_count: Number of planned tests.
        critical_issues: Issues with severity critical or high.
        coverage_target: Testing role coverage target.
        recommendations: Analysis recommendations.
        debate_log: Per-role raw outputs, in order.
        summary: Human-readable multi-line summary.
    """

    verdict: Verdict
    is_safe: bool
    quality_score: float
    test_count: int
    critical_issues: tuple[ReviewIssue, ...]
    coverage_target: float
    recommendations: tuple[str, ...] = ()
    debate_log: tuple[DebateEntry, ...] = field(default_factory=tuple)
    summary: str = ""

    @property
    def critical_issue_count(self) -> int:
        return len(self.critical_issues)

    def to_dict(self) -> dict[str, Any]:
        return {
            "verdict": self.verdict.value,
            "isSafe": self.is_safe,
            "qualityScore": self.quality_score,
            "testCount": self.test_count,
            "criticalIssueCount": self.critical_issue_count,
            "criticalIssues": [
                {"description": i.description, "severity": i.severity.value}
                for i in self.critical_issues
            ],
            "coverageTarget": self.coverage_target,
            "debateLog": [
                {"role": entry.role, "findings": entry.findings}
                for entry in self.debate_log
            ],
            "summary": self.summary,
        }
