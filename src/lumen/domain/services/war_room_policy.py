"""War Room verdict rules.

The verdict is computed here, deterministically, from the two roles'
structured outputs. The thresholds are constants: nothing a model
returns can change them.
"""

import re
from collections.abc import Sequence

from lumen.domain.entities.verdict import (
    AnalysisFindings,
    DebateEntry,
    ReviewIssue,
    Severity,
    TestPlan,
    Verdict,
    WarRoomVerdict,
)

QUALITY_THRESHOLD = 75
MIN_TEST_CASES = 2
CRITICAL_SEVERITIES = frozenset({Severity.CRITICAL, Severity.HIGH})

# Used when the analysis role omits its score. Below the threshold on purpose.
DEFAULT_QUALITY_SCORE = 50
DEFAULT_COVERAGE_TARGET = 80

_HIGH_RISK_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern)
    for pattern in (
        r"\brm\s+-(?:rf|fr)\b",
        r"\bsudo\b",
        r"\bchmod\s+777\b",
        # overwriting source files through a redirect
        r">\s*\S+\.(?:js|ts|py)$",
        # global package installs
        r"\b(?:npm|pnpm|yarn)\s+(?:install|i|add)\b.*\s(?:-g|--global)\b",
        r"\bgit\s+push\b.*(?:--force\b|\s-f\b)",
    )
)


def requires_war_room(command: str) -> bool:
    """Return True when a command looks risky enough for a War Room review.

    A routing hint for callers, deliberately looser than the
    dangerous-pattern filter. It does not block anything.
    """
    return any(pattern.search(command) for pattern in _HIGH_RISK_PATTERNS)


def critical_issues(issues: Sequence[ReviewIssue]) -> tuple[ReviewIssue, ...]:
    return tuple(issue for issue in issues if issue.severity in CRITICAL_SEVERITIES)


def evaluate_verdict(
    analysis: AnalysisFindings,
    test_plan: TestPlan,
    debate_log: Sequence[DebateEntry] = (),
) -> WarRoomVerdict:
    """Compute the verdict from both roles' findings.

    Safe means: score >= QUALITY_THRESHOLD, at least MIN_TEST_CASES tests,
    and no critical or high severity issue.

    Args:
        analysis: Analysis role findings.
        test_plan: Testing role plan.
        debate_log: Raw role outputs to carry into the verdict.

    Returns:
        The verdict with its human-readable summary.
    """
    critical = critical_issues(analysis.issues)
    is_safe = (
        analysis.quality_score >= QUALITY_THRESHOLD
        and len(test_plan.tests) >= MIN_TEST_CASES
        and len(critical) == 0
    )

    return WarRoomVerdict(
        verdict=Verdict.APPROVED if is_safe else Verdict.REJECTED,
        is_safe=is_safe,
        quality_score=analysis.quality_score,
        test_count=len(test_plan.tests),
        critical_issues=critical,
        coverage_target=test_plan.coverage_target,
        recommendations=analysis.recommendations,
        debate_log=tuple(debate_log),
        summary=build_summary(is_safe, analysis, test_plan, critical),
    )


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def build_summary(
    is_safe: bool,
    analysis: AnalysisFindings,
    test_plan: TestPlan,
    critical: Sequence[ReviewIssue],
) -> str:
    """Render the multi-line verdict summary."""
    lines = [
        f"Quality Assessment: {_format_number(analysis.quality_score)}/100",
        f"Test Coverage: {_format_number(test_plan.coverage_target)}%",
        f"Test Cases: {len(test_plan.tests)} generated",
    ]

    if critical:
        lines.append("")
        lines.append("Critical Issues:")
        for issue in critical:
            lines.append(f"- {issue.description} ({issue.severity.value})")

    if analysis.recommendations:
        lines.append("")
        lines.append("Recommendations:")
        for recommendation in analysis.recommendations[:3]:
            lines.append(f"- {recommendation}")

    lines.append("")
    if is_safe:
        lines.append(f"Final Verdict: {Verdict.APPROVED.value} (safe to proceed)")
    else:
        lines.append(f"Final Verdict: {Verdict.REJECTED.value} (requires revision)")
    return "\n".join(lines)
