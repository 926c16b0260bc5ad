"""Two-role adversarial review of a proposed change."""

import logging

from lumen.domain.entities import (
    AnalysisFindings,
    DebateEntry,
    PlannedTest,
    ReviewIssue,
    Severity,
    TestPlan,
    WarRoomVerdict,
)
from lumen.domain.services.war_room_policy import (
    DEFAULT_COVERAGE_TARGET,
    DEFAULT_QUALITY_SCORE,
    evaluate_verdict,
)
from lumen.infrastructure.llm.client import CompletionClient
from lumen.infrastructure.llm.models import (
    WarRoomAnalysisOutput,
    WarRoomTestPlanOutput,
)
from lumen.infrastructure.llm.templates import create_jinja_env

logger = logging.getLogger(__name__)

ANALYZER_ROLE = "Code Analyzer"
TESTER_ROLE = "Testing Agent"


class LLMWarRoom:
    """Runs the analysis role, then the testing role, then decides.

    The testing role sees the analysis role's issue list. The verdict
    itself is computed locally by ``evaluate_verdict``.
    """

    def __init__(self, client: CompletionClient) -> None:
        """Initialize the War Room.

        Args:
            client: Completion client shared by both roles.
        """
        self._client = client
        env = create_jinja_env()
        self._analysis_template = env.get_template("war_room_analysis.j2")
        self._testing_template = env.get_template("war_room_testing.j2")

    async def run(self, proposal: str, code: str, context: str = "") -> WarRoomVerdict:
        """Review a proposal and its code.

        Args:
            proposal: Description of the proposed change.
            code: Code under review.
            context: Optional system context shown to the analysis role.

        Returns:
            The verdict, including the per-role debate log.

        Raises:
            ProviderError: Either role's completion failed. No partial
                verdict is produced.
        """
        logger.info("War Room session started")

        try:
            analysis_output = await self._client.complete(
                self._analysis_template.render(
                    proposal=proposal, code=code, context=context
                ),
                WarRoomAnalysisOutput,
            )
            analysis = to_findings(analysis_output)
            logger.info(
                "%s: quality score %s, %d issue(s)",
                ANALYZER_ROLE,
                analysis.quality_score,
                len(analysis.issues),
            )

            test_output = await self._client.complete(
                self._testing_template.render(
                    proposal=proposal,
                    code=code,
                    issues=[issue.description for issue in analysis.issues],
                ),
                WarRoomTestPlanOutput,
            )
            test_plan = to_test_plan(test_output)
            logger.info("%s: %d test(s) planned", TESTER_ROLE, len(test_plan.tests))
        except Exception:
            logger.exception("War Room session failed")
            raise

        verdict = evaluate_verdict(
            analysis,
            test_plan,
            debate_log=(
                DebateEntry(role=ANALYZER_ROLE, findings=analysis_output.to_wire()),
                DebateEntry(role=TESTER_ROLE, findings=test_output.to_wire()),
            ),
        )
        logger.info("War Room verdict: %s", verdict.verdict.value)
        return verdict


def to_findings(output: WarRoomAnalysisOutput) -> AnalysisFindings:
    return AnalysisFindings(
        quality_score=(
            DEFAULT_QUALITY_SCORE
            if output.quality_score is None
            else output.quality_score
        ),
        issues=tuple(
            ReviewIssue(description=issue.description, severity=Severity(issue.severity))
            for issue in output.issues
        ),
        recommendations=tuple(output.recommendations),
    )


def to_test_plan(output: WarRoomTestPlanOutput) -> TestPlan:
    return TestPlan(
        tests=tuple(
            PlannedTest(
                name=test.test_name,
                description=test.test_description,
                test_type=test.test_type,
            )
            for test in output.tests
        ),
        coverage_target=(
            DEFAULT_COVERAGE_TARGET
            if output.coverage_target is None
            else output.coverage_target
        ),
    )
