"""Pydantic models for structured output.

Field names on the wire are camelCase; each model accepts both the
wire alias and the Python attribute name.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lumen.domain.entities import AgentType, ResponseChoice


class WireModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# default agent


class BaseAgentOutput(WireModel):
    """General conversation, code or terminal command proposal."""

    choice: ResponseChoice = Field(
        description="conversational, code, or terminalCommand"
    )
    response: str | None = Field(default=None, description="Conversational reply")
    code: str | None = Field(default=None, description="Generated code")
    language: str | None = Field(default=None, description="Language of the code")
    code_explanation: str | None = Field(
        default=None, description="What the generated code does"
    )
    terminal_command: str | None = Field(
        default=None, description="Shell command to run"
    )
    command_reasoning: str | None = Field(
        default=None, description="Why this command was chosen"
    )
    requires_approval: bool | None = Field(
        default=None, description="True for destructive actions"
    )
    continue_: bool = Field(
        alias="continue", description="True to trigger another step"
    )
    missing_context: list[str] = Field(
        description="Information needed before the request can be handled"
    )
    questions_for_user: bool = Field(description="Whether questions follow")
    questions: list[str] | None = Field(default=None)


# scaffold agent


class ConfigFile(WireModel):
    filename: str
    content: str


class ScaffoldFile(WireModel):
    path: str
    content: str


class ProjectScaffoldOutput(WireModel):
    """Project scaffold descriptor."""

    project_name: str
    template: str
    dependencies: list[str]
    config_files: list[ConfigFile]
    directories: list[str]
    files: list[ScaffoldFile]
    setup_commands: list[str]


# fileOp agent


class SafetyChecks(WireModel):
    check_existence: bool
    check_permissions: bool


class FileOperationOutput(WireModel):
    """File CRUD descriptor with safety and rollback flags."""

    operation: Literal["create", "read", "update", "delete"]
    file_path: str
    data: str
    safety_checks: SafetyChecks
    rollback: bool


# analyze agent


class CodeQuality(WireModel):
    score: float = Field(description="Overall quality, 0-100")
    issues_found: list[str]


class CodeAnalysisOutput(WireModel):
    """Code quality report."""

    agent_name: str
    version: str
    code_quality: CodeQuality
    improvements: list[str]
    potential_bugs: list[str]
    refactoring_recommendations: list[str]


# test agent


class TestData(WireModel):
    __test__ = False

    input: str
    expected: str


class GeneratedTest(WireModel):
    __test__ = False

    test_name: str
    description: str
    code: str
    expected_behavior: str
    test_data: TestData


class Coverage(WireModel):
    target_percentage: float
    areas: list[str]


class MockDefinition(WireModel):
    target: str
    mock_implementation: str
    reason: str


class TestSuiteOutput(WireModel):
    """Test-suite descriptor."""

    __test__ = False

    test_type: Literal["unit", "integration", "e2e", "performance", "security"]
    target_entity: str
    framework: Literal["jest", "mocha", "jasmine", "vitest", "ava", "tape"]
    tests: list[GeneratedTest]
    coverage: Coverage
    mocks: list[MockDefinition]
    setup: str
    teardown: str


# docs agent


class DocParameter(WireModel):
    name: str
    type: str
    description: str
    required: bool
    default_value: str


class DocReturnValue(WireModel):
    type: str
    description: str


class DocExample(WireModel):
    title: str
    code: str
    description: str


class DocThrows(WireModel):
    type: str
    description: str


class DocumentationOutput(WireModel):
    """Documentation descriptor."""

    entity_name: str
    entity_type: Literal["function", "class", "method", "module", "interface"]
    summary: str
    description: str
    parameters: list[DocParameter]
    return_value: DocReturnValue
    examples: list[DocExample]
    throws: list[DocThrows]
    see_also: list[str]


# router / memory internals


class IntentClassificationOutput(WireModel):
    """Router classification result."""

    recommended_agent: AgentType = Field(
        description="The specialized agent best suited for this task"
    )
    reasoning: str = Field(description="Why this agent was selected")
    confidence: Literal["high", "medium", "low"]


class SummarizeOutput(WireModel):
    """Memory compaction result."""

    summary: str
    reasoning: str


# War Room roles


class IssueOutput(WireModel):
    description: str
    severity: Literal["critical", "high", "medium", "low"]


class WarRoomAnalysisOutput(WireModel):
    """Analysis role output. A missing score is treated as 50."""

    quality_score: float | None = Field(default=None, ge=0, le=100)
    issues: list[IssueOutput] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class PlannedTestOutput(WireModel):
    test_name: str
    test_description: str
    test_type: str


class WarRoomTestPlanOutput(WireModel):
    """Testing role output. A missing coverage target is treated as 80."""

    tests: list[PlannedTestOutput] = Field(default_factory=list)
    coverage_target: float | None = None


AGENT_SCHEMAS: dict[AgentType, type[WireModel]] = {
    AgentType.SCAFFOLD: ProjectScaffoldOutput,
    AgentType.FILE_OP: FileOperationOutput,
    AgentType.ANALYZE: CodeAnalysisOutput,
    AgentType.TEST: TestSuiteOutput,
    AgentType.DOCS: DocumentationOutput,
    AgentType.DEFAULT: BaseAgentOutput,
}
