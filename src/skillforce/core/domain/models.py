"""
Core Domain Models

This module defines the data model shared by the orchestrator and its
collaborators: configuration, phase/step enums, skills, plans, messages,
reports and the mutable agent state.

Message payloads form a tagged union (one dataclass per message type) so that
rendering and consumption sites can dispatch with ``match`` instead of probing
optional attributes.
"""

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any

from skillforce.core.domain.errors import ConfigurationError


def utcnow() -> datetime:
    """Timezone-aware current time used for all timestamps."""
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Generate a prefixed identifier such as ``plan-3f2a9c1e0b7d``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def to_jsonable(value: Any) -> Any:
    """
    Convert domain objects into JSON-ready structures.

    Dataclasses become dicts, enums their values, datetimes ISO strings and
    mappings/sequences are converted recursively. Anything else is returned
    unchanged.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


class AgentPhase(str, Enum):
    """Phases of the orchestrator state machine."""

    IDLE = "idle"
    UNDERSTAND = "understand"
    PLAN = "plan"
    EXECUTE = "execute"
    REPORT = "report"


class StepStatus(str, Enum):
    """Lifecycle of a planned step: pending -> running -> completed|failed."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class MessageType(str, Enum):
    """Kinds of conversation messages."""

    INFO = "info"
    QUESTION = "question"
    PLAN = "plan"
    PROGRESS = "progress"
    REPORT = "report"


@dataclass(frozen=True)
class AgentConfig:
    """
    Immutable orchestrator configuration.

    Defaults are applied here, once, at construction time. ``initial_context``
    is copied into a read-only mapping so later mutation of the caller's dict
    cannot leak into the agent.

    Attributes:
        organization_id: Organization whose skill catalog is used
        user_id: Acting user (seeded into the context as ``user_id``)
        max_questions: Question budget handed to the Understanding Engine
        confidence_threshold: Confidence needed to consider a goal understood
        auto_execute: Run the plan right after planning
        show_progress: Append a progress message for every started step
        initial_context: Extra context seeded into every session
    """

    organization_id: str
    user_id: str
    max_questions: int = 5
    confidence_threshold: float = 0.8
    auto_execute: bool = True
    show_progress: bool = True
    initial_context: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 0 < self.confidence_threshold <= 1:
            raise ConfigurationError(
                f"confidence_threshold must be in (0, 1], got {self.confidence_threshold}"
            )
        if self.max_questions < 0:
            raise ConfigurationError(f"max_questions must be >= 0, got {self.max_questions}")
        object.__setattr__(
            self, "initial_context", MappingProxyType(dict(self.initial_context or {}))
        )


@dataclass
class Skill:
    """Catalog entry for a callable skill."""

    skill_key: str
    category: str = "general"
    frontmatter: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    version: int = 1
    organization_id: str | None = None
    handler: str | None = None

    @property
    def display_name(self) -> str:
        return self.frontmatter.get("name") or self.skill_key

    @property
    def description(self) -> str:
        return self.frontmatter.get("description") or ""

    @property
    def requires_context(self) -> list[str]:
        return list(self.frontmatter.get("requires_context") or [])

    @property
    def keywords(self) -> list[str]:
        return list(self.frontmatter.get("keywords") or [])


@dataclass(frozen=True)
class SkillSummary:
    """Summarized catalog view handed to the Understanding Engine."""

    key: str
    name: str
    description: str
    category: str

    @classmethod
    def from_skill(cls, skill: Skill) -> "SkillSummary":
        return cls(
            key=skill.skill_key,
            name=skill.display_name,
            description=skill.description,
            category=skill.category,
        )


@dataclass
class SkillResult:
    """Outcome of a single skill execution."""

    success: bool
    skill_key: str
    output: Any = None
    error: str | None = None
    execution_id: str = field(default_factory=lambda: new_id("skill"))
    started_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None
    duration_ms: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SkillGap:
    """A capability the plan needs but the catalog cannot satisfy."""

    capability: str
    suggestion: str | None = None


@dataclass
class PlannedStep:
    """
    One step of an execution plan.

    ``order`` must equal the step's index in ``ExecutionPlan.steps``. Steps are
    mutated in place while executing (status, result, error) but never
    reordered.
    """

    skill_key: str
    skill: Skill
    purpose: str
    order: int
    input_context: dict[str, Any] = field(default_factory=dict)
    status: StepStatus = StepStatus.PENDING
    result: SkillResult | None = None
    error: str | None = None

    @property
    def display_name(self) -> str:
        return self.skill.display_name


@dataclass
class ExecutionPlan:
    """Ordered steps plus the gaps the catalog could not cover."""

    steps: list[PlannedStep] = field(default_factory=list)
    gaps: list[SkillGap] = field(default_factory=list)
    can_accomplish: str = ""

    def is_ordered(self) -> bool:
        return all(step.order == index for index, step in enumerate(self.steps))


@dataclass(frozen=True)
class PlanValidation:
    valid: bool
    issues: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AgentGoal:
    """Goal statement plus the context snapshot used to produce it."""

    goal_statement: str
    context: Mapping[str, Any] = field(default_factory=dict)
    success_criteria: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClarifyingQuestion:
    text: str
    slot: str
    options: tuple[str, ...] = ()


@dataclass
class Assessment:
    """
    Understanding Engine verdict for one message.

    Attributes:
        understood: Whether the goal is clear enough to plan
        confidence: Engine confidence in [0, 1]
        extracted_context: Structured context pulled from the message
        missing: Names of context slots still unknown
        question: Clarifying question to ask when not understood
    """

    understood: bool
    confidence: float = 0.0
    extracted_context: dict[str, Any] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)
    question: ClarifyingQuestion | None = None


@dataclass
class ExecutionReport:
    accomplished: list[str]
    outputs: dict[str, Any]
    gaps: list[SkillGap]
    next_steps: list[str]
    success: bool
    summary: str


@dataclass(frozen=True)
class QuestionPayload:
    question_field: str
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class PlanPayload:
    plan: ExecutionPlan
    gaps: tuple[SkillGap, ...] = ()


@dataclass(frozen=True)
class ProgressPayload:
    skill_key: str
    skill_name: str
    status: StepStatus
    step_index: int
    total_steps: int


@dataclass(frozen=True)
class ReportPayload:
    report: ExecutionReport
    gaps: tuple[SkillGap, ...] = ()


MessagePayload = QuestionPayload | PlanPayload | ProgressPayload | ReportPayload | None


@dataclass(frozen=True)
class AgentMessage:
    """
    A conversation message.

    User messages are recorded as ``info`` messages with a ``user-`` id
    prefix. Messages are never mutated once appended to history.
    """

    id: str
    type: MessageType
    content: str
    timestamp: datetime = field(default_factory=utcnow)
    payload: MessagePayload = None

    @property
    def is_user(self) -> bool:
        return self.id.startswith("user-")


@dataclass
class AgentState:
    """
    Mutable state owned by exactly one agent.

    ``phase`` decides what the agent may do next. ``context`` only grows
    (keys may be overwritten) until ``reset()``.
    """

    phase: AgentPhase = AgentPhase.IDLE
    goal: AgentGoal | None = None
    context: dict[str, Any] = field(default_factory=dict)
    plan: ExecutionPlan | None = None
    executed_steps: list[PlannedStep] = field(default_factory=list)
    gaps: list[SkillGap] = field(default_factory=list)
    conversation_history: list[AgentMessage] = field(default_factory=list)
    session_id: str = field(default_factory=lambda: new_id("agent"))
    started_at: datetime = field(default_factory=utcnow)
    error: str | None = None
