"""
Agent Events

Events streamed by the orchestrator's ``run``/``respond``/``execute`` drivers
and dispatched to ``on_event`` subscribers. Each event is an immutable fact
about what happened during a turn.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from skillforce.core.domain.models import (
    AgentMessage,
    AgentPhase,
    ExecutionPlan,
    ExecutionReport,
    PlannedStep,
    SkillResult,
    to_jsonable,
)


class EventType(str, Enum):
    """Kinds of events the orchestrator emits."""

    PHASE_CHANGE = "phase_change"
    MESSAGE = "message"
    PLAN_CREATED = "plan_created"
    STEP_START = "step_start"
    STEP_COMPLETE = "step_complete"
    STEP_FAILED = "step_failed"
    REPORT = "report"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class AgentEvent:
    """
    A single orchestrator event.

    The event type determines which fields are set:
    - phase_change: phase
    - message: message
    - plan_created: plan
    - step_start: step
    - step_complete: step, result
    - step_failed: step, error
    - report: report
    - complete: nothing
    - error: error
    """

    type: EventType
    phase: AgentPhase | None = None
    message: AgentMessage | None = None
    plan: ExecutionPlan | None = None
    step: PlannedStep | None = None
    result: SkillResult | None = None
    error: str | None = None
    report: ExecutionReport | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render as a JSON-ready dict, omitting unset fields."""
        data = to_jsonable(self)
        return {key: value for key, value in data.items() if value is not None}


AgentEventHandler = Callable[[AgentEvent], None]
