"""
Autonomous Agent - Goal-Driven Skill Orchestrator

Implements the UNDERSTAND -> PLAN -> EXECUTE -> REPORT loop over a catalog of
callable skills.

Key features:
- Phase state machine: ``state.phase`` decides what the agent may do next
- Resumable protocol: ``run()`` suspends in ``understand`` when the goal is
  unclear; ``respond()`` is the only way to resume
- Partial-failure isolation: a failing step is recorded and the plan goes on
- Idempotent resume: ``execute()`` only touches steps still pending
- Event streaming: every driver is an async generator of ``AgentEvent`` and
  every event is also dispatched to ``on_event`` subscribers

Example:
    >>> agent = AutonomousAgent(config, catalog, executor, understanding, planning)
    >>> async for event in agent.run("Help me reach out to 50 SaaS leads"):
    ...     if event.type == EventType.MESSAGE and event.message.type == MessageType.QUESTION:
    ...         async for follow_up in agent.respond(event.message.id, "VP Sales"):
    ...             ...
"""

import dataclasses
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from typing import Any

import structlog

from skillforce.core.domain.errors import AgentPhaseError
from skillforce.core.domain.events import AgentEvent, AgentEventHandler, EventType
from skillforce.core.domain.messages import (
    create_message,
    create_plan_message,
    create_progress_message,
    create_report_message,
    create_user_message,
)
from skillforce.core.domain.models import (
    AgentConfig,
    AgentMessage,
    AgentPhase,
    AgentState,
    MessageType,
    PlannedStep,
    Skill,
    SkillSummary,
    StepStatus,
    new_id,
    utcnow,
)
from skillforce.core.domain.report import generate_report
from skillforce.core.interfaces.planning import PlanningEngineProtocol
from skillforce.core.interfaces.skills import SkillCatalogProtocol, SkillExecutorProtocol
from skillforce.core.interfaces.understanding import UnderstandingEngineProtocol


class AutonomousAgent:
    """
    Orchestrator for goal-driven skill execution.

    All collaborators are injected via protocol interfaces. The agent holds
    its state in memory for its own lifetime and shares nothing with other
    instances.
    """

    def __init__(
        self,
        config: AgentConfig,
        skill_catalog: SkillCatalogProtocol,
        skill_executor: SkillExecutorProtocol,
        understanding_engine: UnderstandingEngineProtocol,
        planning_engine: PlanningEngineProtocol,
    ):
        """
        Initialize the agent with injected collaborators.

        Args:
            config: Immutable agent configuration
            skill_catalog: Lists skills for the organization
            skill_executor: Executes one skill against a context
            understanding_engine: Assesses goals and proposes questions
            planning_engine: Creates and validates plans
        """
        self.config = config
        self.skill_catalog = skill_catalog
        self.skill_executor = skill_executor
        self.understanding_engine = understanding_engine
        self.planning_engine = planning_engine
        self.logger = structlog.get_logger().bind(component="autonomous_agent")

        self._event_handlers: list[AgentEventHandler] = []
        self._awaiting_answer = False
        self.state = self._initial_state()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, message: str) -> AsyncIterator[AgentEvent]:
        """
        Run the agent for a new user message.

        Yields events as the agent progresses. When the goal is not yet
        understood the stream ends after a ``question`` message and the phase
        stays ``understand``; answer it with ``respond()``.

        Args:
            message: Free-text user goal
        """
        self.logger.info("run_start", session_id=self.state.session_id, message=message[:100])
        try:
            self._add_user_message(message)
            async with aclosing(self._run_turn(message)) as events:
                async for event in events:
                    yield event
        except Exception as exc:
            yield self._fail(exc)

    async def respond(self, message_id: str, response: str | list[str]) -> AsyncIterator[AgentEvent]:
        """
        Answer a question previously asked by the agent.

        Context is first extracted from the answer relative to the original
        question, then the understand -> plan -> execute -> report cascade is
        repeated. The agent may ask again if the answer is still not enough.

        Args:
            message_id: Id of the ``question`` message being answered
            response: Answer text, or selected options (joined with ", ")
        """
        response_text = ", ".join(response) if isinstance(response, list) else response
        self.logger.info("respond_start", session_id=self.state.session_id, message_id=message_id)
        try:
            self._add_user_message(response_text)

            question = self._find_question(message_id)
            if question is not None:
                extracted = await self.understanding_engine.extract_from_response(
                    question, response_text, self.state.context
                )
                self.state.context.update(extracted or {})
            else:
                self.logger.warning("question_not_found", message_id=message_id)

            async with aclosing(self._run_turn(response_text)) as events:
                async for event in events:
                    yield event
        except Exception as exc:
            yield self._fail(exc)

    async def execute(self) -> AsyncIterator[AgentEvent]:
        """
        Execute the current plan, then report.

        Used when ``auto_execute`` is disabled, or to retry: only steps that
        are still pending are executed.
        """
        if self.state.plan is None:
            self.state.error = "No plan to execute"
            self.logger.error("execute_without_plan", session_id=self.state.session_id)
            yield self._emit(AgentEvent(type=EventType.ERROR, error=self.state.error))
            return

        try:
            async with aclosing(self._run_execute_phase()) as events:
                async for event in events:
                    yield event
            async for event in self._run_report_phase():
                yield event
            yield self._emit(AgentEvent(type=EventType.COMPLETE))
        except Exception as exc:
            yield self._fail(exc)

    def get_state(self) -> AgentState:
        """Return a snapshot of the state; mutating it does not affect the agent."""
        return dataclasses.replace(
            self.state,
            context=dict(self.state.context),
            executed_steps=list(self.state.executed_steps),
            gaps=list(self.state.gaps),
            conversation_history=list(self.state.conversation_history),
        )

    def get_history(self) -> list[AgentMessage]:
        return list(self.state.conversation_history)

    def on_event(self, handler: AgentEventHandler) -> Callable[[], None]:
        """
        Subscribe to agent events.

        Returns:
            Callable that removes the subscription
        """
        self._event_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._event_handlers:
                self._event_handlers.remove(handler)

        return unsubscribe

    def reset(self) -> None:
        """Start a new session: fresh state and session id, same config."""
        previous = self.state.session_id
        self.state = self._initial_state()
        self._awaiting_answer = False
        self.understanding_engine.reset()
        self.logger.info("agent_reset", previous_session_id=previous, session_id=self.state.session_id)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    async def _run_turn(self, message: str) -> AsyncIterator[AgentEvent]:
        async for event in self._run_understand_phase(message):
            yield event

        # Not understood yet: suspend until respond()
        if self._awaiting_answer:
            self.logger.info("turn_suspended", session_id=self.state.session_id)
            return

        async for event in self._run_plan_phase():
            yield event

        if self.config.auto_execute and self.state.plan and self.state.plan.steps:
            async with aclosing(self._run_execute_phase()) as events:
                async for event in events:
                    yield event

        async for event in self._run_report_phase():
            yield event

        yield self._emit(AgentEvent(type=EventType.COMPLETE))

    async def _run_understand_phase(self, message: str) -> AsyncIterator[AgentEvent]:
        yield self._set_phase(AgentPhase.UNDERSTAND)

        available_skills = await self._load_available_skills()
        assessment = await self.understanding_engine.assess(
            message=message,
            context=self.state.context,
            history=self.state.conversation_history,
            available_skills=[SkillSummary.from_skill(skill) for skill in available_skills],
        )
        self.state.context.update(assessment.extracted_context or {})
        self._awaiting_answer = not assessment.understood

        if assessment.understood:
            first_message = next(
                (m.content for m in self.state.conversation_history if m.is_user), message
            )
            self.state.goal = self.understanding_engine.build_goal(
                first_message, [assessment], self.state.context
            )
            self.logger.info(
                "goal_understood",
                session_id=self.state.session_id,
                confidence=assessment.confidence,
            )
            info = create_message(
                MessageType.INFO, f"Got it! I'll help you: {self.state.goal.goal_statement}"
            )
            yield self._push_message(info)
        else:
            question = self.understanding_engine.create_question_message(assessment)
            self.logger.info(
                "clarification_needed",
                session_id=self.state.session_id,
                missing=assessment.missing,
            )
            yield self._push_message(question)

    async def _run_plan_phase(self) -> AsyncIterator[AgentEvent]:
        if self.state.goal is None:
            raise AgentPhaseError("Cannot plan without a goal")

        yield self._set_phase(AgentPhase.PLAN)

        available_skills = await self._load_available_skills()
        plan = await self.planning_engine.create_plan(
            goal=self.state.goal,
            available_skills=available_skills,
            context=self.state.context,
        )

        validation = self.planning_engine.validate_plan(plan)
        if not validation.valid:
            self.logger.warning("plan_validation_issues", issues=validation.issues)

        self.state.plan = plan
        self.state.gaps = list(plan.gaps)
        self.logger.info("plan_created", steps=len(plan.steps), gaps=len(plan.gaps))

        yield self._emit(AgentEvent(type=EventType.PLAN_CREATED, plan=plan))
        yield self._push_message(create_plan_message(plan))

    async def _run_execute_phase(self) -> AsyncIterator[AgentEvent]:
        plan = self.state.plan
        if plan is None:
            raise AgentPhaseError("Cannot execute without a plan")
        if not plan.is_ordered():
            raise AgentPhaseError("Plan steps are out of order")

        yield self._set_phase(AgentPhase.EXECUTE)

        total_steps = len(plan.steps)
        for step in plan.steps:
            # Completed and failed steps are left alone on re-execution
            if step.status != StepStatus.PENDING:
                continue

            step.status = StepStatus.RUNNING
            try:
                yield self._emit(AgentEvent(type=EventType.STEP_START, step=step))

                if self.config.show_progress:
                    yield self._push_message(create_progress_message(step, total_steps))

                async for event in self._execute_step(step):
                    yield event
            finally:
                # Stream closed or cancelled mid-step: leave it for the next execute()
                if step.status == StepStatus.RUNNING:
                    step.status = StepStatus.PENDING
                    self.logger.warning("step_interrupted", skill_key=step.skill_key)

    async def _execute_step(self, step: PlannedStep) -> AsyncIterator[AgentEvent]:
        step_context: dict[str, Any] = {**self.state.context, **step.input_context}
        try:
            self.logger.info("step_execute", skill_key=step.skill_key, order=step.order)
            result = await self.skill_executor.execute_skill(step.skill_key, step_context)
            if not result.success:
                raise RuntimeError(result.error or "Skill execution failed")
        except Exception as exc:
            step.status = StepStatus.FAILED
            step.error = str(exc) or "Skill execution failed"
            self.logger.warning("step_failed", skill_key=step.skill_key, error=step.error)
            yield self._emit(AgentEvent(type=EventType.STEP_FAILED, step=step, error=step.error))
            return

        step.status = StepStatus.COMPLETED
        step.result = result
        if isinstance(result.output, dict):
            self.state.context.update(result.output)
        self.state.executed_steps.append(step)
        self.logger.info("step_complete", skill_key=step.skill_key)
        yield self._emit(AgentEvent(type=EventType.STEP_COMPLETE, step=step, result=result))

    async def _run_report_phase(self) -> AsyncIterator[AgentEvent]:
        yield self._set_phase(AgentPhase.REPORT)

        report = generate_report(self.state.executed_steps, self.state.plan, self.state.gaps)
        self.logger.info("report_generated", success=report.success, summary=report.summary)

        message = create_report_message(report)
        self.state.conversation_history.append(message)
        yield self._emit(AgentEvent(type=EventType.REPORT, report=report))
        yield self._emit(AgentEvent(type=EventType.MESSAGE, message=message))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load_available_skills(self) -> list[Skill]:
        """List the catalog; an unavailable catalog counts as empty."""
        try:
            return await self.skill_catalog.list_skills(self.config.organization_id, True)
        except Exception as exc:
            self.logger.error("skill_catalog_unavailable", error=str(exc))
            return []

    def _initial_state(self) -> AgentState:
        return AgentState(
            context={"user_id": self.config.user_id, **self.config.initial_context},
            session_id=new_id("agent"),
            started_at=utcnow(),
        )

    def _find_question(self, message_id: str) -> AgentMessage | None:
        return next(
            (
                m
                for m in self.state.conversation_history
                if m.id == message_id and m.type == MessageType.QUESTION
            ),
            None,
        )

    def _add_user_message(self, content: str) -> None:
        self.state.conversation_history.append(create_user_message(content))

    def _push_message(self, message: AgentMessage) -> AgentEvent:
        self.state.conversation_history.append(message)
        return self._emit(AgentEvent(type=EventType.MESSAGE, message=message))

    def _set_phase(self, phase: AgentPhase) -> AgentEvent:
        self.state.phase = phase
        return self._emit(AgentEvent(type=EventType.PHASE_CHANGE, phase=phase))

    def _fail(self, exc: Exception) -> AgentEvent:
        self.state.error = str(exc) or exc.__class__.__name__
        self.logger.error(
            "turn_failed",
            session_id=self.state.session_id,
            phase=self.state.phase.value,
            error=self.state.error,
        )
        return self._emit(AgentEvent(type=EventType.ERROR, error=self.state.error))

    def _emit(self, event: AgentEvent) -> AgentEvent:
        """Dispatch to subscribers; a failing handler never stops delivery."""
        for handler in list(self._event_handlers):
            try:
                handler(event)
            except Exception as exc:
                self.logger.error("event_handler_failed", event_type=event.type.value, error=str(exc))
        return event
