"""
Skill Executors

Adapters implementing ``SkillExecutorProtocol``.

``LocalSkillExecutor`` runs Python callables registered per skill key (or
resolved from the catalog's ``handler`` dotted path). Failures are returned as
``SkillResult(success=False)`` rather than raised.

``TimeoutSkillExecutor`` wraps any executor with a per-call time limit. The
orchestrator itself never times out a step; wrap the gateway instead.
"""

import asyncio
import importlib
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from skillforce.core.domain.errors import ConfigurationError, MissingContextError, SkillNotFoundError
from skillforce.core.domain.models import SkillResult, new_id, utcnow
from skillforce.core.interfaces.skills import SkillCatalogProtocol, SkillExecutorProtocol

SkillHandler = Callable[[dict[str, Any]], Any | Awaitable[Any]]


def resolve_handler(path: str) -> SkillHandler:
    """
    Import a handler from a ``module:function`` (or ``module.function``) path.

    Raises:
        ConfigurationError: If the module or attribute cannot be loaded
    """
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ConfigurationError(f"Invalid handler path: {path}")

    try:
        module = importlib.import_module(module_name)
        handler = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot load handler {path}: {e}") from e

    if not callable(handler):
        raise ConfigurationError(f"Handler is not callable: {path}")
    return handler


class LocalSkillExecutor:
    """
    Execute skills in-process.

    Each execution gets an id, timestamps and duration. Required context
    (``frontmatter.requires_context``) is checked before the handler runs.
    """

    def __init__(
        self,
        catalog: SkillCatalogProtocol,
        handlers: dict[str, SkillHandler] | None = None,
    ):
        self.catalog = catalog
        self._handlers: dict[str, SkillHandler] = dict(handlers or {})
        self.logger = structlog.get_logger().bind(component="local_skill_executor")

    def register(self, skill_key: str, handler: SkillHandler) -> None:
        self._handlers[skill_key] = handler

    async def execute_skill(self, skill_key: str, context: dict[str, Any]) -> SkillResult:
        execution_id = new_id("skill")
        started_at = utcnow()
        self.logger.info("skill_execute", skill_key=skill_key, execution_id=execution_id)

        try:
            skill = await self.catalog.get_skill(skill_key)
            if skill is None:
                raise SkillNotFoundError(skill_key)

            missing = [key for key in skill.requires_context if context.get(key) in (None, "")]
            if missing:
                raise MissingContextError(skill_key, missing)

            handler = self._get_handler(skill_key, skill.handler)
            output = handler(dict(context))
            if inspect.isawaitable(output):
                output = await output
        except Exception as e:
            completed_at = utcnow()
            self.logger.warning("skill_failed", skill_key=skill_key, error=str(e))
            return SkillResult(
                success=False,
                skill_key=skill_key,
                error=str(e),
                execution_id=execution_id,
                started_at=started_at,
                completed_at=completed_at,
                duration_ms=_elapsed_ms(started_at, completed_at),
            )

        completed_at = utcnow()
        self.logger.info("skill_complete", skill_key=skill_key, execution_id=execution_id)
        return SkillResult(
            success=True,
            skill_key=skill_key,
            output=output,
            execution_id=execution_id,
            started_at=started_at,
            completed_at=completed_at,
            duration_ms=_elapsed_ms(started_at, completed_at),
            metadata={"skill_version": skill.version, "category": skill.category},
        )

    def _get_handler(self, skill_key: str, handler_path: str | None) -> SkillHandler:
        handler = self._handlers.get(skill_key)
        if handler is None:
            if not handler_path:
                raise ConfigurationError(f"No handler registered for skill: {skill_key}")
            handler = resolve_handler(handler_path)
            self._handlers[skill_key] = handler
        return handler


class TimeoutSkillExecutor:
    """Gateway wrapper turning slow executions into failed results."""

    def __init__(self, inner: SkillExecutorProtocol, timeout_seconds: float):
        if timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be positive")
        self.inner = inner
        self.timeout_seconds = timeout_seconds
        self.logger = structlog.get_logger().bind(component="timeout_skill_executor")

    async def execute_skill(self, skill_key: str, context: dict[str, Any]) -> SkillResult:
        try:
            return await asyncio.wait_for(
                self.inner.execute_skill(skill_key, context), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            self.logger.warning("skill_timeout", skill_key=skill_key, timeout=self.timeout_seconds)
            return SkillResult(
                success=False,
                skill_key=skill_key,
                error=f"Skill timed out after {self.timeout_seconds:g}s",
                completed_at=utcnow(),
            )


def _elapsed_ms(started_at, completed_at) -> int:
    return int((completed_at - started_at).total_seconds() * 1000)
