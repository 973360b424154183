"""
Heuristic Understanding Engine

Rule-based implementation of ``UnderstandingEngineProtocol``. A request is
understood once the two required slots are known:

- ``action``: what to do (a verb phrase or a skill keyword)
- ``target``: who or what it is for

Confidence is the share of filled slots. The engine owns the question budget:
once ``max_questions`` questions have been asked it reports the goal as
understood with whatever context it has, so the dialogue always converges.
"""

import re
from collections.abc import Sequence
from typing import Any

import structlog

from skillforce.core.domain.messages import create_question_message
from skillforce.core.domain.models import (
    AgentGoal,
    AgentMessage,
    Assessment,
    ClarifyingQuestion,
    QuestionPayload,
    SkillSummary,
)

REQUIRED_SLOTS = ("action", "target")

ACTION_PHRASES = (
    "reach out",
    "follow up",
    "outreach",
    "email",
    "draft",
    "write",
    "find",
    "research",
    "summarize",
    "schedule",
    "prospect",
    "enrich",
    "qualify",
    "book",
    "send",
    "create",
    "update",
    "analyze",
)

INDUSTRIES = (
    "saas",
    "fintech",
    "healthcare",
    "ecommerce",
    "e-commerce",
    "retail",
    "manufacturing",
    "education",
    "logistics",
    "real estate",
)

_TARGET_LEAD = re.compile(r"\b(?:to|for|with|about)\s+", re.IGNORECASE)
_TARGET_BODY = re.compile(
    r"(?:the\s+|my\s+|our\s+)?(?:\d+\s+)?"
    r"(?P<target>[a-z][\w&/-]*(?:\s+[a-z][\w&/-]*){0,4})",
    re.IGNORECASE,
)
_ACTION_HEADS = {phrase.split()[0] for phrase in ACTION_PHRASES}
_TARGET_STOPWORDS = {
    "to", "for", "with", "about", "in", "at", "from", "by",
    "this", "next", "and", "that", "who", "on", "using",
}
_COUNT_PATTERN = re.compile(r"\b(\d{1,5})\b")
_EMAIL_PATTERN = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")
_QUOTED_PATTERN = re.compile(r"[\"“]([^\"”]{2,80})[\"”]")


class HeuristicUnderstandingEngine:
    """Keyword and regex based goal understanding with a question budget."""

    def __init__(self, max_questions: int = 5, confidence_threshold: float = 0.8):
        self.max_questions = max_questions
        self.confidence_threshold = confidence_threshold
        self.questions_asked = 0
        self.logger = structlog.get_logger().bind(component="heuristic_understanding")

    async def assess(
        self,
        *,
        message: str,
        context: dict[str, Any],
        history: Sequence[AgentMessage],
        available_skills: Sequence[SkillSummary],
    ) -> Assessment:
        extracted = self.extract(message, available_skills)
        known = {**context, **extracted}

        missing = [slot for slot in REQUIRED_SLOTS if not known.get(slot)]
        confidence = (len(REQUIRED_SLOTS) - len(missing)) / len(REQUIRED_SLOTS)
        budget_spent = self.questions_asked >= self.max_questions
        understood = confidence >= self.confidence_threshold or budget_spent

        self.logger.debug(
            "assessed",
            confidence=confidence,
            missing=missing,
            questions_asked=self.questions_asked,
            history_length=len(history),
        )

        question = None
        if not understood:
            question = self._question_for(missing[0] if missing else "details", available_skills)

        return Assessment(
            understood=understood,
            confidence=confidence,
            extracted_context=extracted,
            missing=missing,
            question=question,
        )

    async def extract_from_response(
        self,
        question_message: AgentMessage,
        answer_text: str,
        context: dict[str, Any],
    ) -> dict[str, Any]:
        """Map the answer onto the asked slot, plus any details it mentions."""
        answer = answer_text.strip()
        extracted = {
            key: value
            for key, value in self.extract(answer).items()
            if key not in REQUIRED_SLOTS
        }
        if isinstance(question_message.payload, QuestionPayload) and answer:
            extracted[question_message.payload.question_field] = answer
        return extracted

    def build_goal(
        self,
        first_message_text: str,
        assessments: Sequence[Assessment],
        context: dict[str, Any],
    ) -> AgentGoal:
        statement = first_message_text.strip().rstrip(".!?") or "Complete the request"
        target = context.get("target")
        if target and str(target).lower() not in statement.lower():
            statement = f"{statement} (for {target})"

        criteria = [f"{slot}: {context[slot]}" for slot in REQUIRED_SLOTS if context.get(slot)]
        return AgentGoal(
            goal_statement=statement,
            context=dict(context),
            success_criteria=tuple(criteria),
        )

    def create_question_message(self, assessment: Assessment) -> AgentMessage:
        self.questions_asked += 1
        question = assessment.question or self._question_for(
            assessment.missing[0] if assessment.missing else "details", ()
        )
        return create_question_message(question.text, question.slot, question.options)

    def reset(self) -> None:
        self.questions_asked = 0

    def extract(
        self, text: str, available_skills: Sequence[SkillSummary] = ()
    ) -> dict[str, Any]:
        """
        Pull structured context out of free text.

        Returns:
            Dict with any of: action, target, count, industry, emails, quoted
        """
        lowered = text.lower()
        extracted: dict[str, Any] = {}

        action = self._find_action(lowered, available_skills)
        if action:
            extracted["action"] = action

        target = self._find_target(text)
        if target:
            extracted["target"] = target

        count = _COUNT_PATTERN.search(text)
        if count:
            extracted["count"] = int(count.group(1))

        for industry in INDUSTRIES:
            if re.search(rf"\b{re.escape(industry)}\b", lowered):
                extracted["industry"] = industry
                break

        emails = _EMAIL_PATTERN.findall(text)
        if emails:
            extracted["emails"] = emails

        quoted = _QUOTED_PATTERN.findall(text)
        if quoted:
            extracted["quoted"] = quoted

        return extracted

    def _find_action(self, lowered: str, available_skills: Sequence[SkillSummary]) -> str | None:
        positions = []
        for phrase in ACTION_PHRASES:
            match = re.search(rf"\b{re.escape(phrase)}\b", lowered)
            if match:
                positions.append((match.start(), phrase))
        if positions:
            return min(positions)[1]

        for skill in available_skills:
            if skill.name and skill.name.lower() in lowered:
                return skill.key
        return None

    def _find_target(self, text: str) -> str | None:
        for lead in _TARGET_LEAD.finditer(text):
            match = _TARGET_BODY.match(text, lead.end())
            if match is None:
                continue
            words = match.group("target").split()
            if words[0].lower() in _ACTION_HEADS:
                continue
            kept: list[str] = []
            for word in words:
                if word.lower() in _TARGET_STOPWORDS:
                    break
                kept.append(word)
            if kept:
                return " ".join(kept)
        return None

    def _question_for(
        self, slot: str, available_skills: Sequence[SkillSummary]
    ) -> ClarifyingQuestion:
        if slot == "action":
            options = tuple(skill.name for skill in available_skills[:5])
            return ClarifyingQuestion(
                text="What would you like me to do? For example: find leads, "
                "draft outreach emails, or summarize an account.",
                slot="action",
                options=options,
            )
        if slot == "target":
            return ClarifyingQuestion(
                text="Who is this for? (e.g. 'VP of Sales at SaaS companies')",
                slot="target",
            )
        return ClarifyingQuestion(text=f"Could you tell me more about the {slot}?", slot=slot)
