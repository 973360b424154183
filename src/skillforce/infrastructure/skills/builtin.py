"""
Built-in Skill Handlers

Small deterministic handlers referenced by the default catalog
(``configs/skills.yaml``). Each takes the step context and returns a dict,
which the orchestrator merges into the session context for later steps.
"""

from typing import Any

_CONTEXT_NOISE = {"user_id", "required_capabilities"}


def echo(context: dict[str, Any]) -> dict[str, Any]:
    """Return the message found in the context unchanged."""
    return {"echo": context.get("message") or context.get("goal") or ""}


def find_leads(context: dict[str, Any]) -> dict[str, Any]:
    """Produce placeholder lead records for the requested target audience."""
    count = int(context.get("count") or 5)
    target = context.get("target") or "prospects"
    industry = context.get("industry")
    label = f"{industry} {target}" if industry else str(target)
    leads = [
        {"name": f"Lead {index}", "segment": label} for index in range(1, count + 1)
    ]
    return {"leads": leads, "lead_count": len(leads)}


def draft_outreach(context: dict[str, Any]) -> dict[str, Any]:
    """Draft an outreach email for the target audience."""
    target = context.get("target") or "there"
    tone = context.get("brand_tone") or "friendly"
    lead_count = context.get("lead_count")
    subject = f"Quick idea for {target}"
    body = (
        f"Hi {target},\n\n"
        "I wanted to share how teams like yours save hours every week.\n"
        "Would you be open to a short call?\n"
    )
    draft = {"subject": subject, "body": body, "tone": tone}
    if lead_count:
        draft["recipients"] = lead_count
    return {"email_draft": draft}


def summarize_context(context: dict[str, Any]) -> dict[str, Any]:
    """Summarize the known context keys as one line of text."""
    parts = [
        f"{key}={value}"
        for key, value in sorted(context.items())
        if key not in _CONTEXT_NOISE and isinstance(value, (str, int, float))
    ]
    return {"summary": "; ".join(parts) or "No context available"}
