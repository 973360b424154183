"""
Skill Catalogs

Catalog adapters implementing ``SkillCatalogProtocol``:
- ``InMemorySkillCatalog``: skills passed in code (tests, embedding)
- ``YamlSkillCatalog``: skills declared in a YAML file

YAML schema::

    skills:
      - skill_key: outreach.draft_email
        category: outreach
        organization_id: org-123      # optional, omitted = global
        is_active: true               # optional
        version: 2                    # optional
        handler: skillforce.infrastructure.skills.builtin:draft_outreach
        frontmatter:
          name: Draft outreach email
          description: Write a personalised cold email
          keywords: [email, outreach]
          requires_context: [target]
"""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import yaml

from skillforce.core.domain.errors import ConfigurationError
from skillforce.core.domain.models import Skill

logger = structlog.get_logger()


def skill_from_dict(data: dict[str, Any]) -> Skill:
    """Build a Skill from a catalog entry; ``skill_key`` is required."""
    if not isinstance(data, dict) or not data.get("skill_key"):
        raise ConfigurationError(f"Invalid skill entry (missing skill_key): {data!r}")
    return Skill(
        skill_key=str(data["skill_key"]),
        category=str(data.get("category") or "general"),
        frontmatter=dict(data.get("frontmatter") or {}),
        is_active=bool(data.get("is_active", True)),
        version=int(data.get("version", 1)),
        organization_id=data.get("organization_id"),
        handler=data.get("handler"),
    )


class InMemorySkillCatalog:
    """Catalog over a fixed list of skills, kept in declaration order."""

    def __init__(self, skills: Iterable[Skill] = ()):
        self._skills: dict[str, Skill] = {}
        for skill in skills:
            self.add(skill)

    def add(self, skill: Skill) -> None:
        self._skills[skill.skill_key] = skill

    async def list_skills(
        self, organization_id: str, include_inactive: bool = False
    ) -> list[Skill]:
        return [
            skill
            for skill in self._skills.values()
            if skill.organization_id in (None, organization_id)
            and (include_inactive or skill.is_active)
        ]

    async def get_skill(self, skill_key: str) -> Skill | None:
        return self._skills.get(skill_key)


class YamlSkillCatalog(InMemorySkillCatalog):
    """
    Catalog loaded from a YAML file.

    The file is read lazily on first access and cached; call ``reload()`` to
    pick up edits.
    """

    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self._loaded = False

    def reload(self) -> None:
        if not self.path.exists():
            raise FileNotFoundError(f"Skill catalog not found: {self.path}")

        with open(self.path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        entries = data.get("skills", []) if isinstance(data, dict) else []
        self._skills = {}
        for entry in entries:
            self.add(skill_from_dict(entry))
        self._loaded = True
        logger.debug("skill_catalog_loaded", path=str(self.path), count=len(self._skills))

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.reload()

    async def list_skills(
        self, organization_id: str, include_inactive: bool = False
    ) -> list[Skill]:
        self._ensure_loaded()
        return await super().list_skills(organization_id, include_inactive)

    async def get_skill(self, skill_key: str) -> Skill | None:
        self._ensure_loaded()
        return await super().get_skill(skill_key)
