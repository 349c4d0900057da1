"""
Knowledge Base Seed Loader
==========================

Loads the static knowledge base from a YAML file and seeds it into the
store at startup. Entries already present (same title) are skipped, so
seeding is safe to repeat.

File format:

    entries:
      - title: Refreshing a dashboard
        content: Open the dashboard, then ...
        keywords: dashboard, refresh, report
        category: Reporting
"""

from pathlib import Path
from typing import List, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from core import ConfigurationException
from shared.infrastructure.logging import get_logger
from tickets.application import IKnowledgeBaseRepository
from tickets.domain import KnowledgeBaseEntry

logger = get_logger(__name__)


class KnowledgeBaseSeedEntry(BaseModel):
    """One entry of the seed file."""
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    keywords: Union[str, List[str]] = ""
    category: str = "General"

    @field_validator("keywords")
    @classmethod
    def join_keywords(cls, v: Union[str, List[str]]) -> str:
        """Keywords are stored comma-separated."""
        if isinstance(v, list):
            return ",".join(str(k).strip() for k in v)
        return v

    def to_domain(self) -> KnowledgeBaseEntry:
        return KnowledgeBaseEntry(
            title=self.title,
            content=self.content,
            keywords=self.keywords,
            category=self.category
        )


class KnowledgeBaseSeed(BaseModel):
    entries: List[KnowledgeBaseSeedEntry] = Field(default_factory=list)


def load_knowledge_base(path: Path) -> List[KnowledgeBaseEntry]:
    """
    Parse the seed file.

    A missing file yields an empty knowledge base.

    Raises:
        ConfigurationException: File exists but is not a valid seed
    """
    if not path.exists():
        logger.warning(f"Knowledge base file not found: {path}, starting empty")
        return []

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationException(f"Invalid knowledge base YAML {path}: {e}")

    try:
        seed = KnowledgeBaseSeed(**data)
    except (TypeError, ValidationError) as e:
        raise ConfigurationException(f"Invalid knowledge base file {path}: {e}")

    return [entry.to_domain() for entry in seed.entries]


async def seed_knowledge_base(repository: IKnowledgeBaseRepository, path: Path) -> int:
    """
    Add seed entries missing from the store.

    Returns:
        Number of entries added
    """
    added = 0
    for entry in load_knowledge_base(path):
        if await repository.exists_by_title(entry.title):
            continue
        await repository.add(entry)
        added += 1

    logger.info("Knowledge base seeded", extra={"path": str(path), "added": added})
    return added
