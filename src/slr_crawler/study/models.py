"""Data models for study definitions and crawl results."""

import re
from typing import Dict, List

from pydantic import BaseModel, Field, field_validator

from ..core.constants import RESULT_FILE_SUFFIX, SEARCH_BRANCH_PREFIX


def slugify(name: str) -> str:
    """Lowercase ``name`` and collapse everything but letters and digits to dashes."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "database"


class StudyDatabase(BaseModel):
    """A literature database searched by the study."""
    name: str
    enabled: bool = True
    
    @property
    def slug(self) -> str:
        return slugify(self.name)
    
    @property
    def branch_name(self) -> str:
        """Search branch holding this database's results."""
        return f"{SEARCH_BRANCH_PREFIX}{self.slug}"
    
    @property
    def result_file(self) -> str:
        return f"{self.slug}{RESULT_FILE_SUFFIX}"


class Study(BaseModel):
    """Definition of a systematic literature review."""
    title: str
    authors: List[str] = Field(default_factory=list)
    research_questions: List[str] = Field(default_factory=list)
    queries: List[str] = Field(default_factory=list)
    databases: List[StudyDatabase] = Field(default_factory=list)
    
    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError("Study title must not be empty")
        return v
    
    def enabled_databases(self) -> List[StudyDatabase]:
        return [database for database in self.databases if database.enabled]


class LiteratureEntry(BaseModel):
    """A bibliographic record returned by a search."""
    citation_key: str
    entry_type: str = "article"
    fields: Dict[str, str] = Field(default_factory=dict)
    
    def to_bibtex(self) -> str:
        """Render as a BibTeX entry with fields in name order."""
        lines = [f"@{self.entry_type.lower()}{{{self.citation_key},"]
        for name in sorted(self.fields, key=str.lower):
            lines.append(f"  {name.lower()} = {{{self.fields[name]}}},")
        lines.append("}")
        return "\n".join(lines) + "\n"


class CrawlResult(BaseModel):
    """Outcome of one crawl run."""
    integrated: List[str] = Field(default_factory=list)
    unchanged: List[str] = Field(default_factory=list)
    pulled: bool = False
    pushed: bool = False
