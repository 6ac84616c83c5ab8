"""Data models for the git orchestration layer."""

from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, Field, SecretStr

from ..core.constants import PATCH_ENCODING, PATCH_ENCODING_ERRORS


class ChangeType(str, Enum):
    """Types of file changes carried by a patch."""
    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"


class FileChange(BaseModel):
    """A single file touched by a patch."""
    path: str
    change_type: ChangeType


class Patch(BaseModel):
    """Unified diff between a branch head and its parent.
    
    Sections are ordered by path so that computing the patch twice over the
    same commits yields identical text.
    """
    branch: str
    text: str = ""
    files: List[FileChange] = Field(default_factory=list)
    
    @property
    def is_empty(self) -> bool:
        """True when the patch carries no changes."""
        return not self.text.strip()
    
    @property
    def paths(self) -> List[str]:
        """Paths touched by the patch."""
        return [change.path for change in self.files]
    
    def to_bytes(self) -> bytes:
        """Patch text as git reads it, including file content that is not UTF-8."""
        return self.text.encode(PATCH_ENCODING, PATCH_ENCODING_ERRORS)
    
    @staticmethod
    def decode(data: bytes) -> str:
        """Decode raw diff output without losing bytes that are not UTF-8."""
        return data.decode(PATCH_ENCODING, PATCH_ENCODING_ERRORS)


class BranchRef(BaseModel):
    """A local branch and the commit it points to."""
    name: str
    commit_sha: str


class CommitInfo(BaseModel):
    """Represents git commit information."""
    sha: str
    message: str
    author_name: str
    committed_date: datetime
    parents: List[str] = Field(default_factory=list)


class WorkingTreeStatus(BaseModel):
    """Snapshot of the working tree taken before committing."""
    modified: List[str] = Field(default_factory=list)
    untracked: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)  # deleted on disk, still tracked
    staged: List[str] = Field(default_factory=list)
    
    @property
    def is_clean(self) -> bool:
        return not (self.modified or self.untracked or self.missing or self.staged)


class Credentials(BaseModel):
    """Username/password (or token) pair for remote operations."""
    username: str
    password: SecretStr
