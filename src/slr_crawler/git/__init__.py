"""Git orchestration layer for study repositories."""

from .handler import GitHandler
from .models import BranchRef, ChangeType, CommitInfo, Credentials, FileChange, Patch, WorkingTreeStatus
from .repository import StudyRepository, is_git_repository

__all__ = [
    "GitHandler",
    "StudyRepository",
    "is_git_repository",
    "BranchRef",
    "ChangeType",
    "CommitInfo",
    "Credentials",
    "FileChange",
    "Patch",
    "WorkingTreeStatus",
]
