"""Single entry point to the git orchestration layer of a study repository."""

from pathlib import Path
from typing import List, Optional, Union

from ..config import GitSettings
from .branches import BranchManager
from .commits import CommitManager
from .diff import DiffEngine
from .merge import MergeCoordinator
from .models import BranchRef, CommitInfo, Credentials, Patch, WorkingTreeStatus
from .patch import PatchApplier
from .remote import RemoteSync
from .repository import StudyRepository


class GitHandler:
    """Manages the local and remote git repository of a study.
    
    Composes the branch, commit, diff, patch, merge and remote components
    over one :class:`StudyRepository`. Credentials come from the settings
    passed in; nothing is read from the environment here.
    """
    
    def __init__(self, repository: StudyRepository, credentials: Optional[Credentials] = None):
        """Initialize with an opened repository and optional remote credentials."""
        self.repository = repository
        self.branches = BranchManager(repository)
        self.commits = CommitManager(repository)
        self.diffs = DiffEngine(repository)
        self.patches = PatchApplier(repository)
        self.merges = MergeCoordinator(repository, self.branches)
        self.remote = RemoteSync(
            repository,
            self.branches,
            credentials=credentials,
            remote_name=repository.settings.remote_name,
        )
    
    @classmethod
    def open(cls, root: Union[str, Path], settings: GitSettings) -> "GitHandler":
        """Open (bootstrapping if needed) the repository at ``root``."""
        return cls(StudyRepository.open(root, settings), credentials=settings.credentials())
    
    @property
    def root(self) -> Path:
        return self.repository.root
    
    # Branches
    
    def checkout_branch(self, name: str) -> None:
        """Checkout the branch ``name``, creating it if it does not exist."""
        self.branches.checkout(name)
    
    def current_branch(self) -> str:
        return self.branches.current_branch()
    
    def resolve_branch(self, name: str) -> Optional[BranchRef]:
        return self.branches.resolve_branch(name)
    
    def list_branches(self) -> List[str]:
        return self.branches.list_branches()
    
    # Commits
    
    def status(self) -> WorkingTreeStatus:
        return self.commits.status()
    
    def commit_all(self, message: str) -> bool:
        """Commit all changes on the current branch; False if there were none."""
        return self.commits.commit_all(message)
    
    def log(self, max_count: Optional[int] = None, rev: str = "HEAD") -> List[CommitInfo]:
        return self.commits.log(max_count=max_count, rev=rev)
    
    # Diff and patch
    
    def diff_head_against_parent(self, branch: str) -> Patch:
        """Patch introduced by the latest commit of ``branch``."""
        return self.diffs.diff_head_against_parent(branch)
    
    def apply_patch(self, patch: Patch, message: str) -> bool:
        """Apply ``patch`` on the current branch and commit it with ``message``."""
        return self.patches.apply(patch, message)
    
    # Merge
    
    def merge(self, target: str, source: str) -> bool:
        """Merge ``source`` into ``target`` and restore the current branch."""
        return self.merges.merge(target, source)
    
    # Remote
    
    def fetch(self, remote_name: Optional[str] = None) -> bool:
        return self.remote.fetch(remote_name)
    
    def pull(self) -> bool:
        return self.remote.pull()
    
    def push(self) -> bool:
        return self.remote.push()
