"""Branch lookup and checkout."""

from typing import List, Optional

from git import GitCommandError

from ..exceptions import GitOperationError
from ..logging import get_logger
from .models import BranchRef
from .repository import StudyRepository


logger = get_logger(__name__)


class BranchManager:
    """Resolves, creates and switches local branches."""
    
    def __init__(self, repository: StudyRepository):
        self.repository = repository
    
    def resolve_branch(self, name: str) -> Optional[BranchRef]:
        """Look up a local branch without side effects.
        
        Returns None if the branch does not exist.
        """
        with self.repository.handle() as repo:
            for head in repo.heads:
                if head.name == name:
                    return BranchRef(name=head.name, commit_sha=head.commit.hexsha)
        return None
    
    def list_branches(self) -> List[str]:
        """Get sorted list of local branch names."""
        with self.repository.handle() as repo:
            return sorted(head.name for head in repo.heads)
    
    def current_branch(self) -> str:
        """Name of the checked out branch."""
        with self.repository.handle() as repo:
            try:
                return repo.active_branch.name
            except TypeError as e:
                raise GitOperationError.from_exception(
                    f"HEAD is detached in {self.repository.root}", e
                )
    
    def checkout(self, name: str) -> None:
        """Check out ``name``, creating it from the current HEAD if it does not exist."""
        create = self.resolve_branch(name) is None
        with self.repository.handle() as repo:
            try:
                repo.git.check_ref_format("--branch", name)
            except GitCommandError as e:
                raise GitOperationError.from_git(f"Invalid branch name: {name!r}", e)
            try:
                if create:
                    repo.git.switch("-c", name)
                else:
                    repo.git.switch(name)
            except GitCommandError as e:
                raise GitOperationError.from_git(f"Failed to checkout {name}", e)
        logger.debug("Checked out branch", branch=name, created=create)
