"""Merging one branch into another."""

from pathlib import Path

from git import GitCommandError, Repo

from ..core.constants import MERGE_MESSAGE_TEMPLATE
from ..exceptions import GitOperationError, MergeConflictError
from ..logging import get_logger
from .branches import BranchManager
from .repository import StudyRepository


logger = get_logger(__name__)


class MergeCoordinator:
    """Merges a source branch into a target branch.
    
    Whatever branch was checked out before the merge is checked out again
    afterwards, whether the merge succeeded or not.
    """
    
    def __init__(self, repository: StudyRepository, branches: BranchManager):
        self.repository = repository
        self.branches = branches
    
    def merge(self, target: str, source: str) -> bool:
        """Merge ``source`` into ``target``.
        
        Returns False without touching the repository if ``source`` does not
        exist, True once the merge is done.
        
        Raises:
            MergeConflictError: If git cannot merge automatically. The merge
                is aborted before the original branch is restored.
            GitOperationError: If git refuses to start the merge.
        """
        original = self.branches.current_branch()
        if self.branches.resolve_branch(source) is None:
            logger.info("Source branch does not exist, nothing to merge", source=source, target=target)
            return False
        
        try:
            self.branches.checkout(target)
            self._merge_into_current(target, source)
        finally:
            self.branches.checkout(original)
        
        logger.info("Merged branch", source=source, target=target)
        return True
    
    def _merge_into_current(self, target: str, source: str) -> None:
        message = MERGE_MESSAGE_TEMPLATE.format(source=source, target=target)
        with self.repository.handle() as repo:
            try:
                repo.git.merge("--no-edit", "--no-verify", "-m", message, source)
            except GitCommandError as e:
                logger.warning("Merge failed", source=source, target=target, error=str(e))
                if not self._in_progress(repo):
                    # Refused before starting, e.g. unrelated histories
                    raise GitOperationError.from_git(f"Cannot merge {source} into {target}", e)
                self._abort(repo)
                raise MergeConflictError.from_git(f"Failed to merge {source} into {target}", e)
    
    @staticmethod
    def _in_progress(repo: Repo) -> bool:
        return (Path(repo.git_dir) / "MERGE_HEAD").exists()
    
    def _abort(self, repo: Repo) -> None:
        """Abort an unfinished merge so the branch can be switched."""
        try:
            repo.git.merge("--abort")
        except GitCommandError as e:
            raise GitOperationError.from_git("Failed to abort merge", e)
