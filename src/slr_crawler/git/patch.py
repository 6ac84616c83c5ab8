"""Application of patches onto the current branch."""

import tempfile
from pathlib import Path

from git import GitCommandError

from ..exceptions import GitOperationError, PatchApplyError
from ..logging import get_logger
from .models import Patch
from .repository import StudyRepository


logger = get_logger(__name__)


class PatchApplier:
    """Applies a patch to the checked out branch and commits it."""
    
    def __init__(self, repository: StudyRepository):
        self.repository = repository
    
    def apply(self, patch: Patch, message: str) -> bool:
        """Apply ``patch`` to the working tree and index, then commit.
        
        Either every file of the patch applies or none does; on failure no
        commit is created and the working tree is left untouched.
        
        Returns False if the patch is empty and nothing was done.
        
        Raises:
            PatchApplyError: If the patch does not apply.
            GitOperationError: If the commit fails (the patch is reverted first).
        """
        if patch.is_empty:
            logger.debug("Empty patch, nothing to apply", branch=patch.branch)
            return False
        
        with self.repository.handle() as repo, tempfile.TemporaryDirectory() as tmp:
            patch_file = Path(tmp) / "changes.patch"
            patch_file.write_bytes(patch.to_bytes())
            
            try:
                repo.git.apply("--index", "--whitespace=nowarn", str(patch_file))
            except GitCommandError as e:
                logger.error("Patch does not apply", branch=patch.branch, files=patch.paths)
                raise PatchApplyError.from_git(
                    f"Failed to apply patch from {patch.branch}", e
                )
            
            try:
                repo.git.commit("--no-verify", "-m", message)
            except GitCommandError as e:
                try:
                    repo.git.apply("-R", "--index", "--whitespace=nowarn", str(patch_file))
                except GitCommandError as revert_error:
                    logger.error(
                        "Could not revert applied patch",
                        branch=patch.branch,
                        error=str(revert_error),
                    )
                raise GitOperationError.from_git(f"Failed to commit patch: {message}", e)
        
        logger.info("Applied patch", source=patch.branch, files=len(patch.files), message=message)
        return True
