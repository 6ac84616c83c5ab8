"""Working tree inspection and commits."""

from datetime import datetime
from typing import List, Optional

from git import GitCommandError

from ..exceptions import GitOperationError
from ..logging import get_logger
from .models import CommitInfo, WorkingTreeStatus
from .repository import StudyRepository


logger = get_logger(__name__)


def parse_porcelain_status(output: str) -> WorkingTreeStatus:
    """Parse ``git status --porcelain -z`` output."""
    status = WorkingTreeStatus()
    tokens = iter(token for token in output.split("\0") if token)
    for token in tokens:
        index_state, tree_state, path = token[0], token[1], token[3:]
        if index_state == "?" and tree_state == "?":
            status.untracked.append(path)
            continue
        if index_state == "!":
            continue
        if index_state in "RC":
            # Renames and copies are followed by the source path
            next(tokens, None)
        if index_state not in " ?":
            status.staged.append(path)
        if tree_state == "D":
            status.missing.append(path)
        elif tree_state in "MT":
            status.modified.append(path)
    return status


class CommitManager:
    """Stages and commits working tree changes on the current branch."""
    
    def __init__(self, repository: StudyRepository):
        self.repository = repository
    
    def status(self) -> WorkingTreeStatus:
        """Snapshot of the working tree."""
        with self.repository.handle() as repo:
            try:
                output = repo.git.status("--porcelain", "-z", "--untracked-files=all")
            except GitCommandError as e:
                raise GitOperationError.from_git("Failed to read working tree status", e)
        return parse_porcelain_status(output)
    
    def commit_all(self, message: str) -> bool:
        """Commit every change in the working tree.
        
        Returns False without committing when the tree is clean, True when a
        commit was created.
        """
        status = self.status()
        if status.is_clean:
            logger.debug("Working tree clean, nothing to commit", root=str(self.repository.root))
            return False
        
        with self.repository.handle() as repo:
            try:
                # New and modified files
                repo.git.add(".")
                # Deletions are staged on their own
                if status.missing:
                    repo.git.rm("--cached", "--ignore-unmatch", "--quiet", "--", *status.missing)
                repo.git.commit("--no-verify", "-m", message)
            except GitCommandError as e:
                raise GitOperationError.from_git(f"Failed to commit: {message}", e)
        
        logger.info(
            "Committed working tree",
            message=message,
            modified=len(status.modified),
            untracked=len(status.untracked),
            missing=len(status.missing),
        )
        return True
    
    def log(self, max_count: Optional[int] = None, rev: str = "HEAD") -> List[CommitInfo]:
        """Commits reachable from ``rev``, newest first."""
        kwargs = {}
        if max_count:
            kwargs['max_count'] = max_count
        
        with self.repository.handle() as repo:
            try:
                return [
                    CommitInfo(
                        sha=commit.hexsha,
                        message=commit.message.strip(),
                        author_name=commit.author.name,
                        committed_date=datetime.fromtimestamp(commit.committed_date),
                        parents=[p.hexsha for p in commit.parents],
                    )
                    for commit in repo.iter_commits(rev, **kwargs)
                ]
            except GitCommandError as e:
                raise GitOperationError.from_git(f"Failed to get commit history of {rev}", e)
