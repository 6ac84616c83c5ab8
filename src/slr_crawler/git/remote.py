"""Best-effort synchronization with a remote.

Transport and authentication failures never leave this module: they are
logged and reported as a False return value so that crawling keeps working
against the local repository when offline.
"""

import os
import stat
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional

from git import GitCommandError, Repo

from ..core.constants import DEFAULT_REMOTE_NAME
from ..exceptions import RemoteSyncError
from ..logging import get_logger
from .branches import BranchManager
from .models import Credentials
from .repository import StudyRepository


logger = get_logger(__name__)

ASKPASS_SCRIPT = """\
#!/bin/sh
case "$1" in
    Username*) printf '%s\\n' "$SLR_GIT_USERNAME" ;;
    *) printf '%s\\n' "$SLR_GIT_PASSWORD" ;;
esac
"""


@contextmanager
def askpass_environment(credentials: Optional[Credentials]) -> Iterator[Dict[str, str]]:
    """Environment handing ``credentials`` to git through GIT_ASKPASS.
    
    The helper script and the credentials only live for the duration of the
    ``with`` block.
    """
    if credentials is None:
        yield {}
        return
    
    with tempfile.TemporaryDirectory(prefix="slr-askpass-") as tmp:
        script = Path(tmp) / "askpass.sh"
        script.write_text(ASKPASS_SCRIPT, encoding="utf-8")
        os.chmod(script, stat.S_IRUSR | stat.S_IWUSR | stat.S_IXUSR)
        yield {
            "GIT_ASKPASS": str(script),
            "SLR_GIT_USERNAME": credentials.username,
            "SLR_GIT_PASSWORD": credentials.password.get_secret_value(),
        }


class RemoteSync:
    """Fetch, pull and push against a configured remote."""
    
    def __init__(
        self,
        repository: StudyRepository,
        branches: BranchManager,
        credentials: Optional[Credentials] = None,
        remote_name: str = DEFAULT_REMOTE_NAME,
    ):
        self.repository = repository
        self.branches = branches
        self.credentials = credentials
        self.remote_name = remote_name
    
    def has_remote(self, name: Optional[str] = None) -> bool:
        """Check whether the remote alias is configured."""
        name = name or self.remote_name
        with self.repository.handle() as repo:
            return any(remote.name == name for remote in repo.remotes)
    
    def fetch(self, remote_name: Optional[str] = None) -> bool:
        """Fetch from ``remote_name`` (default: the configured remote)."""
        name = remote_name or self.remote_name
        return self._sync("fetch", name, lambda repo: repo.git.fetch(name))
    
    def pull(self) -> bool:
        """Pull the current branch from the configured remote."""
        name = self.remote_name
        branch = self.branches.current_branch()
        
        def pull(repo: Repo) -> None:
            try:
                repo.git.pull(name, branch, "--no-rebase", "--no-edit")
            except GitCommandError:
                if (Path(repo.git_dir) / "MERGE_HEAD").exists():
                    repo.git.merge("--abort")
                raise
        
        return self._sync("pull", name, pull, branch=branch)
    
    def push(self) -> bool:
        """Push the current branch to the configured remote and track it."""
        name = self.remote_name
        branch = self.branches.current_branch()
        return self._sync(
            "push", name, lambda repo: repo.git.push("--set-upstream", name, branch), branch=branch
        )
    
    def _sync(self, operation: str, remote: str, command: Callable[[Repo], object], **context) -> bool:
        if not self.has_remote(remote):
            logger.info("Remote not configured, skipping", operation=operation, remote=remote)
            return False
        try:
            self._run(operation, remote, command)
        except RemoteSyncError as e:
            logger.warning(
                "Remote operation failed",
                operation=operation,
                remote=remote,
                error=str(e),
                **context,
            )
            return False
        logger.info("Remote operation completed", operation=operation, remote=remote, **context)
        return True
    
    def _run(self, operation: str, remote: str, command: Callable[[Repo], object]) -> None:
        with self.repository.handle() as repo, askpass_environment(self.credentials) as env:
            with repo.git.custom_environment(**env):
                try:
                    command(repo)
                except GitCommandError as e:
                    raise RemoteSyncError.from_exception(
                        f"git {operation} against {remote} failed", e, {"status": e.status}
                    )
