"""Study repository lifecycle and scoped git handles."""

from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Union

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from ..config import GitSettings
from ..core.constants import (
    DEFAULT_GITIGNORE,
    GIT_DIR_NAME,
    GITIGNORE_NAME,
    INITIAL_COMMIT_MESSAGE,
)
from ..exceptions import GitOperationError, RepositoryUnavailableError
from ..logging import get_logger


logger = get_logger(__name__)


def is_git_repository(root: Union[str, Path]) -> bool:
    """Check whether ``root`` already holds git metadata."""
    return (Path(root) / GIT_DIR_NAME).exists()


class StudyRepository:
    """A study's git repository rooted at a directory.
    
    The object itself holds no open handle; every operation acquires one
    through :meth:`handle` and releases it before returning.
    """
    
    def __init__(self, root: Union[str, Path], settings: GitSettings):
        """Initialize with the repository root and git settings."""
        self.root = Path(root).expanduser().resolve()
        self.settings = settings
    
    @classmethod
    def open(cls, root: Union[str, Path], settings: GitSettings) -> "StudyRepository":
        """Open the repository at ``root``, bootstrapping it on first use."""
        repository = cls(root, settings)
        if not is_git_repository(repository.root):
            repository._init()
        repository._ensure_initial_commit()
        return repository
    
    @contextmanager
    def handle(self) -> Iterator[Repo]:
        """Yield a fresh ``Repo`` for a single operation and close it afterwards."""
        try:
            repo = Repo(self.root)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryUnavailableError.from_exception(
                f"Not a study repository: {self.root}", e
            )
        try:
            with repo.git.custom_environment(**self._git_environment()):
                yield repo
        finally:
            repo.close()
    
    def _git_environment(self) -> Dict[str, str]:
        """Environment applied to every git command run through a handle."""
        return {
            "GIT_AUTHOR_NAME": self.settings.committer_name,
            "GIT_AUTHOR_EMAIL": self.settings.committer_email,
            "GIT_COMMITTER_NAME": self.settings.committer_name,
            "GIT_COMMITTER_EMAIL": self.settings.committer_email,
            # Fail instead of waiting for a password on stdin
            "GIT_TERMINAL_PROMPT": "0",
        }
    
    def _init(self) -> None:
        """Create the directory and an empty repository on the default branch."""
        logger.info("Initializing study repository", root=str(self.root))
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            repo = Repo.init(self.root, initial_branch=self.settings.default_branch)
            repo.close()
        except OSError as e:
            logger.error("Repository initialization failed", root=str(self.root), error=str(e))
            raise RepositoryUnavailableError.from_exception(
                f"Cannot create repository at {self.root}", e
            )
        except GitCommandError as e:
            logger.error("Repository initialization failed", root=str(self.root), error=str(e))
            raise GitOperationError.from_git(f"git init failed for {self.root}", e)
    
    def _ensure_initial_commit(self) -> None:
        """Create the empty bootstrap commit if the repository has no history yet."""
        with self.handle() as repo:
            if repo.head.is_valid():
                return
            try:
                repo.git.commit("--allow-empty", "--no-verify", "-m", INITIAL_COMMIT_MESSAGE)
            except GitCommandError as e:
                logger.error("Initial commit failed", root=str(self.root), error=str(e))
                raise GitOperationError.from_git("Failed to create initial commit", e)
        logger.debug("Created initial commit", root=str(self.root))
        self._install_gitignore()
    
    def _install_gitignore(self) -> None:
        gitignore = self.root / GITIGNORE_NAME
        if gitignore.exists():
            return
        try:
            gitignore.write_text(DEFAULT_GITIGNORE, encoding="utf-8")
        except OSError as e:
            logger.error("Could not install .gitignore", path=str(gitignore), error=str(e))
            raise RepositoryUnavailableError.from_exception(
                f"Cannot write {gitignore}", e
            )
