"""System-wide constants and configuration values."""

from typing import Final

# Repository bootstrap
INITIAL_COMMIT_MESSAGE: Final[str] = "Initial commit"
GIT_DIR_NAME: Final[str] = ".git"
GITIGNORE_NAME: Final[str] = ".gitignore"
DEFAULT_GITIGNORE: Final[str] = """\
# Transient crawl artifacts
*.sav
*.bak
*.tmp
*.log
.DS_Store
Thumbs.db
__pycache__/
.env
"""

# Branches and remotes
DEFAULT_BRANCH: Final[str] = "main"
DEFAULT_REMOTE_NAME: Final[str] = "origin"
SEARCH_BRANCH_PREFIX: Final[str] = "search-"

# Commit identity for automated crawl commits
DEFAULT_COMMITTER_NAME: Final[str] = "SLR Crawler"
DEFAULT_COMMITTER_EMAIL: Final[str] = "slr-crawler@localhost"

# Merge
MERGE_MESSAGE_TEMPLATE: Final[str] = "Merge {source} into {target}"

# Study files
STUDY_DEFINITION_FILE: Final[str] = "study.yml"
RESULT_FILE_SUFFIX: Final[str] = ".bib"

# Patches
DIFF_CONTEXT_LINES: Final[int] = 3

# Patch text keeps bytes that are not valid UTF-8 as lone surrogates
PATCH_ENCODING: Final[str] = "utf-8"
PATCH_ENCODING_ERRORS: Final[str] = "surrogateescape"
