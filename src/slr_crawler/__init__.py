"""Git-backed result store for systematic literature review crawls."""

__version__ = "0.1.0"

# Import main components
from .config import Config
from .git import GitHandler, Patch, StudyRepository
from .logging import configure_logging, get_logger
from .study import Crawler, CreateNew, OpenExisting, run_study

__all__ = [
    "Config",
    "GitHandler",
    "Patch",
    "StudyRepository",
    "configure_logging",
    "get_logger",
    "Crawler",
    "CreateNew",
    "OpenExisting",
    "run_study",
]
