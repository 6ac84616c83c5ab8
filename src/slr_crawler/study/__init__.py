"""Study definitions and crawl orchestration."""

from .crawler import Crawler, CreateNew, EntryFetcher, OpenExisting, initialize_repository, run_study
from .definition import load_study, write_entries, write_study
from .models import CrawlResult, LiteratureEntry, Study, StudyDatabase

__all__ = [
    "Crawler",
    "CreateNew",
    "EntryFetcher",
    "OpenExisting",
    "initialize_repository",
    "run_study",
    "load_study",
    "write_entries",
    "write_study",
    "CrawlResult",
    "LiteratureEntry",
    "Study",
    "StudyDatabase",
]
