"""Crawl orchestration over the study repository."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol, Union

from ..config import Config, CrawlSettings, GitSettings, IntegrationStrategy
from ..exceptions import CrawlError, SlrCrawlerError
from ..git.handler import GitHandler
from ..logging import get_logger
from .definition import load_study, write_entries, write_study
from .models import CrawlResult, LiteratureEntry, Study, StudyDatabase


logger = get_logger(__name__)


class EntryFetcher(Protocol):
    """Produces the literature entries a database returns for a study."""
    
    def fetch(self, study: Study, database: StudyDatabase) -> Iterable[LiteratureEntry]:
        ...


@dataclass(frozen=True)
class OpenExisting:
    """Crawl a study whose repository and ``study.yml`` already exist."""


@dataclass(frozen=True)
class CreateNew:
    """Create the study repository and write ``study`` into it first."""
    study: Study


RepositoryInitialization = Union[OpenExisting, CreateNew]


def initialize_repository(
    root: Union[str, Path],
    initialization: RepositoryInitialization,
    settings: GitSettings,
) -> GitHandler:
    """Open the study repository according to ``initialization``."""
    if isinstance(initialization, CreateNew):
        handler = GitHandler.open(root, settings)
        write_study(initialization.study, handler.root)
        handler.commit_all("Create study definition")
        logger.info("Created study", root=str(handler.root), title=initialization.study.title)
        return handler
    
    # Fails before touching the directory when it holds no study
    load_study(root)
    return GitHandler.open(root, settings)


class Crawler:
    """Runs one crawl: every enabled database gets its own search branch,
    whose new results are folded into the results branch."""
    
    def __init__(
        self,
        handler: GitHandler,
        fetcher: EntryFetcher,
        settings: CrawlSettings,
    ):
        self.handler = handler
        self.fetcher = fetcher
        self.settings = settings
    
    @property
    def results_branch(self) -> str:
        return self.settings.results_branch
    
    def perform_crawl(self) -> CrawlResult:
        """Search every enabled database and integrate the results."""
        result = CrawlResult()
        
        self.handler.checkout_branch(self.results_branch)
        result.pulled = self.handler.pull()
        # Pending edits of the study definition go onto the results branch
        self.handler.commit_all("Update study definition")
        study = load_study(self.handler.root)
        
        for database in study.enabled_databases():
            if self._crawl_database(study, database):
                result.integrated.append(database.name)
            else:
                result.unchanged.append(database.name)
        
        self.handler.checkout_branch(self.results_branch)
        if self.settings.push_results:
            result.pushed = self.handler.push()
        
        logger.info(
            "Crawl finished",
            root=str(self.handler.root),
            integrated=result.integrated,
            unchanged=result.unchanged,
        )
        return result
    
    def _crawl_database(self, study: Study, database: StudyDatabase) -> bool:
        """Store ``database``'s results on its branch; True if they were integrated."""
        branch = database.branch_name
        # New search branches fork from the results branch
        self.handler.checkout_branch(self.results_branch)
        self.handler.checkout_branch(branch)
        
        entries = self.fetcher.fetch(study, database)
        count = write_entries(self.handler.root / database.result_file, entries)
        log = logger.bind(database=database.name, branch=branch)
        
        if not self.handler.commit_all(f"Search results for {database.name}"):
            log.info("No new results", entries=count)
            return False
        
        if self.settings.integration_strategy is IntegrationStrategy.PATCH:
            patch = self.handler.diff_head_against_parent(branch)
            self.handler.checkout_branch(self.results_branch)
            self.handler.apply_patch(patch, f"Integrate {branch}")
        else:
            self.handler.merge(self.results_branch, branch)
        
        log.info("Integrated results", entries=count, strategy=self.settings.integration_strategy.value)
        return True


def run_study(
    root: Union[str, Path],
    initialization: RepositoryInitialization,
    fetcher: EntryFetcher,
    config: Config,
) -> CrawlResult:
    """Initialize the study repository and run one crawl.
    
    Any repository, git or study definition error aborts the run and is
    re-raised as :class:`CrawlError` with the original error as its cause.
    """
    try:
        handler = initialize_repository(root, initialization, config.git)
        return Crawler(handler, fetcher, config.crawl).perform_crawl()
    except SlrCrawlerError as e:
        logger.error("Crawl failed", root=str(root), error=str(e), category=type(e).__name__)
        raise CrawlError.from_exception(
            f"Crawl of {root} failed: {e.message}", e, {"category": type(e).__name__}
        )
