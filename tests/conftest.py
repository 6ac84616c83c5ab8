"""Pytest configuration and fixtures."""

import os
import shutil
import stat
import tempfile
from pathlib import Path

import git
import pytest
import structlog

from slr_crawler.config import AppConfig, Config, CrawlSettings, GitSettings, IntegrationStrategy
from slr_crawler.git.handler import GitHandler


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    _safe_rmtree(temp_path)


def _safe_rmtree(path):
    """Remove a directory tree, including read-only git objects on Windows."""
    
    def handle_remove_readonly(func, path, exc):
        if os.path.exists(path):
            os.chmod(path, stat.S_IWRITE)
            func(path)
    
    shutil.rmtree(path, onerror=handle_remove_readonly)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop logging configuration made by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep the developer's git and crawler settings out of the tests."""
    for name in (
        "GIT_EMAIL",
        "GIT_PW",
        "SLR_GIT_REMOTE",
        "SLR_DEFAULT_BRANCH",
        "SLR_RESULTS_BRANCH",
        "SLR_INTEGRATION_STRATEGY",
        "SLR_PUSH_RESULTS",
        "LOG_LEVEL",
        "LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def git_settings():
    """Git settings independent of the environment."""
    return GitSettings(
        username=None,
        password=None,
        remote_name="origin",
        default_branch="main",
        committer_name="Test Crawler",
        committer_email="crawler@example.com",
        _env_file=None,
    )


@pytest.fixture
def make_config(git_settings):
    """Factory for a full configuration with a chosen integration strategy."""
    
    def factory(strategy: IntegrationStrategy = IntegrationStrategy.MERGE, push_results: bool = False) -> Config:
        return Config(
            git=git_settings,
            crawl=CrawlSettings(
                results_branch="main",
                integration_strategy=strategy,
                push_results=push_results,
                _env_file=None,
            ),
            app=AppConfig(log_level="WARNING", log_format="console", _env_file=None),
        )
    
    return factory


@pytest.fixture
def study_root(temp_dir):
    """Directory a study repository gets bootstrapped in."""
    return temp_dir / "study"


@pytest.fixture
def fresh_handler(study_root, git_settings):
    """Handler on a repository that was just bootstrapped."""
    return GitHandler.open(study_root, git_settings)


@pytest.fixture
def handler(fresh_handler):
    """Bootstrapped repository with the default ignore rules committed."""
    fresh_handler.commit_all("Add ignore rules")
    return fresh_handler


@pytest.fixture
def bare_remote(temp_dir):
    """Empty bare repository usable as ``origin``."""
    path = temp_dir / "remote.git"
    repo = git.Repo.init(path, bare=True, initial_branch="main")
    repo.close()
    return path


def write(root: Path, relative: str, content: str) -> Path:
    """Write ``content`` to ``root/relative``, creating parent directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
