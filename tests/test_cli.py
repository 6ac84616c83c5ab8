"""Tests for CLI functionality."""

import pytest
from typer.testing import CliRunner

from conftest import write
from slr_crawler import __version__
from slr_crawler.cli import app
from slr_crawler.git.handler import GitHandler


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_env(monkeypatch):
    """Committer identity for commands run through the CLI."""
    monkeypatch.setenv("SLR_COMMITTER_NAME", "CLI Tester")
    monkeypatch.setenv("SLR_COMMITTER_EMAIL", "cli@example.com")
    monkeypatch.setenv("SLR_DEFAULT_BRANCH", "main")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")


@pytest.fixture
def initialized(runner, study_root, cli_env):
    """Study repository created through ``init``."""
    result = runner.invoke(app, ["init", str(study_root), "--title", "Survey", "-d", "IEEE", "-q", "llm"])
    assert result.exit_code == 0, result.output
    return study_root


class TestVersionCommand:
    """Test version command."""
    
    def test_version(self, runner):
        result = runner.invoke(app, ["version"])
        
        assert result.exit_code == 0
        assert __version__ in result.output


@pytest.mark.integration
class TestRepositoryCommands:
    """Test commands driving the git layer."""
    
    def test_init_creates_study(self, initialized):
        """``init`` bootstraps the repository and commits study.yml."""
        assert (initialized / "study.yml").exists()
        assert (initialized / ".git").is_dir()
    
    def test_status_clean(self, runner, initialized):
        result = runner.invoke(app, ["status", str(initialized)])
        
        assert result.exit_code == 0
        assert "main" in result.output
        assert "Working tree clean" in result.output
    
    def test_status_lists_changes(self, runner, initialized):
        write(initialized, "new.bib", "x\n")
        
        result = runner.invoke(app, ["status", str(initialized)])
        
        assert result.exit_code == 0
        assert "new.bib" in result.output
    
    def test_commit_and_log(self, runner, initialized):
        write(initialized, "new.bib", "x\n")
        
        first = runner.invoke(app, ["commit", str(initialized), "-m", "Add new"])
        second = runner.invoke(app, ["commit", str(initialized), "-m", "Again"])
        history = runner.invoke(app, ["log", str(initialized)])
        
        assert "Changes committed" in first.output
        assert "Nothing to commit" in second.output
        assert "Add new" in history.output
    
    def test_diff_and_apply(self, runner, initialized, temp_dir, git_settings):
        """A patch written by ``diff`` can be applied with ``apply``."""
        runner.invoke(app, ["checkout", str(initialized), "db1"])
        write(initialized, "A.txt", "x")
        runner.invoke(app, ["commit", str(initialized), "-m", "Commit 1"])
        patch_file = temp_dir / "db1.patch"
        
        diff = runner.invoke(app, ["diff", str(initialized), "db1", "-o", str(patch_file)])
        runner.invoke(app, ["checkout", str(initialized), "main"])
        applied = runner.invoke(app, ["apply", str(initialized), str(patch_file), "-m", "Integrate db1"])
        
        assert diff.exit_code == 0
        assert applied.exit_code == 0, applied.output
        assert (initialized / "A.txt").read_text() == "x"
        handler = GitHandler.open(initialized, git_settings)
        assert handler.log()[0].message == "Integrate db1"
    
    def test_diff_and_apply_non_utf8_content(self, runner, initialized, temp_dir):
        """Patches of files that are not UTF-8 survive the trip through a file."""
        latin = "author = {Müller}\n".encode("latin-1")
        runner.invoke(app, ["checkout", str(initialized), "db1"])
        (initialized / "latin.bib").write_bytes(latin)
        runner.invoke(app, ["commit", str(initialized), "-m", "Commit 1"])
        patch_file = temp_dir / "db1.patch"
        
        diff = runner.invoke(app, ["diff", str(initialized), "db1", "-o", str(patch_file)])
        runner.invoke(app, ["checkout", str(initialized), "main"])
        applied = runner.invoke(app, ["apply", str(initialized), str(patch_file), "-m", "Integrate db1"])
        
        assert diff.exit_code == 0, diff.output
        assert applied.exit_code == 0, applied.output
        assert (initialized / "latin.bib").read_bytes() == latin
    
    def test_diff_to_stdout(self, runner, initialized):
        runner.invoke(app, ["checkout", str(initialized), "db1"])
        write(initialized, "A.txt", "x\n")
        runner.invoke(app, ["commit", str(initialized), "-m", "Commit 1"])
        
        result = runner.invoke(app, ["diff", str(initialized), "db1"])
        
        assert result.exit_code == 0
        assert "diff --git a/A.txt b/A.txt" in result.output
    
    def test_merge_missing_source(self, runner, initialized):
        result = runner.invoke(app, ["merge", str(initialized), "main", "nope"])
        
        assert result.exit_code == 0
        assert "nothing merged" in result.output
    
    def test_invalid_checkout_fails(self, runner, initialized):
        result = runner.invoke(app, ["checkout", str(initialized), "bad..name"])
        
        assert result.exit_code == 1
        assert "Checkout failed" in result.output
    
    def test_sync_without_remote(self, runner, initialized):
        result = runner.invoke(app, ["sync", str(initialized), "fetch"])
        
        assert result.exit_code == 0
        assert "skipped or failed" in result.output
    
    def test_sync_unknown_operation(self, runner, initialized):
        result = runner.invoke(app, ["sync", str(initialized), "clone"])
        
        assert result.exit_code == 1
        assert "Unknown operation" in result.output
