"""Tests for branch lookup and checkout."""

import pytest

from conftest import write
from slr_crawler.exceptions import GitOperationError


pytestmark = pytest.mark.integration


class TestCheckout:
    """Test BranchManager.checkout."""
    
    def test_checkout_new_branch(self, handler):
        """A missing branch is created at the previous HEAD and becomes current."""
        head = handler.log()[0].sha
        
        handler.checkout_branch("testBranch")
        
        assert handler.current_branch() == "testBranch"
        assert handler.resolve_branch("testBranch").commit_sha == head
    
    def test_checkout_existing_branch(self, handler, study_root):
        """Switching to an existing branch leaves the commit graph alone."""
        handler.checkout_branch("branch1")
        write(study_root, "Test1.txt", "on branch1\n")
        handler.commit_all("Commit on branch1")
        heads = {name: handler.resolve_branch(name).commit_sha for name in handler.list_branches()}
        
        handler.checkout_branch("main")
        
        assert handler.current_branch() == "main"
        assert not (study_root / "Test1.txt").exists()
        assert {name: handler.resolve_branch(name).commit_sha for name in handler.list_branches()} == heads
    
    def test_invalid_branch_name(self, handler):
        """Names git refuses are reported as git operation errors."""
        with pytest.raises(GitOperationError):
            handler.checkout_branch("bad..name")
        
        assert handler.current_branch() == "main"
        assert handler.list_branches() == ["main"]
    
    def test_checkout_blocked_by_local_changes(self, handler, study_root):
        """Uncommitted changes that would be overwritten abort the checkout."""
        handler.checkout_branch("other")
        write(study_root, "shared.txt", "other\n")
        handler.commit_all("Add shared on other")
        handler.checkout_branch("main")
        write(study_root, "shared.txt", "untracked on main\n")
        
        with pytest.raises(GitOperationError):
            handler.checkout_branch("other")
        
        assert handler.current_branch() == "main"


class TestResolveBranch:
    """Test BranchManager.resolve_branch."""
    
    def test_resolve_missing_branch(self, handler):
        """Looking up a missing branch has no side effects."""
        assert handler.resolve_branch("missing") is None
        assert handler.list_branches() == ["main"]
    
    def test_resolve_existing_branch(self, handler):
        """An existing branch resolves to its head commit."""
        ref = handler.resolve_branch("main")
        
        assert ref.name == "main"
        assert ref.commit_sha == handler.log()[0].sha
    
    def test_list_branches_sorted(self, handler):
        """Branch names are listed in sorted order."""
        for name in ("zeta", "alpha"):
            handler.checkout_branch(name)
        
        assert handler.list_branches() == ["alpha", "main", "zeta"]
