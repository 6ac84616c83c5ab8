"""Custom exceptions for the SLR crawler."""

from typing import Any, Dict, Optional


class SlrCrawlerError(Exception):
    """Base exception for SLR crawler errors."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """Initialize with message, optional details, and cause."""
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause
        
    def __str__(self) -> str:
        """String representation with details."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message
    
    @classmethod
    def from_exception(cls, message: str, cause: Exception, details: Optional[Dict[str, Any]] = None):
        """Create exception with proper chaining from another exception."""
        return cls(message, details, cause)


class RepositoryUnavailableError(SlrCrawlerError):
    """Repository root is missing, inaccessible or not a git repository."""
    pass


class GitOperationError(SlrCrawlerError):
    """Exception raised when git itself rejects the requested operation."""
    
    @classmethod
    def from_git(cls, message: str, cause: Exception):
        """Create from a GitPython command error, keeping command and stderr."""
        details: Dict[str, Any] = {}
        status = getattr(cause, "status", None)
        if status is not None:
            details["status"] = status
        stderr = getattr(cause, "stderr", None)
        if stderr:
            details["stderr"] = str(stderr).strip()
        return cls(message, details, cause)


class MergeConflictError(GitOperationError):
    """Merge could not be completed automatically."""
    pass


class PatchApplyError(GitOperationError):
    """Patch does not apply to the current branch."""
    pass


class RemoteSyncError(SlrCrawlerError):
    """Transport or authentication failure talking to a remote."""
    pass


class ConfigurationError(SlrCrawlerError):
    """Exception raised for configuration-related errors."""
    pass


class StudyDefinitionError(SlrCrawlerError):
    """Study definition is missing or malformed."""
    pass


class CrawlError(SlrCrawlerError):
    """A crawl run was aborted."""
    pass
