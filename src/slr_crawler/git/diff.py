"""Diff of a branch head against its parent commit."""

from typing import List, Optional, Tuple

from git import GitCommandError

from ..core.constants import DIFF_CONTEXT_LINES, PATCH_ENCODING, PATCH_ENCODING_ERRORS
from ..exceptions import GitOperationError
from ..logging import get_logger
from .models import ChangeType, FileChange, Patch
from .repository import StudyRepository


logger = get_logger(__name__)

DIFF_HEADER = "diff --git "
DEV_NULL = "/dev/null"

# Escapes git uses in quoted path names, besides three-digit octal bytes
_C_ESCAPES = {
    "a": 0x07, "b": 0x08, "t": 0x09, "n": 0x0A, "v": 0x0B,
    "f": 0x0C, "r": 0x0D, '"': 0x22, "\\": 0x5C,
}


def unquote_path(name: str) -> str:
    """Undo git's C-style quoting of a path name, if it is quoted."""
    if len(name) < 2 or not (name.startswith('"') and name.endswith('"')):
        return name
    
    raw = name[1:-1].encode(PATCH_ENCODING, PATCH_ENCODING_ERRORS)
    result = bytearray()
    i = 0
    while i < len(raw):
        if raw[i] != ord("\\"):
            result.append(raw[i])
            i += 1
            continue
        escape = raw[i + 1:i + 2].decode("ascii", "replace")
        if escape.isdigit():
            result.append(int(raw[i + 1:i + 4], 8))
            i += 4
        elif escape in _C_ESCAPES:
            result.append(_C_ESCAPES[escape])
            i += 2
        else:
            raise ValueError(f"Invalid escape in quoted path: {name!r}")
    return Patch.decode(bytes(result))


def _strip_prefix(name: str, prefix: str) -> Optional[str]:
    name = unquote_path(name)
    return name[len(prefix):] if name.startswith(prefix) else None


def _header_path(header: str) -> Optional[str]:
    """Path named by a ``diff --git a/<path> b/<path>`` header.
    
    Without renames both sides name the same path, so the header splits
    into two halves of equal length around the middle space. This holds
    for paths that themselves contain `` b/``.
    """
    names = header[len(DIFF_HEADER):].rstrip("\n")
    half = len(names) // 2
    if len(names) % 2 == 0 or names[half] != " ":
        return None
    old = _strip_prefix(names[:half], "a/")
    new = _strip_prefix(names[half + 1:], "b/")
    if old is None or old != new:
        return None
    return new


def _marker_path(lines: List[str]) -> Optional[str]:
    """Path named by the ``---``/``+++`` lines of a section, if it has them."""
    old = new = None
    for line in lines[1:]:
        if line.startswith("--- "):
            old = line[4:]
        elif line.startswith("+++ "):
            new = line[4:]
            break
        elif line.startswith("@@"):
            break
    
    for name, prefix in ((new, "b/"), (old, "a/")):
        if name is None:
            continue
        # git appends a tab to names containing spaces
        name = name.rstrip("\n").rstrip("\t")
        if name == DEV_NULL:
            continue
        path = _strip_prefix(name, prefix)
        if path is not None:
            return path
    return None


def _split_lines(text: str) -> List[str]:
    """Split on newlines only; file content may contain other line breaks."""
    lines = text.split("\n")
    result = [line + "\n" for line in lines[:-1]]
    if lines[-1]:
        result.append(lines[-1])
    return result


def split_patch(text: str) -> List[Tuple[FileChange, str]]:
    """Split unified diff text into per-file sections.
    
    Returns (change, section text) pairs in the order they appear.
    """
    sections: List[List[str]] = []
    for line in _split_lines(text):
        if line.startswith(DIFF_HEADER) or not sections:
            sections.append([])
        sections[-1].append(line)
    
    result = []
    for lines in sections:
        section = "".join(lines)
        if not lines[0].startswith(DIFF_HEADER):
            raise ValueError(f"Not a git diff section: {lines[0]!r}")
        path = _header_path(lines[0]) or _marker_path(lines)
        if path is None:
            raise ValueError(f"Cannot read path from diff section: {lines[0]!r}")
        change_type = ChangeType.MODIFIED
        for line in lines[1:]:
            if line.startswith("new file mode"):
                change_type = ChangeType.ADDED
                break
            if line.startswith("deleted file mode"):
                change_type = ChangeType.DELETED
                break
            if line.startswith(("---", "@@")):
                break
        result.append((FileChange(path=path, change_type=change_type), section))
    return result


class DiffEngine:
    """Computes the patch introduced by the most recent commit of a branch."""
    
    def __init__(self, repository: StudyRepository):
        self.repository = repository
    
    def diff_head_against_parent(self, branch: str) -> Patch:
        """Patch between ``branch``'s head and its first parent.
        
        A branch that does not exist, or whose head has no parent, yields an
        empty patch.
        """
        with self.repository.handle() as repo:
            head = next((h for h in repo.heads if h.name == branch), None)
            if head is None:
                logger.debug("Branch not found, nothing to diff", branch=branch)
                return Patch(branch=branch)
            commit = head.commit
            if not commit.parents:
                logger.debug("Branch head has no parent, nothing to diff", branch=branch)
                return Patch(branch=branch)
            
            try:
                output = repo.git(c="core.quotepath=false").diff(
                    "--no-color",
                    "--no-ext-diff",
                    "--no-renames",
                    "--binary",
                    f"--unified={DIFF_CONTEXT_LINES}",
                    "--src-prefix=a/",
                    "--dst-prefix=b/",
                    commit.parents[0].hexsha,
                    commit.hexsha,
                    strip_newline_in_stdout=False,
                    stdout_as_string=False,
                )
            except GitCommandError as e:
                raise GitOperationError.from_git(f"Failed to diff branch {branch}", e)
        
        text = Patch.decode(output)
        if not text:
            return Patch(branch=branch)
        
        sections = sorted(split_patch(text), key=lambda item: item[0].path)
        return Patch(
            branch=branch,
            text="".join(section for _, section in sections),
            files=[change for change, _ in sections],
        )


def parse_patch(text: str, branch: str = "") -> Patch:
    """Build a :class:`Patch` from unified diff text, e.g. one read from a file."""
    if not text.strip():
        return Patch(branch=branch)
    return Patch(branch=branch, text=text, files=[change for change, _ in split_patch(text)])
