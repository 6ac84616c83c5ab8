"""Reading and writing ``study.yml`` and result files."""

from pathlib import Path
from typing import Iterable, Union

import yaml
from pydantic import ValidationError

from ..core.constants import STUDY_DEFINITION_FILE
from ..exceptions import StudyDefinitionError
from .models import LiteratureEntry, Study


def study_definition_path(root: Union[str, Path]) -> Path:
    return Path(root) / STUDY_DEFINITION_FILE


def load_study(root: Union[str, Path]) -> Study:
    """Load the study definition stored in the repository root."""
    path = study_definition_path(root)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise StudyDefinitionError.from_exception(f"No study definition at {path}", e)
    except yaml.YAMLError as e:
        raise StudyDefinitionError.from_exception(f"Malformed study definition {path}", e)
    
    try:
        return Study.model_validate(data or {})
    except ValidationError as e:
        raise StudyDefinitionError.from_exception(
            f"Invalid study definition {path}", e, {"errors": e.error_count()}
        )


def write_study(study: Study, root: Union[str, Path]) -> Path:
    """Write ``study`` to ``study.yml`` in the repository root."""
    path = study_definition_path(root)
    path.write_text(
        yaml.safe_dump(study.model_dump(mode="json"), sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    return path


def write_entries(path: Path, entries: Iterable[LiteratureEntry]) -> int:
    """Write ``entries`` sorted by citation key; returns the number written."""
    ordered = sorted(entries, key=lambda entry: entry.citation_key)
    path.write_text("\n".join(entry.to_bibtex() for entry in ordered), encoding="utf-8")
    return len(ordered)
