"""Tests for study and git data models."""

import pytest

from slr_crawler.exceptions import StudyDefinitionError
from slr_crawler.git.models import Patch, WorkingTreeStatus
from slr_crawler.study.definition import load_study, write_entries, write_study
from slr_crawler.study.models import LiteratureEntry, Study, StudyDatabase, slugify


class TestStudyModels:
    """Test study definition models."""
    
    def test_slugify(self):
        assert slugify("IEEE Xplore") == "ieee-xplore"
        assert slugify("  Springer/Link ") == "springer-link"
        assert slugify("***") == "database"
    
    def test_database_names(self):
        database = StudyDatabase(name="IEEE Xplore")
        
        assert database.branch_name == "search-ieee-xplore"
        assert database.result_file == "ieee-xplore.bib"
    
    def test_enabled_databases(self):
        study = Study(
            title="Survey",
            databases=[StudyDatabase(name="A"), StudyDatabase(name="B", enabled=False)],
        )
        
        assert [d.name for d in study.enabled_databases()] == ["A"]
    
    def test_blank_title_rejected(self):
        with pytest.raises(ValueError):
            Study(title="   ")
    
    def test_bibtex_fields_sorted(self):
        entry = LiteratureEntry(
            citation_key="doe2020",
            entry_type="InProceedings",
            fields={"year": "2020", "Title": "On Crawling", "author": "Doe, Jane"},
        )
        
        assert entry.to_bibtex() == (
            "@inproceedings{doe2020,\n"
            "  author = {Doe, Jane},\n"
            "  title = {On Crawling},\n"
            "  year = {2020},\n"
            "}\n"
        )


class TestStudyDefinitionFiles:
    """Test reading and writing study.yml and result files."""
    
    def test_write_and_load(self, temp_dir):
        study = Study(title="Survey", authors=["Jane Doe"], databases=[StudyDatabase(name="ACM")])
        
        write_study(study, temp_dir)
        
        assert load_study(temp_dir) == study
    
    def test_missing_definition(self, temp_dir):
        with pytest.raises(StudyDefinitionError):
            load_study(temp_dir)
    
    def test_malformed_yaml(self, temp_dir):
        (temp_dir / "study.yml").write_text("title: [unclosed\n", encoding="utf-8")
        
        with pytest.raises(StudyDefinitionError):
            load_study(temp_dir)
    
    def test_invalid_definition(self, temp_dir):
        (temp_dir / "study.yml").write_text("authors: [Jane]\n", encoding="utf-8")
        
        with pytest.raises(StudyDefinitionError):
            load_study(temp_dir)
    
    def test_entries_sorted_by_key(self, temp_dir):
        path = temp_dir / "acm.bib"
        
        count = write_entries(path, [LiteratureEntry(citation_key="b"), LiteratureEntry(citation_key="a")])
        
        assert count == 2
        assert path.read_text(encoding="utf-8") == "@article{a,\n}\n\n@article{b,\n}\n"


class TestGitModels:
    """Test git value objects."""
    
    def test_patch_is_empty(self):
        assert Patch(branch="db1").is_empty
        assert not Patch(branch="db1", text="diff --git a/x b/x\n").is_empty
    
    def test_status_clean(self):
        assert WorkingTreeStatus().is_clean
        assert not WorkingTreeStatus(missing=["gone.bib"]).is_clean
