"""
test_import_project.py
----------------------
Unit tests for format detection and the import entry point.
"""
import pytest

from kindling.core.exceptions import ParseError, ValidationError
from kindling.importers import (
    LongformImporter,
    MarkdownImporter,
    PlottrImporter,
    YWriterImporter,
    detect_format,
    get_importer,
    import_project,
)


class TestDetectFormat:
    """Test detect_format function."""

    def test_extensions(self, tmp_dir):
        assert detect_format(tmp_dir / "a.pltr") == "plottr"
        assert detect_format(tmp_dir / "a.json") == "plottr"
        assert detect_format(tmp_dir / "a.yw7") == "ywriter"
        assert detect_format(tmp_dir / "a.md") == "markdown"
        assert detect_format(tmp_dir / "A.MD") == "markdown"

    def test_directory_is_longform(self, tmp_dir):
        assert detect_format(tmp_dir) == "longform"

    def test_unknown_extension(self, tmp_dir):
        with pytest.raises(ValidationError, match="Cannot detect"):
            detect_format(tmp_dir / "a.docx")


class TestGetImporter:
    """Test get_importer function."""

    def test_known_formats(self):
        assert isinstance(get_importer("plottr"), PlottrImporter)
        assert isinstance(get_importer("YWRITER"), YWriterImporter)
        assert isinstance(get_importer("markdown"), MarkdownImporter)
        assert isinstance(get_importer("longform"), LongformImporter)

    def test_unknown_format(self):
        with pytest.raises(ValidationError, match="Unknown import format"):
            get_importer("scrivener")


class TestImportProject:
    """Test parse-then-insert behaviour."""

    def test_inserts_bundle(self, test_db, tmp_dir):
        source = tmp_dir / "story.md"
        source.write_text("# Story\n## One\n### Scene\n- Beat\n", encoding="utf-8")

        project = import_project(test_db, source)

        assert project.name == "Story"
        assert project.source_type == "markdown"
        assert project.source_path == str(source)
        with test_db.session_scope():
            assert test_db.projects.structure_counts(project.id) == {
                "chapters": 1,
                "scenes": 1,
                "beats": 1,
            }

    def test_explicit_format_overrides_extension(self, test_db, tmp_dir):
        source = tmp_dir / "outline.txt"
        source.write_text("# Forced\n", encoding="utf-8")

        project = import_project(test_db, source, source_format="markdown")
        assert project.name == "Forced"

    def test_parse_failure_inserts_nothing(self, test_db, tmp_dir):
        source = tmp_dir / "broken.pltr"
        source.write_text("{broken", encoding="utf-8")

        with pytest.raises(ParseError):
            import_project(test_db, source)
        with test_db.session_scope():
            assert test_db.projects.count_projects() == 0

    def test_each_import_is_a_new_project(self, test_db, tmp_dir):
        source = tmp_dir / "story.md"
        source.write_text("# Story\n", encoding="utf-8")

        first = import_project(test_db, source)
        second = import_project(test_db, source)

        assert first.id != second.id
        with test_db.session_scope():
            assert test_db.projects.count_projects() == 2
