#!/usr/bin/env python3
"""
Integration tests for source file -> database imports.

Each importer's output goes through import_project into a real SQLite
store and is read back through the project manager.
"""
import json

import pytest

from kindling.core.exceptions import ImporterError, InvalidStructureError
from kindling.importers import import_project

YW7 = """<?xml version="1.0" encoding="utf-8"?>
<YWRITER7>
<PROJECT><Title>Harbor Lights</Title><AuthorName>Sam Ortiz</AuthorName></PROJECT>
<CHARACTERS><CHARACTER><ID>1</ID><Title>Rae</Title></CHARACTER></CHARACTERS>
<SCENES>
<SCENE><ID>1</ID><Title>Arrival</Title><Goal>Find the keeper</Goal>
<SceneContent>[i]Rain[/i] fell.</SceneContent><Characters><CharID>1</CharID></Characters></SCENE>
<SCENE><ID>2</ID><Title>Storm</Title><SceneContent>Wind.</SceneContent></SCENE>
</SCENES>
<CHAPTERS>
<CHAPTER><ID>1</ID><Title>One</Title><Type>0</Type><Scenes><ScID>1</ScID><ScID>2</ScID></Scenes></CHAPTER>
</CHAPTERS>
</YWRITER7>
"""

OUTLINE = """# The Book

## Chapter One

### Arrival
- Dust on the road
- The bell rings
"""


class TestImportPipeline:
    """Test full import of each supported format."""

    def test_ywriter_import(self, test_db, tmp_dir):
        """Test yWriter structure, prose and joins land in the store."""
        source = tmp_dir / "harbor.yw7"
        source.write_text(YW7, encoding="utf-8")

        project = import_project(test_db, source)

        with test_db.session_scope():
            chapters = test_db.projects.get_chapters(project.id)
            scenes = test_db.projects.get_scenes(chapters[0].id)
            beats = test_db.projects.get_beats(scenes[0].id)
            data = test_db.bundles.load_snapshot_data(project.id)

        assert project.source_type == "ywriter"
        assert [s.title for s in scenes] == ["Arrival", "Storm"]
        assert [b.content for b in beats] == ["Goal: Find the keeper", "Scene Content"]
        assert beats[1].prose == "<p><em>Rain</em> fell.</p>"
        assert [c.name for c in data.characters] == ["Rae"]
        assert data.scene_character_refs[0].scene_id == scenes[0].id

    def test_markdown_import(self, test_db, tmp_dir):
        """Test Markdown outline headings become chapters, scenes and beats."""
        source = tmp_dir / "book.md"
        source.write_text(OUTLINE, encoding="utf-8")

        project = import_project(test_db, source)

        with test_db.session_scope():
            counts = test_db.projects.structure_counts(project.id)
        assert project.name == "The Book"
        assert counts == {"chapters": 1, "scenes": 1, "beats": 2}

    def test_reimport_creates_separate_projects(self, test_db, tmp_dir):
        """Test importing the same file twice yields two projects."""
        source = tmp_dir / "book.md"
        source.write_text(OUTLINE, encoding="utf-8")

        first = import_project(test_db, source)
        second = import_project(test_db, source)

        assert first.id != second.id
        with test_db.session_scope():
            assert test_db.projects.count_projects() == 2
            assert len(test_db.projects.find_projects("The Book")) == 2

    def test_failed_import_leaves_store_untouched(self, test_db, tmp_dir):
        """Test a structurally invalid file inserts nothing."""
        source = tmp_dir / "list.pltr"
        source.write_text(json.dumps([1, 2, 3]), encoding="utf-8")

        with pytest.raises(InvalidStructureError):
            import_project(test_db, source)

        with test_db.session_scope():
            assert test_db.projects.count_projects() == 0

    def test_missing_source(self, test_db, tmp_dir):
        """Test a missing file raises an importer error."""
        with pytest.raises(ImporterError):
            import_project(test_db, tmp_dir / "nowhere.md")
