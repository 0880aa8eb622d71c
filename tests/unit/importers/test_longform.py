"""
test_longform.py
----------------
Unit tests for the Longform project-folder importer.

Covers manifest discovery (longform.yaml and index-note frontmatter),
chapter and orphan-scene mapping, and the scene file comment markers.
"""
import pytest

from kindling.core.exceptions import InvalidStructureError, ParseError, SourceIOError
from kindling.importers.longform import (
    LongformImporter,
    flatten_scene_entries,
    normalize_scene_folder,
    parse_key_values,
    scene_file_and_title,
)

MANIFEST = """title: Night Train
sceneFolder: scenes
chapters:
  - title: Boarding
    scenes:
      - a
      - file: b.md
        title: The Platform
  - scenes:
      - - c
scenes:
  - d
"""

SCENE_WITH_BEATS = """---
tags: [draft]
---
<!-- kindling: type=notes status=revised synopsis="A \\"big\\" day" -->
She stood.

Still there.

<!-- kindling: beats -->
#### First beat
Beat prose *here*.
- Second beat
"""


@pytest.fixture
def project_dir(tmp_dir):
    root = tmp_dir / "Night Train"
    scenes = root / "scenes"
    scenes.mkdir(parents=True)
    (root / "longform.yaml").write_text(MANIFEST, encoding="utf-8")
    (scenes / "a.md").write_text(SCENE_WITH_BEATS, encoding="utf-8")
    (scenes / "b.md").write_text("Plain prose.\nSecond line.\n", encoding="utf-8")
    (scenes / "c.md").write_text(
        "Synopsis paragraph.\n\n<!-- kindling: beats -->\n- Only beat\n", encoding="utf-8"
    )
    (scenes / "d.md").write_text("", encoding="utf-8")
    return root


@pytest.fixture
def bundle(project_dir):
    return LongformImporter().parse(project_dir)


def scene_named(bundle, title):
    return next(s for s in bundle.scenes if s.title == title)


class TestHelpers:
    """Test manifest and comment helpers."""

    def test_parse_key_values(self):
        assert parse_key_values('type=notes synopsis="A \\"big\\" day"') == {
            "type": "notes",
            "synopsis": 'A "big" day',
        }

    def test_parse_key_values_escapes_and_empty(self):
        assert parse_key_values('synopsis="Line\\none" status="" type=todo') == {
            "synopsis": "Line\none",
            "type": "todo",
        }

    def test_normalize_scene_folder(self):
        assert normalize_scene_folder("/") == ""
        assert normalize_scene_folder(".") == ""
        assert normalize_scene_folder(None) == ""
        assert normalize_scene_folder("/scenes/") == "scenes"

    def test_flatten_scene_entries(self):
        assert flatten_scene_entries(["a", ["b", ["c"]], {"file": "d"}, None, 3]) == [
            "a",
            "b",
            "c",
            {"file": "d"},
            "3",
        ]
        assert flatten_scene_entries("solo") == ["solo"]
        assert flatten_scene_entries(None) == []

    def test_scene_file_and_title(self):
        assert scene_file_and_title("a") == ("a.md", None)
        assert scene_file_and_title("b.MD") == ("b.MD", None)
        assert scene_file_and_title({"file": "c", "title": " C "}) == ("c.md", "C")
        assert scene_file_and_title({"title": "no file"}) == (None, None)


class TestManifest:
    """Test chapters and scene mapping from longform.yaml."""

    def test_project(self, bundle, project_dir):
        assert bundle.project.name == "Night Train"
        assert bundle.project.source_type == "longform"
        assert bundle.project.source_path == str(project_dir)

    def test_chapters(self, bundle):
        assert [c.title for c in bundle.chapters] == ["Boarding", "Chapter 2", "Chapter 3"]
        assert [c.source_id for c in bundle.chapters] == [
            "longform:chapter:0",
            "longform:chapter:1",
            "longform:default",
        ]

    def test_scenes(self, bundle):
        assert [s.title for s in bundle.scenes] == ["a", "The Platform", "c", "d"]
        assert [s.source_id for s in bundle.scenes] == [
            "scenes/a.md",
            "scenes/b.md",
            "scenes/c.md",
            "scenes/d.md",
        ]
        assert [s.position for s in bundle.scenes] == [0, 1, 0, 0]
        assert bundle.scenes[3].chapter_id == bundle.chapters[2].id

    def test_nested_manifest_key(self, project_dir):
        nested = "longform:\n" + "".join(f"  {line}\n" for line in MANIFEST.splitlines())
        (project_dir / "longform.yaml").write_text(nested, encoding="utf-8")
        assert LongformImporter().parse(project_dir).project.name == "Night Train"

    def test_duplicate_scene_kept_once(self, project_dir):
        (project_dir / "longform.yaml").write_text(
            "sceneFolder: scenes\nscenes: [a, a]\n", encoding="utf-8"
        )
        bundle = LongformImporter().parse(project_dir)
        assert [s.source_id for s in bundle.scenes] == ["scenes/a.md"]
        assert bundle.project.name == "Night Train"


class TestSceneFiles:
    """Test scene file parsing."""

    def test_comment_metadata(self, bundle):
        scene = scene_named(bundle, "a")
        assert scene.scene_type == "notes"
        assert scene.scene_status == "revised"
        assert scene.synopsis == 'A "big" day'
        assert scene.prose == "<p>She stood.</p><p>Still there.</p>"

    def test_beats_after_marker(self, bundle):
        scene = scene_named(bundle, "a")
        beats = [b for b in bundle.beats if b.scene_id == scene.id]
        assert [b.content for b in beats] == ["First beat", "Second beat"]
        assert beats[0].prose == "<p>Beat prose <em>here</em>.</p>"
        assert beats[1].prose is None
        assert [b.source_id for b in beats] == ["scenes/a.md#beat-0", "scenes/a.md#beat-1"]

    def test_plain_scene_is_prose(self, bundle):
        scene = scene_named(bundle, "The Platform")
        assert scene.synopsis is None
        assert scene.prose == "<p>Plain prose. Second line.</p>"
        assert scene.scene_type == "normal"
        assert scene.scene_status == "draft"

    def test_text_before_marker_is_synopsis(self, bundle):
        scene = scene_named(bundle, "c")
        assert scene.synopsis == "Synopsis paragraph."
        assert scene.prose is None
        assert [b.content for b in bundle.beats if b.scene_id == scene.id] == ["Only beat"]

    def test_empty_scene(self, bundle):
        scene = scene_named(bundle, "d")
        assert scene.synopsis is None
        assert scene.prose is None


class TestIndexNote:
    """Test manifests stored in note frontmatter."""

    def test_index_note_manifest(self, tmp_dir):
        root = tmp_dir / "vault"
        root.mkdir()
        (root / "Index.md").write_text(
            "---\nlongform:\n  format: scenes\n  title: Vault Book\n"
            "  sceneFolder: /\n  scenes:\n    - one\n---\n",
            encoding="utf-8",
        )
        (root / "one.md").write_text("Text.\n", encoding="utf-8")

        bundle = LongformImporter().parse(root)
        assert bundle.project.name == "Vault Book"
        assert [s.source_id for s in bundle.scenes] == ["one.md"]


class TestErrors:
    """Test error handling."""

    def test_no_manifest(self, tmp_dir):
        (tmp_dir / "note.md").write_text("# Just a note\n", encoding="utf-8")
        with pytest.raises(InvalidStructureError):
            LongformImporter().parse(tmp_dir)

    def test_single_scene_format_rejected(self, project_dir):
        (project_dir / "longform.yaml").write_text("format: single\n", encoding="utf-8")
        with pytest.raises(InvalidStructureError):
            LongformImporter().parse(project_dir)

    def test_missing_scene_file(self, project_dir):
        (project_dir / "longform.yaml").write_text("scenes: [ghost]\n", encoding="utf-8")
        with pytest.raises(SourceIOError):
            LongformImporter().parse(project_dir)

    def test_invalid_yaml(self, project_dir):
        (project_dir / "longform.yaml").write_text("scenes: [unclosed\n", encoding="utf-8")
        with pytest.raises(ParseError):
            LongformImporter().parse(project_dir)

    def test_manifest_must_be_mapping(self, project_dir):
        (project_dir / "longform.yaml").write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(InvalidStructureError):
            LongformImporter().parse(project_dir)

    def test_not_a_folder(self, tmp_dir):
        with pytest.raises(SourceIOError):
            LongformImporter().parse(tmp_dir / "missing")
