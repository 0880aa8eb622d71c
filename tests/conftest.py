"""
conftest.py
-----------
Shared pytest fixtures for Kindling tests.

Provides fixtures for:
- Database setup and teardown
- Sample canonical bundles
- Snapshot and export managers wired to temporary directories
"""
import pytest
from pathlib import Path
from tempfile import TemporaryDirectory

from kindling.dataclasses import (
    BeatData,
    ChapterData,
    CharacterData,
    LocationData,
    ParsedBundle,
    ProjectData,
    ReferenceItemData,
    SceneCharacterRef,
    SceneData,
    SceneLocationRef,
    SceneReferenceItemRef,
)


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ----- Sample Bundle Factories -----

def create_sample_bundle(name: str = "The Long Night") -> ParsedBundle:
    """
    Two chapters, three scenes, prose-bearing beats and one of each
    reference kind, all joined to the first scene.

    Prose word counts (stripped): 3 + 5 + 3 = 11.
    """
    project = ProjectData(
        name=name,
        source_type="markdown",
        author_pen_name="Jane Doe",
        genre="Thriller",
        description="A night that does not end.",
        word_target=90000,
        reference_types=["characters", "locations", "item"],
    )
    bundle = ParsedBundle(project=project)

    first = ChapterData(project_id=project.id, title="Arrival", position=0, source_id="c1")
    second = ChapterData(project_id=project.id, title="Departure", position=1, source_id="c2")
    bundle.chapters = [first, second]

    gate = SceneData(
        chapter_id=first.id,
        title="At the Gate",
        position=0,
        synopsis="Mara reaches the gate.",
        source_id="s1",
    )
    hall = SceneData(chapter_id=first.id, title="The Hall", position=1, source_id="s2")
    road = SceneData(chapter_id=second.id, title="The Road", position=0, source_id="s3")
    bundle.scenes = [gate, hall, road]

    bundle.beats = [
        BeatData(
            scene_id=gate.id,
            content="Mara knocks",
            position=0,
            prose="<p>She knocked <em>twice</em>.</p>",
            source_id="b1",
        ),
        BeatData(
            scene_id=hall.id,
            content="The hall is empty",
            position=0,
            prose="<p>Nobody was home that night.</p>",
            source_id="b2",
        ),
        BeatData(
            scene_id=road.id,
            content="She leaves",
            position=0,
            prose="<p>Mara walked away.</p>",
            source_id="b3",
        ),
    ]

    mara = CharacterData(
        project_id=project.id,
        name="Mara",
        description="A courier.",
        attributes={"role": "Protagonist", "age": "32"},
        source_id="ch1",
    )
    castle = LocationData(project_id=project.id, name="Castle", source_id="l1")
    key = ReferenceItemData(
        project_id=project.id, reference_type="item", name="Iron Key", source_id="i1"
    )
    bundle.characters = [mara]
    bundle.locations = [castle]
    bundle.reference_items = [key]

    bundle.scene_character_refs = [SceneCharacterRef(scene_id=gate.id, character_id=mara.id)]
    bundle.scene_location_refs = [SceneLocationRef(scene_id=gate.id, location_id=castle.id)]
    bundle.scene_reference_item_refs = [
        SceneReferenceItemRef(scene_id=gate.id, reference_item_id=key.id)
    ]
    return bundle


@pytest.fixture
def sample_bundle():
    """Fresh sample bundle (new identifiers on every call)."""
    return create_sample_bundle()


@pytest.fixture
def bundle_factory():
    """Factory for additional sample bundles inside one test."""
    return create_sample_bundle


# ----- Database Fixtures -----

@pytest.fixture
def test_db_path(tmp_dir):
    """Path for the test database file."""
    return tmp_dir / "test.db"


@pytest.fixture
def test_db(test_db_path):
    """
    Create a test database with the full schema.

    Returns a KindlingDB instance; the engine is disposed afterwards.
    """
    from kindling.database.manager import KindlingDB

    db = KindlingDB(db_path=test_db_path)
    yield db
    db.close()


@pytest.fixture
def db_session(test_db):
    """
    Database session for tests.

    Managers are available as test_db.projects / test_db.bundles while
    the fixture is active.
    """
    with test_db.session_scope() as session:
        yield session


@pytest.fixture
def inserted_bundle(test_db, sample_bundle):
    """Sample bundle inserted in its own committed transaction."""
    with test_db.session_scope():
        test_db.bundles.insert_bundle(sample_bundle)
    return sample_bundle


# ----- Manager Fixtures -----

@pytest.fixture
def snapshot_dir(tmp_dir):
    return tmp_dir / "snapshots"


@pytest.fixture
def snapshot_manager(test_db, snapshot_dir):
    """SnapshotManager writing archives under the temporary directory."""
    from kindling.database.snapshot_manager import SnapshotManager

    return SnapshotManager(test_db, snapshot_dir=snapshot_dir)


@pytest.fixture
def export_manager(test_db, snapshot_manager, app_settings):
    """ExportManager with sample author settings and the temporary snapshot manager."""
    from kindling.database.export_manager import ExportManager

    return ExportManager(test_db, snapshots=snapshot_manager, settings=app_settings)


# ----- Export Content Fixtures -----

def build_content(bundle: ParsedBundle, scope: str = "project"):
    """
    ManuscriptContent tree for a bundle, as the export manager would
    assemble it (every chapter and scene, numbered from 1).
    """
    from kindling.builders import ChapterContent, ExportScope, ManuscriptContent, SceneContent
    from kindling.utils.smart_text import count_words

    chapters = []
    for chapter_number, chapter in enumerate(bundle.chapters, 1):
        scenes = [s for s in bundle.scenes if s.chapter_id == chapter.id]
        chapters.append(
            ChapterContent(
                chapter=chapter,
                number=chapter_number,
                scenes=[
                    SceneContent(
                        scene=scene,
                        beats=[b for b in bundle.beats if b.scene_id == scene.id],
                        number=scene_number,
                    )
                    for scene_number, scene in enumerate(scenes, 1)
                ],
            )
        )
    return ManuscriptContent(
        project=bundle.project,
        chapters=chapters,
        scope=ExportScope(scope),
        word_count=sum(count_words(b.prose) for b in bundle.beats),
    )


@pytest.fixture
def manuscript_content(sample_bundle):
    """Project-scope content tree of the sample bundle."""
    return build_content(sample_bundle)


@pytest.fixture
def app_settings():
    from kindling.core.settings import AppSettings

    return AppSettings(
        author_name="Jane Q. Doe",
        contact_address_line1="1 Main Street",
        contact_email="jane@example.com",
    )


@pytest.fixture
def content_builder():
    """Factory turning a bundle into a content tree."""
    return build_content
