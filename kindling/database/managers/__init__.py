"""
Entity Managers
---------------

Session-bound managers for the Kindling store.

- BaseManager: shared session utilities
- BundleManager: whole-project inserts, reads and clears
- ProjectManager: project, chapter, scene and beat access
"""
from .base_manager import BaseManager, insertion_order
from .bundle_manager import BundleManager
from .project_manager import ProjectManager

__all__ = ["BaseManager", "BundleManager", "ProjectManager", "insertion_order"]
