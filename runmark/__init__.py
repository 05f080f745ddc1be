"""
runmark: incremental span annotation over a mutating fragment tree.

Passes (delimiter pairs, quotations, per-script runs, typewriter units) tag
sub-ranges of streaming text without corrupting it, re-run idempotently, and
mark newly-arrived units for staggered animation.

Usage
-----
    from runmark import AnnotationEngine, Document

    doc = Document()
    root = doc.element("div", children=[doc.text("Hello <<world>>")])
    engine = AnnotationEngine(doc)
    engine.register_root("message-1", root)
    engine.run_until_idle()
"""

from .container import AnnotationEngine, RootReport, build_engine
from .crosscutting.config import Settings, get_settings
from .crosscutting.exceptions import (
    ConfigurationError,
    PresentationError,
    RunmarkError,
    TreeStructureError,
)
from .domain.entities import Document, Element, Fragment
from .domain.value_objects import LifecycleEvent, LifecycleEventType

__version__ = "0.1.0"

__all__ = [
    "AnnotationEngine",
    "RootReport",
    "build_engine",
    "Settings",
    "get_settings",
    "Document",
    "Element",
    "Fragment",
    "LifecycleEvent",
    "LifecycleEventType",
    "RunmarkError",
    "TreeStructureError",
    "ConfigurationError",
    "PresentationError",
]
