"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Provide reusable test fixtures
  - Build fragment trees from compact nested tuples
  - Configure test environment (no .env, deterministic settings)

Collaborators:
  - pytest: Test framework
  - runmark.domain: Document / Element / Fragment
  - runmark.crosscutting.config: Settings

Notes:
  - Fixtures are auto-discovered by pytest
  - Use @pytest.fixture(scope="function") for per-test isolation
"""

import sys
from pathlib import Path
from typing import Callable, Union

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from runmark.crosscutting import config as runmark_config  # noqa: E402

runmark_config.Settings.model_config["env_file"] = None

from runmark.crosscutting.config import Settings  # noqa: E402
from runmark.domain.entities import Document, Element, Node  # noqa: E402
from runmark.infrastructure.cache import InMemorySignatureStore  # noqa: E402
from runmark.infrastructure.clock import ManualFrameClock  # noqa: E402
from runmark.infrastructure.text import (  # noqa: E402
    GraphemeSegmenter,
    WordSegmenter,
)
from runmark.application.signatures import SignatureCache  # noqa: E402

TreeShape = Union[str, tuple]


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


def build_tree(document: Document, shape: TreeShape) -> Node:
    """
    Build nodes from a compact shape:
      - "text"                       -> Fragment
      - ("tag", {attrs}, [children]) -> Element
      - ("tag", [children])          -> Element without attrs
    """
    if isinstance(shape, str):
        return document.text(shape)
    if len(shape) == 2:
        tag, children = shape
        attrs: dict = {}
    else:
        tag, attrs, children = shape
    return document.element(tag, attrs, [build_tree(document, c) for c in children])


# ============================================================================
# Tree Fixtures
# ============================================================================


@pytest.fixture
def document() -> Document:
    """R: Fresh node arena per test."""
    return Document()


@pytest.fixture
def tree(document: Document) -> Callable[[TreeShape], Element]:
    """R: Factory that builds an Element tree in the shared document."""

    def _build(shape: TreeShape) -> Element:
        node = build_tree(document, shape)
        assert isinstance(node, Element)
        return node

    return _build


@pytest.fixture
def root_with_text(tree) -> Callable[..., Element]:
    """R: Factory for a div root holding one fragment per argument."""

    def _build(*texts: str) -> Element:
        return tree(("div", list(texts)))

    return _build


@pytest.fixture
def fragments_of() -> Callable[[Element], list[str]]:
    """R: Fragment texts of a root in document order."""

    def _texts(root: Element) -> list[str]:
        return [frag.text for frag in root.iter_fragments()]

    return _texts


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def grapheme_segmenter() -> GraphemeSegmenter:
    return GraphemeSegmenter()


@pytest.fixture
def word_segmenter() -> WordSegmenter:
    return WordSegmenter()


@pytest.fixture
def signature_cache() -> SignatureCache:
    return SignatureCache(InMemorySignatureStore())


@pytest.fixture
def clock() -> ManualFrameClock:
    return ManualFrameClock()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """R: Settings built from kwargs only (environment-independent defaults)."""

    def _make(**overrides) -> Settings:
        return Settings(**overrides)

    return _make
