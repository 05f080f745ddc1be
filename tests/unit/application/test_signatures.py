"""Unit tests for pass signatures and the signature cache."""

from __future__ import annotations

import pytest
from runmark.application.annotator import apply_spans
from runmark.application.signatures import compute_signature, config_fingerprint
from runmark.application.text_view import TextView
from runmark.domain.value_objects import CUSTOM_OWNER, Signature, Span

pytestmark = pytest.mark.unit


class TestConfigFingerprint:
    def test_key_order_does_not_matter(self):
        assert config_fingerprint({"a": 1, "b": 2}) == config_fingerprint({"b": 2, "a": 1})

    def test_values_matter(self):
        assert config_fingerprint({"open": "<<"}) != config_fingerprint({"open": "[["})


class TestComputeSignature:
    def test_counts_tokens_and_length(self, root_with_text):
        root = root_with_text("<<a>> <<b")
        sig = compute_signature(root, config={}, tokens=("<<", ">>"))
        assert sig.length == 9
        assert sig.token_counts == (2, 1)

    def test_marker_count_tracks_owned_markers(self, root_with_text):
        root = root_with_text("abcd")
        before = compute_signature(root, config={}, owners=(CUSTOM_OWNER,))
        apply_spans(TextView.build(root), [Span(1, 3, "k")], CUSTOM_OWNER)
        after = compute_signature(root, config={}, owners=(CUSTOM_OWNER,))
        assert before.marker_count == 0
        assert after.marker_count == 1
        assert before != after

    def test_explicit_text_overrides_content(self, root_with_text):
        root = root_with_text("abcd")
        assert compute_signature(root, config={}, text="ab").length == 2


class TestSignatureCache:
    def test_skip_only_on_equal_signature(self, signature_cache):
        sig = Signature(config="c", length=3)
        assert signature_cache.should_skip("r", "custom", sig) is False
        signature_cache.record("r", "custom", sig)
        assert signature_cache.should_skip("r", "custom", sig) is True
        assert signature_cache.should_skip("r", "custom", Signature(config="c", length=4)) is False

    def test_passes_are_independent(self, signature_cache):
        sig = Signature(config="c", length=3)
        signature_cache.record("r", "custom", sig)
        assert signature_cache.last("r", "locale") is None

    def test_forget_and_evict(self, signature_cache):
        sig = Signature(config="c", length=3)
        signature_cache.record("r", "custom", sig)
        signature_cache.record("r", "locale", sig)
        signature_cache.forget("r", "custom")
        assert signature_cache.last("r", "custom") is None
        assert signature_cache.evict("r") == 1
        assert signature_cache.last("r", "locale") is None
