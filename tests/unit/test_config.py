"""Tests for TiptapifyConfig defaults and validation."""

from __future__ import annotations

import pytest

from tiptapify.config import DEFAULT_PLACEHOLDER_PATTERNS, TiptapifyConfig


class TestDefaults:
    def test_defaults(self):
        config = TiptapifyConfig()
        assert config.fallback_to_paragraph is True
        assert config.max_nesting_depth == 64
        assert config.image_placeholder_patterns == ["transparent.gif"]
        assert config.default_title == "Untitled"
        assert config.unsupported_node_policy == "skip"
        assert config.filename_max_length == 200
        assert config.metrics is None
        assert config.debug_dump_document is False

    def test_placeholder_list_not_shared(self):
        first = TiptapifyConfig()
        first.image_placeholder_patterns.append("spacer.gif")
        assert TiptapifyConfig().image_placeholder_patterns == ["transparent.gif"]
        assert DEFAULT_PLACEHOLDER_PATTERNS == ["transparent.gif"]


class TestValidation:
    @pytest.mark.parametrize("depth", [0, -1])
    def test_max_nesting_depth(self, depth):
        with pytest.raises(ValueError, match="max_nesting_depth"):
            TiptapifyConfig(max_nesting_depth=depth)

    def test_filename_max_length(self):
        with pytest.raises(ValueError, match="filename_max_length"):
            TiptapifyConfig(filename_max_length=0)

    def test_unsupported_node_policy(self):
        with pytest.raises(ValueError, match="unsupported_node_policy"):
            TiptapifyConfig(unsupported_node_policy="raise")

    def test_empty_placeholder_pattern(self):
        with pytest.raises(ValueError, match="image_placeholder_patterns"):
            TiptapifyConfig(image_placeholder_patterns=["ok", ""])

    def test_no_placeholder_patterns_allowed(self):
        assert TiptapifyConfig(image_placeholder_patterns=[]).image_placeholder_patterns == []
