"""Shared test fixtures for the tiptapify test suite."""

from __future__ import annotations

import pytest

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.html_to_tiptap import HtmlToTiptapConverter
from tiptapify.converter.md_to_tiptap import MarkdownToTiptapConverter
from tiptapify.converter.tiptap_to_md import TiptapToMarkdownRenderer
from tiptapify.exporter import MarkdownExporter


@pytest.fixture
def config() -> TiptapifyConfig:
    """Default test configuration."""
    return TiptapifyConfig()


@pytest.fixture
def converter(config: TiptapifyConfig) -> HtmlToTiptapConverter:
    """HTML-to-document converter using the default test config."""
    return HtmlToTiptapConverter(config)


@pytest.fixture
def md_converter(config: TiptapifyConfig) -> MarkdownToTiptapConverter:
    """Markdown-to-document converter using the default test config."""
    return MarkdownToTiptapConverter(config)


@pytest.fixture
def renderer(config: TiptapifyConfig) -> TiptapToMarkdownRenderer:
    """Document-to-Markdown renderer using the default test config."""
    return TiptapToMarkdownRenderer(config)


@pytest.fixture
def exporter(config: TiptapifyConfig) -> MarkdownExporter:
    """Markdown exporter using the default test config."""
    return MarkdownExporter(config)
