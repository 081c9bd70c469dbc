"""Library configuration for tiptapify.

:class:`TiptapifyConfig` is a plain dataclass that captures every tuneable
knob of the importers and the exporter.  Instances are passed to
:class:`HtmlToTiptapConverter`, :class:`MarkdownToTiptapConverter`,
:class:`TiptapToMarkdownRenderer` and :class:`SynologyImporter`.

The module-level constant :data:`DEFAULT_PLACEHOLDER_PATTERNS` lists the
image sources that foreign exports use as invisible stand-ins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

# ---------------------------------------------------------------------------
# Placeholder constants
# ---------------------------------------------------------------------------

DEFAULT_PLACEHOLDER_PATTERNS: list[str] = [
    "transparent.gif",
]
"""Substrings that mark an ``<img>`` source as a placeholder.  Synology
NoteStation writes ``transparent.gif`` for images it stores by reference."""


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class TiptapifyConfig:
    """Complete configuration for the tiptapify converters.

    Every parameter has a sensible default, so ``TiptapifyConfig()`` is a
    valid configuration.

    Parameters
    ----------
    fallback_to_paragraph:
        How the HTML importer treats tags it does not recognise.

        * ``True``: the element is transparent; its converted children are
          spliced into the surrounding sequence.
        * ``False``: the element and its whole subtree are dropped.
    max_nesting_depth:
        Element depth beyond which the HTML importer stops descending and
        flattens the remaining subtree to plain text.  Guards against
        recursion exhaustion on adversarial markup.
    image_placeholder_patterns:
        Image sources containing any of these substrings are treated as
        placeholders and omitted.
    unsupported_node_policy:
        How the Markdown exporter handles node types outside the minimal
        paragraph / heading / bullet list set.

        * ``"skip"``: silently omit (a warning is still recorded).
        * ``"text"``: emit the node's plain text as a paragraph.
    filename_max_length:
        Maximum length of a sanitized export filename (without extension).
    default_title:
        Title used when an imported note has none.
    metrics:
        Optional :class:`~tiptapify.observability.MetricsHook` backend.
    debug_dump_document:
        Write every converted document as JSON to *stderr*.
    """

    # ── Import ──────────────────────────────────────────────────────────
    fallback_to_paragraph: bool = True

    max_nesting_depth: int = 64

    image_placeholder_patterns: list[str] = field(
        default_factory=lambda: list(DEFAULT_PLACEHOLDER_PATTERNS),
    )

    default_title: str = "Untitled"

    # ── Export ──────────────────────────────────────────────────────────
    unsupported_node_policy: Literal["skip", "text"] = "skip"

    filename_max_length: int = 200

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_document: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_nesting_depth < 1:
            raise ValueError(f"max_nesting_depth must be >= 1, got {self.max_nesting_depth}")
        if self.filename_max_length < 1:
            raise ValueError(
                f"filename_max_length must be >= 1, got {self.filename_max_length}"
            )
        if self.unsupported_node_policy not in ("skip", "text"):
            raise ValueError(
                "unsupported_node_policy must be 'skip' or 'text', "
                f"got {self.unsupported_node_policy!r}"
            )
        if any(not pattern for pattern in self.image_placeholder_patterns):
            raise ValueError("image_placeholder_patterns must not contain empty strings")
