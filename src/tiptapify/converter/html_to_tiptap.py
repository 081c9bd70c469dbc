"""Full HTML-to-document conversion pipeline.

:class:`HtmlToTiptapConverter` runs two stages:

1. **Parse**: BeautifulSoup turns raw markup (string or bytes) into an
   element tree, repairing malformed nesting on the way.  Markup the parser
   still rejects keeps its text as one paragraph.
2. **Build**: :func:`build_blocks` walks the tree in block context and
   produces document nodes, collecting :class:`ConversionWarning` values.

The result is a :class:`ConversionResult` whose ``document`` is always a
well-formed ``doc`` node.  Conversion never raises for bad markup.
"""

from __future__ import annotations

import json
import sys
import time
from collections.abc import Mapping

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.block_builder import build_markup
from tiptapify.converter.context import BuildContext, record_conversion_metrics
from tiptapify.converter.nodes import DOC, empty_paragraph
from tiptapify.models import ConversionResult
from tiptapify.observability import resolve_metrics


class HtmlToTiptapConverter:
    """Convert HTML markup to a TipTap / ProseMirror JSON document.

    Parameters
    ----------
    config:
        Conversion settings.  Defaults to ``TiptapifyConfig()``.

    Examples
    --------
    >>> converter = HtmlToTiptapConverter()
    >>> result = converter.convert("<h2>Hi</h2><p><b>there</b></p>")
    >>> [node["type"] for node in result.document["content"]]
    ['heading', 'paragraph']
    >>> result.document["content"][1]["content"][0]["marks"]
    [{'type': 'bold'}]
    """

    def __init__(self, config: TiptapifyConfig | None = None) -> None:
        self._config = config if config is not None else TiptapifyConfig()
        self._metrics = resolve_metrics(self._config.metrics)

    @property
    def config(self) -> TiptapifyConfig:
        return self._config

    def convert(
        self,
        markup: str | bytes | None,
        image_ref_map: Mapping[str, str] | None = None,
        *,
        fallback_to_paragraph: bool | None = None,
    ) -> ConversionResult:
        """Parse *markup* and build the document.

        Parameters
        ----------
        markup:
            HTML fragment or full document.  ``None`` and empty input give
            the fallback document.
        image_ref_map:
            Maps an ``<img ref="...">`` value to the URL of an uploaded
            attachment.
        fallback_to_paragraph:
            Per-call override of :attr:`TiptapifyConfig.fallback_to_paragraph`.

        Returns
        -------
        ConversionResult
            The ``doc`` node and any warnings.
        """
        start = time.monotonic()
        ctx = BuildContext(self._config, image_ref_map, fallback_to_paragraph)

        content = build_markup(markup, ctx) if markup else []

        document = {"type": DOC, "content": content or [empty_paragraph()]}

        if self._config.debug_dump_document:
            print(
                "[tiptapify] Converted document:",
                json.dumps(document, indent=2, ensure_ascii=False),
                file=sys.stderr,
            )

        record_conversion_metrics(self._metrics, ctx, "html", start)
        return ConversionResult(document=document, warnings=ctx.warnings)


def html_to_tiptap(
    markup: str | bytes | None,
    image_ref_map: Mapping[str, str] | None = None,
    *,
    fallback_to_paragraph: bool = True,
) -> dict:
    """Convert *markup* to a document and return only the ``doc`` node.

    Shorthand for ``HtmlToTiptapConverter().convert(...).document``.
    """
    converter = HtmlToTiptapConverter()
    return converter.convert(
        markup, image_ref_map, fallback_to_paragraph=fallback_to_paragraph,
    ).document
