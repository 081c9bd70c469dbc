"""Per-conversion state shared by the HTML and Markdown builders."""

from __future__ import annotations

import time
from collections.abc import Mapping

from tiptapify.config import TiptapifyConfig
from tiptapify.models import ConversionWarning
from tiptapify.observability import MetricsHook


class BuildContext:
    """Mutable accumulator for a single conversion pass.

    Holds the options that apply to the whole pass and collects the
    :class:`ConversionWarning` values the builders emit.  A fresh context is
    created for every ``convert`` call, so no state leaks between calls.
    """

    __slots__ = ("config", "fallback_to_paragraph", "image_ref_map", "warnings")

    def __init__(
        self,
        config: TiptapifyConfig,
        image_ref_map: Mapping[str, str] | None = None,
        fallback_to_paragraph: bool | None = None,
    ) -> None:
        self.config = config
        self.image_ref_map: Mapping[str, str] = image_ref_map or {}
        self.fallback_to_paragraph = (
            config.fallback_to_paragraph
            if fallback_to_paragraph is None
            else fallback_to_paragraph
        )
        self.warnings: list[ConversionWarning] = []

    @property
    def max_depth(self) -> int:
        return self.config.max_nesting_depth

    def add_warning(self, code: str, message: str, **context: object) -> None:
        self.warnings.append(ConversionWarning(
            code=code, message=message, context=dict(context),
        ))

    def resolve_image_source(self, ref: str, src: str) -> str | None:
        """Return the usable source of an image, or ``None`` to drop it.

        A ``ref`` present in the image reference map wins over ``src``.
        Empty sources and sources matching a placeholder pattern resolve to
        ``None``.
        """
        resolved = self.image_ref_map.get(ref) if ref else None
        if not resolved:
            resolved = src
        if not resolved or not resolved.strip():
            return None
        if any(pattern in resolved for pattern in self.config.image_placeholder_patterns):
            return None
        return resolved


def record_conversion_metrics(
    metrics: MetricsHook,
    ctx: BuildContext,
    source: str,
    start: float,
) -> None:
    """Emit the per-document counters and timing for one conversion.

    *start* is a :func:`time.monotonic` reading taken before the pass began.
    """
    elapsed_ms = (time.monotonic() - start) * 1000
    metrics.increment(
        "tiptapify.documents_converted_total", tags={"source": source},
    )
    metrics.timing(
        "tiptapify.conversion_duration_ms", elapsed_ms, tags={"source": source},
    )
    for warning in ctx.warnings:
        metrics.increment(
            "tiptapify.conversion_warnings_total", tags={"code": warning.code},
        )
