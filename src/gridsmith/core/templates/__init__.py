"""Template sources consulted when resolving grid blocks."""

from __future__ import annotations

from .sources import DEFAULT_TEMPLATE, RenderTarget, TemplateStore, ThemeReference


__all__ = [
    "DEFAULT_TEMPLATE",
    "RenderTarget",
    "TemplateStore",
    "ThemeReference",
]
