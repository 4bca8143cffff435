"""CLI command implementations."""

from __future__ import annotations

from .inspect import blocks, resolve
from .render import render


__all__ = ["blocks", "render", "resolve"]
