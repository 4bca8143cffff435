"""Custom exception hierarchy for grid block rendering."""

from __future__ import annotations


class GridRenderingError(RuntimeError):
    """Base exception for grid rendering failures."""


class TemplateLoadError(GridRenderingError):
    """Raised when a theme or the default block template cannot be loaded."""


class GridConfigError(GridRenderingError):
    """Raised when configuration or grid documents are invalid."""


class BlockNotFoundError(GridRenderingError, LookupError):
    """Raised when no template source in the chain defines a block."""

    def __init__(self, block: str, theme: object | None = None) -> None:
        self.block = block
        self.theme = theme
        super().__init__(f'Block "{block}" doesn\'t exist in grid template "{theme or ""}".')


class UnsupportedSectionError(GridRenderingError, ValueError):
    """Raised when a grid URL is requested for an unknown section."""

    def __init__(self, section: object) -> None:
        self.section = section
        super().__init__(f"Unsupported grid URL section '{section}'.")


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "BlockNotFoundError",
    "GridConfigError",
    "GridRenderingError",
    "TemplateLoadError",
    "UnsupportedSectionError",
    "exception_hint",
    "exception_messages",
]
