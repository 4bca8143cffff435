"""Template sources able to answer block lookups and render single blocks."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, Literal

from jinja2 import Environment, Template, TemplateNotFound, TemplateSyntaxError, nodes

from ..exceptions import TemplateLoadError


logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "gridsmith/blocks.html.j2"


@dataclass(frozen=True, slots=True)
class ThemeReference:
    """A theme given either by template name or as an already loaded template."""

    kind: Literal["reference", "preloaded"]
    name: str | None = None
    template: Template | RenderTarget | None = None

    @classmethod
    def by_reference(cls, name: str | Path) -> ThemeReference:
        return cls(kind="reference", name=Path(name).as_posix() if isinstance(name, Path) else name)

    @classmethod
    def preloaded(cls, template: Template | RenderTarget) -> ThemeReference:
        return cls(kind="preloaded", template=template)

    @classmethod
    def coerce(cls, value: Any) -> ThemeReference | None:
        """Normalise a user supplied theme (name, path, template or reference)."""
        if value is None or value == "":
            return None
        if isinstance(value, ThemeReference):
            return value
        if isinstance(value, (Template, RenderTarget)):
            return cls.preloaded(value)
        if isinstance(value, (str, Path)):
            return cls.by_reference(value)
        raise TypeError(f"Unsupported theme value of type '{type(value).__name__}'.")

    @property
    def label(self) -> str:
        """Return a human readable identifier used in error messages."""
        if self.kind == "reference":
            return str(self.name)
        template_name = getattr(self.template, "name", None)
        return template_name or "<preloaded template>"

    def __str__(self) -> str:
        return self.label


class RenderTarget:
    """Loaded template whose blocks can be queried and rendered individually.

    Blocks inherited through ``{% extends %}`` are visible as well, as long as
    the parent is referenced by a constant name and the template was loaded
    through the environment loader.
    """

    def __init__(self, template: Template, environment: Environment | None = None) -> None:
        self.template = template
        self.environment = environment or template.environment
        self._parents: list[Template] | None = None

    @property
    def name(self) -> str | None:
        return self.template.name

    def __repr__(self) -> str:
        return f"RenderTarget({self.name!r})"

    def _parent_name(self, template: Template) -> str | None:
        if template.name is None or self.environment.loader is None:
            return None
        try:
            source, filename, _ = self.environment.loader.get_source(self.environment, template.name)
        except TemplateNotFound:
            return None
        tree = self.environment.parse(source, template.name, filename)
        extends = tree.find(nodes.Extends)
        if extends is not None and isinstance(extends.template, nodes.Const):
            return str(extends.template.value)
        return None

    @property
    def parents(self) -> list[Template]:
        """Return the ``{% extends %}`` chain, nearest parent first."""
        if self._parents is None:
            chain: list[Template] = []
            seen = {self.template.name}
            current = self.template
            while (parent_name := self._parent_name(current)) is not None:
                if parent_name in seen:
                    break
                seen.add(parent_name)
                try:
                    current = self.environment.get_template(parent_name)
                except TemplateNotFound as exc:
                    raise TemplateLoadError(
                        f"Parent template '{parent_name}' of '{self.name}' cannot be loaded."
                    ) from exc
                chain.append(current)
            self._parents = chain
        return self._parents

    @property
    def block_names(self) -> list[str]:
        """Return every block name defined by the template or its parents."""
        names = list(self.template.blocks)
        for parent in self.parents:
            names.extend(name for name in parent.blocks if name not in names)
        return names

    def has_block(self, name: str) -> bool:
        if name in self.template.blocks:
            return True
        return any(name in parent.blocks for parent in self.parents)

    def render_block(self, name: str, parameters: Mapping[str, Any]) -> str:
        """Render block ``name`` with ``parameters`` as the template context."""
        context = self.template.new_context(dict(parameters))
        for parent in self.parents:
            for block_name, block in parent.blocks.items():
                context.blocks.setdefault(block_name, []).append(block)
        try:
            block = context.blocks[name][0]
        except (KeyError, IndexError):
            raise KeyError(name) from None
        try:
            return self.environment.concat(block(context))  # type: ignore[attr-defined]
        except Exception:
            self.environment.handle_exception()
            raise


class TemplateStore:
    """Load render targets from a Jinja environment and cache them by name."""

    def __init__(self, environment: Environment) -> None:
        self.environment = environment
        self._cache: dict[str, RenderTarget] = {}

    def load(self, reference: Any) -> RenderTarget:
        """Return a render target for ``reference`` (name, path, template or theme)."""
        if isinstance(reference, RenderTarget):
            return reference
        if isinstance(reference, Template):
            return RenderTarget(reference, self.environment)
        if isinstance(reference, ThemeReference):
            if reference.kind == "preloaded":
                return self.load(reference.template)
            reference = reference.name
        if isinstance(reference, Path):
            reference = reference.as_posix()
        if not isinstance(reference, str) or not reference:
            raise TemplateLoadError(f"Cannot load grid template from {reference!r}.")

        cached = self._cache.get(reference)
        if cached is not None:
            return cached
        try:
            template = self.environment.get_template(reference)
        except TemplateNotFound as exc:
            raise TemplateLoadError(f"Grid template '{reference}' cannot be found.") from exc
        except TemplateSyntaxError as exc:
            raise TemplateLoadError(
                f"Grid template '{reference}' is invalid (line {exc.lineno}): {exc.message}"
            ) from exc
        logger.debug("Loaded grid template '%s'", reference)
        target = RenderTarget(template, self.environment)
        self._cache[reference] = target
        return target


__all__ = ["DEFAULT_TEMPLATE", "RenderTarget", "TemplateStore", "ThemeReference"]
