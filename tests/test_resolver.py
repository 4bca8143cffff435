from __future__ import annotations

import pytest
from jinja2 import DictLoader, Environment

from gridsmith.adapters.jinja import configure_environment
from gridsmith.core.config import GridConfig, PagerConfig
from gridsmith.core.diagnostics import RecordingEmitter
from gridsmith.core.exceptions import BlockNotFoundError, TemplateLoadError
from gridsmith.core.grid import Column, Grid, Row
from gridsmith.core.resolver import RESOLVER_CONTEXT_KEY, BlockResolver
from gridsmith.core.templates import ThemeReference


BASE = (
    "{% block grid_column_cell %}default:{{ value }}{% endblock %}"
    "{% block grid_column_operator %}{{ op }}:{{ submitOnChange }}{% endblock %}"
    "{% block grid_pager %}{{ pagerfanta }}{% endblock %}"
    "{% block grid_titles %}titles:{{ grid.hash }}{% endblock %}"
    "{% block grid_search %}search:{{ grid.hash }}{% endblock %}"
    "{% block grid %}grid:{{ withjs }}{% endblock %}"
    "{% block grid_params %}{{ op }}|{{ withjs }}|{{ extra }}{% endblock %}"
)


def _environment(**templates: str) -> Environment:
    sources = {"base.html": BASE}
    sources.update({name.replace("_", ".", 1): body for name, body in templates.items()})
    environment = Environment(loader=DictLoader(sources))
    return configure_environment(environment, GridConfig(default_template="base.html"))


def _resolver(environment: Environment, **kwargs) -> BlockResolver:
    kwargs.setdefault("default_template", "base.html")
    return BlockResolver(environment, **kwargs)


def _date_column() -> Column:
    return Column(id="c3", type="date", parent_type="text")


def test_generic_type_block_from_theme_wins_without_instance_id() -> None:
    environment = _environment(
        theme_html="{% block grid_column_type_date_cell %}date:{{ value }}{% endblock %}"
    )
    resolver = _resolver(environment)
    grid = Grid(hash="g1")
    column = _date_column()
    resolver.init_grid(grid, "theme.html", "")

    assert resolver.resolve_cell_block(grid, column) == "grid_column_type_date_cell"
    assert resolver.render_cell(column, Row({"c3": "2024-05-01"}), grid) == "date:2024-05-01"


def test_instance_id_without_scoped_blocks_falls_through_to_generic_group() -> None:
    environment = _environment(
        theme_html="{% block grid_column_type_date_cell %}date:{{ value }}{% endblock %}"
    )
    resolver = _resolver(environment)
    grid = Grid(hash="g1")
    resolver.init_grid(grid, "theme.html", "orders")

    assert resolver.instance_id(grid) == "orders"
    assert resolver.resolve_cell_block(grid, _date_column()) == "grid_column_type_date_cell"


def test_instance_scoped_block_beats_more_specific_generic_block() -> None:
    environment = _environment(
        theme_html=(
            "{% block grid_column_c3_cell %}generic{% endblock %}"
            "{% block grid_orders_column_type_text_cell %}scoped{% endblock %}"
        )
    )
    resolver = _resolver(environment)
    grid = Grid(hash="g1")
    resolver.init_grid(grid, "theme.html", "orders")

    assert resolver.resolve_cell_block(grid, _date_column()) == "grid_orders_column_type_text_cell"
    assert resolver.render_cell(_date_column(), Row({}), grid) == "scoped"


def test_empty_instance_id_never_checks_scoped_names(monkeypatch: pytest.MonkeyPatch) -> None:
    environment = _environment()
    resolver = _resolver(environment)
    grid = Grid(hash="g1")
    resolver.init_grid(grid)
    checked: list[str] = []
    original = resolver.has_block

    def _spy(name: str) -> bool:
        checked.append(name)
        return original(name)

    monkeypatch.setattr(resolver, "has_block", _spy)
    resolver.resolve_cell_block(grid, _date_column())
    resolver.resolve_filter_block(grid, _date_column())

    assert checked
    assert all(name.startswith("grid_column_") for name in checked)


def test_instance_id_defaults_to_grid_id() -> None:
    resolver = _resolver(_environment())
    grid = Grid(id="users")
    resolver.init_grid(grid)

    assert resolver.names[grid.hash] == "users"


def test_unregistered_grid_uses_its_own_id() -> None:
    resolver = _resolver(_environment())
    grid = Grid(id="users")

    assert resolver.instance_id(grid) == "users"


def test_cell_falls_back_to_default_block() -> None:
    emitter = RecordingEmitter()
    resolver = _resolver(_environment(), emitter=emitter)
    grid = Grid(hash="g1")
    column = Column(id="name")

    assert resolver.render_cell(column, Row({"name": "Ada"}), grid) == "default:Ada"
    assert emitter.named("block_fallback") == [{"category": "cell", "block": "grid_column_cell"}]


def test_cell_value_is_mapped_through_column_values() -> None:
    resolver = _resolver(_environment())
    column = Column(id="active", type="boolean", values={"true": "Yes", "false": "No"})

    assert resolver.render_cell(column, Row({"active": True}), Grid()) == "default:Yes"


def test_unresolved_filter_renders_empty_string() -> None:
    resolver = _resolver(_environment())

    assert resolver.render_filter(_date_column(), Grid()) == ""


def test_filter_block_receives_combined_submit_flag() -> None:
    environment = _environment(
        theme_html="{% block grid_column_filter_type_select %}{{ submitOnChange }}{% endblock %}"
    )
    resolver = _resolver(environment)
    grid = Grid(hash="g1")
    resolver.init_grid(grid, "theme.html")
    column = Column(id="state", filter_type="select", filter_submit_on_change=False)

    assert resolver.render_filter(column, grid) == "False"
    assert resolver.render_filter(Column(id="state", filter_type="select"), grid) == "True"
    assert resolver.render_filter(Column(id="state", filter_type="select"), grid, False) == "False"


def test_column_operator_always_uses_fixed_block() -> None:
    resolver = _resolver(_environment())

    assert resolver.render_column_operator(Column(id="x"), Grid(), "like", False) == "like:False"


def test_pager_exposes_pagination_flag() -> None:
    resolver = _resolver(_environment(), pager=PagerConfig(enable=True))

    assert resolver.render_pager(Grid()) == "True"


def test_grid_block_renders_prefixed_block() -> None:
    resolver = _resolver(_environment())

    assert resolver.render_grid_block("titles", Grid(hash="g9")) == "titles:g9"


def test_render_grid_records_theme_and_withjs() -> None:
    environment = _environment(theme_html="")
    resolver = _resolver(environment)
    grid = Grid(hash="g1")

    assert resolver.render_grid(grid, "theme.html") == "grid:True"
    assert grid.template == "theme.html"
    assert resolver.render_grid_html(grid) == "grid:False"


def test_render_search_registers_grid() -> None:
    resolver = _resolver(_environment())
    grid = Grid(hash="g2")

    assert resolver.render_search(grid, None, "finder") == "search:g2"
    assert resolver.names["g2"] == "finder"


def test_parameters_merge_globals_call_then_persisted() -> None:
    resolver = _resolver(_environment())
    grid = Grid(hash="g1")

    assert resolver.render_block("grid_params") == "eq|True|"
    assert resolver.render_block("grid_params", {"op": "like", "extra": "call"}) == "like|True|call"

    resolver.init_grid(grid, params={"extra": "persisted", "withjs": False})
    assert resolver.render_block("grid_params", {"extra": "call"}) == "eq|False|persisted"


def test_render_block_injects_resolver_into_context() -> None:
    environment = _environment(
        theme_html="{% block grid_marker %}{{ _grid_resolver is defined }}{% endblock %}"
    )
    resolver = _resolver(environment)
    resolver.set_theme("theme.html")

    assert RESOLVER_CONTEXT_KEY == "_grid_resolver"
    assert resolver.render_block("grid_marker") == "True"


def test_missing_block_reports_block_and_theme() -> None:
    resolver = _resolver(_environment(theme_html=""))
    resolver.init_grid(Grid(), "theme.html")

    with pytest.raises(BlockNotFoundError) as excinfo:
        resolver.render_block("grid_unknown", {})

    assert excinfo.value.block == "grid_unknown"
    assert excinfo.value.theme == "theme.html"
    assert str(excinfo.value) == 'Block "grid_unknown" doesn\'t exist in grid template "theme.html".'


def test_source_chain_is_cached_and_reset_by_init_grid() -> None:
    environment = _environment(
        first_html="{% block grid_a %}a{% endblock %}",
        second_html="{% block grid_b %}b{% endblock %}",
    )
    resolver = _resolver(environment)
    grid = Grid(hash="g1")
    resolver.init_grid(grid, "first.html")

    sources = resolver.resolve_sources()
    assert resolver.resolve_sources() is sources
    assert [source.name for source in sources] == ["first.html", "base.html"]

    resolver.init_grid(grid, "second.html")
    assert [source.name for source in resolver.resolve_sources()] == ["second.html", "base.html"]
    assert resolver.has_block("grid_b")
    assert not resolver.has_block("grid_a")


def test_without_theme_only_default_template_is_used() -> None:
    resolver = _resolver(_environment())

    assert [source.name for source in resolver.resolve_sources()] == ["base.html"]


def test_missing_theme_raises_load_error() -> None:
    resolver = _resolver(_environment())
    resolver.init_grid(Grid(), "missing.html")

    with pytest.raises(TemplateLoadError):
        resolver.has_block("grid")


def test_missing_default_template_raises_load_error() -> None:
    resolver = BlockResolver(_environment(), default_template="nowhere.html")

    with pytest.raises(TemplateLoadError):
        resolver.resolve_sources()


def test_preloaded_theme_is_used_as_is() -> None:
    environment = _environment()
    theme = environment.from_string("{% block grid_column_cell %}inline:{{ value }}{% endblock %}")
    resolver = _resolver(environment)
    grid = Grid(hash="g1")
    resolver.init_grid(grid, theme)

    assert resolver.theme == ThemeReference.preloaded(theme)
    assert resolver.render_cell(Column(id="x"), Row({"x": 1}), grid) == "inline:1"


def test_theme_extending_default_sees_and_wraps_parent_blocks() -> None:
    environment = _environment(
        child_html=(
            '{% extends "base.html" %}'
            "{% block grid_column_cell %}[{{ super() }}]{% endblock %}"
        )
    )
    resolver = _resolver(environment)
    grid = Grid(hash="g1")
    resolver.init_grid(grid, "child.html")

    child = resolver.resolve_sources()[0]
    assert child.has_block("grid_titles")
    assert "grid_titles" in child.block_names
    assert resolver.render_cell(Column(id="x"), Row({"x": "v"}), grid) == "[default:v]"


def test_resolution_events_list_tried_candidates() -> None:
    emitter = RecordingEmitter()
    environment = _environment(
        theme_html="{% block grid_column_date_cell %}d{% endblock %}"
    )
    resolver = _resolver(environment, emitter=emitter)
    grid = Grid(hash="g1")
    resolver.init_grid(grid, "theme.html")
    resolver.resolve_cell_block(grid, _date_column())

    (event,) = emitter.named("block_resolved")
    assert event["block"] == "grid_column_date_cell"
    assert event["tried"] == ["grid_column_c3_cell", "grid_column_date_cell"]
    assert emitter.named("sources_loaded") == [{"sources": ["theme.html", "base.html"]}]


def test_grid_url_and_pagination_share_the_url_builder() -> None:
    resolver = _resolver(_environment())
    grid = Grid(id="users", route_url="/users", total_count=45, page=1)

    assert resolver.grid_url("page", grid, 2) == "/users?grid_users[_page]=2"
    html = resolver.render_pagination(grid)
    assert '<span class="current">2</span>' in html
    assert '<a class="prev" href="/users?grid_users[_page]=0">' in html
    assert '<a class="next" href="/users?grid_users[_page]=2">' in html


def test_unnamed_theme_warns_that_inherited_blocks_are_hidden() -> None:
    emitter = RecordingEmitter()
    environment = _environment()
    resolver = _resolver(environment, emitter=emitter)
    resolver.set_theme(environment.from_string("{% block grid_column_cell %}x{% endblock %}"))

    resolver.resolve_sources()

    assert len(emitter.warnings) == 1
    assert "no template name" in emitter.warnings[0]


def test_theme_without_grid_blocks_warns() -> None:
    emitter = RecordingEmitter()
    resolver = _resolver(
        _environment(theme_html="{% block content %}{% endblock %}"), emitter=emitter
    )
    resolver.set_theme("theme.html")

    resolver.resolve_sources()
    resolver.resolve_sources()

    assert emitter.warnings == [
        "Grid theme 'theme.html' defines no grid blocks."
    ]


def test_theme_with_grid_blocks_loads_silently() -> None:
    emitter = RecordingEmitter()
    resolver = _resolver(
        _environment(theme_html="{% block grid_column_cell %}x{% endblock %}"), emitter=emitter
    )
    resolver.set_theme("theme.html")

    resolver.resolve_sources()

    assert emitter.warnings == []
