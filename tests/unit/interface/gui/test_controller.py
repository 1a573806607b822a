from __future__ import annotations

"""
Unit tests for the GUI Application Controller.

Views are MagicMocks and app.after() runs callbacks immediately, so the
whole refresh/select/filter round-trip is driven synchronously without a
display. Worker threads are replaced by direct calls.
"""

from typing import Any, Callable, Tuple
from unittest.mock import MagicMock, patch

import pytest

from hierfilter.domain.config import FilterConfig
from hierfilter.domain.constants import DEMO_FILTER_CONFIG
from hierfilter.domain.errors import HostError
from hierfilter.domain.session_models import STALE
from hierfilter.domain.tree_models import CheckState
from hierfilter.infra.hosts.memory import MemoryHost
from hierfilter.interface.gui.controllers.main_controller import (
    FRAME_LOGS,
    FRAME_SETTINGS,
    FRAME_TREE,
    AppController,
)

CONTROLLER = "hierfilter.interface.gui.controllers.main_controller"


def _run_inline(target: Callable[..., None], args: Tuple[Any, ...]) -> None:
    target(*args)


@pytest.fixture
def host() -> MemoryHost:
    return MemoryHost.demo()


@pytest.fixture
def controller(host: MemoryHost):
    app = MagicMock()
    app.after.side_effect = lambda _ms, fn: fn()

    ctrl = AppController(app, host, FilterConfig.from_dict(DEMO_FILTER_CONFIG), {}, demo_mode=True)
    ctrl.register_views(MagicMock(), MagicMock(), MagicMock(), MagicMock())

    with patch.object(AppController, "_start_worker", staticmethod(_run_inline)), \
            patch(f"{CONTROLLER}.mb") as mock_mb, \
            patch(f"{CONTROLLER}.cfg.save_app_state") as mock_save:
        ctrl.mock_mb = mock_mb
        ctrl.mock_save = mock_save
        yield ctrl


def _rendered_ids(ctrl: AppController):
    rows = ctrl.tree_view.render_rows.call_args[0][0]
    return [(node.id, depth) for node, depth, _open, _state in rows]

# -----------------------------------------------------------------------------
# REFRESH
# -----------------------------------------------------------------------------

@pytest.mark.gui
def test_register_views_binds_row_callbacks(controller: AppController) -> None:
    controller.tree_view.bind_row_callbacks.assert_called_once_with(
        controller.on_toggle_expand, controller.on_check
    )


@pytest.mark.gui
def test_refresh_renders_collapsed_roots(controller: AppController) -> None:
    """TC-01: A refresh builds the forest off-thread and redraws on the main loop."""
    controller.refresh()

    assert controller.session.forest[0].id == "Carlos"
    assert _rendered_ids(controller) == [("Carlos", 0)]
    controller.header_view.set_busy.assert_any_call(True)
    controller.header_view.set_busy.assert_called_with(False)
    controller.tree_view.set_footer.assert_called_with("No filter applied")


@pytest.mark.gui
def test_toggle_expand_shows_children(controller: AppController) -> None:
    controller.refresh()
    controller.on_toggle_expand("Carlos")

    assert _rendered_ids(controller) == [("Carlos", 0), ("Ana", 1), ("María", 1)]


@pytest.mark.gui
def test_incomplete_config_opens_settings(host: MemoryHost) -> None:
    app = MagicMock()
    ctrl = AppController(app, host, FilterConfig(), {})
    ctrl.register_views(MagicMock(), MagicMock(), MagicMock(), MagicMock())

    ctrl.refresh()

    assert ctrl.active_frame == FRAME_SETTINGS
    ctrl.config_view.set_sources.assert_called_once()
    assert ctrl.session.forest == ()


@pytest.mark.gui
def test_host_failure_keeps_forest_and_alerts(controller: AppController, host: MemoryHost) -> None:
    controller.refresh()
    forest = controller.session.forest

    with patch.object(host, "fetch_rows", side_effect=HostError("offline")):
        controller.refresh()

    assert controller.session.forest is forest
    controller.mock_mb.showerror.assert_called_once()
    assert "offline" in controller.mock_mb.showerror.call_args[0][1]


@pytest.mark.gui
def test_stale_refresh_is_ignored(controller: AppController) -> None:
    """TC-02: Completions of superseded refreshes never touch the views."""
    old = controller.session.begin_refresh()
    controller.session.begin_refresh()
    controller.header_view.reset_mock()

    result = controller.on_refresh_done(old, [{"Usuario": "X", "Lider": ""}])

    assert result.error == STALE
    assert controller.session.forest == ()
    controller.header_view.set_busy.assert_not_called()

# -----------------------------------------------------------------------------
# SELECTION & FILTER
# -----------------------------------------------------------------------------

@pytest.mark.gui
def test_check_pushes_filter_to_host(controller: AppController, host: MemoryHost) -> None:
    """TC-03: A checkbox click cascades and the flattened set reaches the host."""
    controller.refresh()
    controller.on_check("Juan")

    assert host.filters["Hoja de Usuarios"]["Usuario"] == ["Diego", "Juan", "Laura"]
    assert controller.session.last_filter.ok
    controller.tree_view.set_footer.assert_called_with("3 user(s) selected")


@pytest.mark.gui
def test_second_click_on_checked_node_clears(controller: AppController, host: MemoryHost) -> None:
    controller.refresh()
    controller.on_check("Juan")
    controller.on_check("Juan")

    assert controller.session.selection.selected == frozenset()
    assert "Usuario" not in host.filters["Hoja de Usuarios"]


@pytest.mark.gui
def test_rendered_rows_carry_tri_state(controller: AppController) -> None:
    controller.refresh()
    controller.on_check("Juan")
    controller.expand_all()

    rows = controller.tree_view.render_rows.call_args[0][0]
    states = {node.id: state for node, _depth, _open, state in rows}
    assert states["Carlos"] == CheckState.INDETERMINATE
    assert states["Juan"] == CheckState.CHECKED
    assert states["Ana"] == CheckState.UNCHECKED


@pytest.mark.gui
def test_check_unknown_node_is_ignored(controller: AppController) -> None:
    controller.refresh()
    controller.on_check("Ghost")
    assert controller.session.selection.selected == frozenset()


@pytest.mark.gui
def test_select_all_and_none(controller: AppController) -> None:
    controller.refresh()

    controller.select_all()
    assert len(controller.session.selection.selected) == 15

    controller.select_none()
    assert controller.session.selection.selected == frozenset()


@pytest.mark.gui
def test_filter_failure_alerts(controller: AppController, host: MemoryHost) -> None:
    controller.refresh()
    with patch.object(host, "apply_filter", side_effect=HostError("denied")):
        controller.on_check("Ana")

    assert controller.session.last_filter.ok is False
    controller.mock_mb.showerror.assert_called_once()


@pytest.mark.gui
def test_search_filters_and_expands(controller: AppController) -> None:
    controller.refresh()
    controller.tree_view.entry_search.get.return_value = "laura"

    controller.on_search_changed()

    assert _rendered_ids(controller) == [("Carlos", 0), ("María", 1), ("Juan", 2), ("Laura", 3)]


@pytest.mark.gui
def test_search_without_results_shows_message(controller: AppController) -> None:
    controller.refresh()
    controller.tree_view.entry_search.get.return_value = "zzz"

    controller.on_search_changed()

    controller.tree_view.show_message.assert_called_with("No results found")

# -----------------------------------------------------------------------------
# SETTINGS & NAVIGATION
# -----------------------------------------------------------------------------

@pytest.mark.gui
def test_save_settings_rejects_unknown_field(controller: AppController) -> None:
    controller.open_settings()
    controller.config_view.get_values.return_value = {
        "source_name": "Hoja de Usuarios",
        "entity_field": "Usuario",
        "parent_field": "Jefe",
        "display_field": None,
    }

    assert controller.save_settings() is False
    controller.mock_save.assert_not_called()
    assert controller.active_frame == FRAME_SETTINGS


@pytest.mark.gui
def test_save_settings_persists_and_refreshes(controller: AppController) -> None:
    controller.open_settings()
    controller.config_view.get_values.return_value = dict(DEMO_FILTER_CONFIG, display_field=None)

    assert controller.save_settings() is True

    controller.mock_save.assert_called_once()
    assert controller.app_state["filter_config"]["entity_field"] == "Usuario"
    assert controller.active_frame == FRAME_TREE
    assert controller.session.forest


@pytest.mark.gui
def test_source_selection_updates_field_choices(controller: AppController) -> None:
    controller.open_settings()
    controller.on_source_selected("Datos de Ventas")

    fields = controller.config_view.set_fields.call_args[0][0]
    assert "Usuario" not in fields


@pytest.mark.gui
def test_toggle_logs(controller: AppController) -> None:
    controller.toggle_logs()
    assert controller.active_frame == FRAME_LOGS
    controller.toggle_logs()
    assert controller.active_frame == FRAME_TREE
