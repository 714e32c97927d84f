"""Tests for the dashboard controller wiring store, aggregators and views."""

from __future__ import annotations

import threading

import pytest

from conftest import BY_GAS_ROWS, CO2E_ROWS, raw_emissions
from naics_ghg.dashboard import Dashboard, Datasets, load_datasets
from naics_ghg.layout import Viewport
from naics_ghg.scheduling import TransitionTimeline


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def dashboard(by_gas_records, co2e_records, labels, settings, fake_timer):
    board = Dashboard(Datasets(by_gas_records, co2e_records, labels), settings, timer_factory=fake_timer)
    yield board
    board.close()


class TestInitialState:
    def test_root_views(self, dashboard):
        views = dashboard.views
        assert views.selection.depth == 0
        assert views.bubbles
        assert views.slices == []
        assert [r.key for r in views.level_rows] == ["210000", "110000", "310000"]
        assert len(views.segments) == 2 * len(views.level_rows)

    def test_gases(self, dashboard):
        assert dashboard.gases() == ["Carbon dioxide", "Methane", "Nitrous oxide"]


class TestInteraction:
    def test_click_leaf_fills_pie(self, dashboard):
        dashboard.click("5:111110")
        views = dashboard.views
        assert views.selection.terminal_node
        assert {s.gas for s in views.slices} == {"Carbon dioxide", "Methane", "Nitrous oxide"}
        # below industries the bars switch to gases
        assert {r.key for r in views.level_rows} == {"Carbon dioxide", "Methane", "Nitrous oxide"}

    def test_click_branch_compares_children(self, dashboard):
        dashboard.click("1:110000")
        views = dashboard.views
        assert views.slices == []
        assert {r.key for r in views.level_rows} == {"111000", "112000"}

    def test_click_unknown_key_is_noop(self, dashboard):
        before = dashboard.store.current()
        dashboard.click("5:000000")
        assert dashboard.store.current() == before

    def test_emissions_kind_restacks(self, dashboard):
        dashboard.set_emissions_kind("margin")
        assert {s.series for s in dashboard.views.segments} == {"margin"}

    def test_back_and_reset(self, dashboard):
        dashboard.click("5:111110")
        dashboard.go_to_parent()
        assert dashboard.store.current().naics == "111100"
        dashboard.reset()
        assert dashboard.store.current().naics == ""

    def test_selection_starts_transition(self, dashboard):
        dashboard.click("1:110000")
        transition = dashboard.timeline.current
        assert transition is not None
        assert transition.target == dashboard.store.zoom
        dashboard.click("5:111110")
        assert dashboard.timeline.current.seq == transition.seq + 1

    def test_gas_selection(self, dashboard):
        dashboard.set_selected_gas("Methane")
        assert dashboard.views.selection.selected_gas == "Methane"


class TestResize:
    def test_resize_is_debounced(self, dashboard, fake_timer):
        dashboard.click("5:111110")
        dashboard.resize(900, 900)
        dashboard.resize(1000, 800)
        assert dashboard.store.viewport == Viewport(600, 400)
        fake_timer.created[-1].fire()
        assert dashboard.store.viewport == Viewport(600, 400)
        assert dashboard.poll()
        assert dashboard.store.viewport == Viewport(1000, 800)
        assert dashboard.store.current().pie_radius == pytest.approx(800 * 0.95 / 2)

    def test_settle_applies_pending(self, dashboard):
        dashboard.resize(800, 800)
        dashboard.settle()
        assert dashboard.store.viewport == Viewport(800, 800)

    def test_close_cancels_pending(self, dashboard, fake_timer):
        dashboard.resize(800, 800)
        dashboard.close()
        fake_timer.created[-1].fire()
        assert not dashboard.poll()
        assert dashboard.store.viewport == Viewport(600, 400)


class TestDatasets:
    def test_missing_dataset_leaves_others_working(self, co2e_records, labels, settings, fake_timer):
        board = Dashboard(Datasets(None, co2e_records, labels), settings, timer_factory=fake_timer)
        board.click("5:111110")
        assert board.views.slices == []
        assert board.views.level_rows == []
        board.reset()
        assert board.views.level_rows
        assert board.gases() == []

    def test_no_data_renders_empty(self, settings, fake_timer):
        board = Dashboard(Datasets(), settings, timer_factory=fake_timer)
        assert board.views.bubbles == []
        assert board.views.level_rows == []
        assert board.root.value == 0

    def test_reload_keeps_selection(self, dashboard, by_gas_records, co2e_records, labels):
        dashboard.click("5:111110")
        dashboard.replace_datasets(Datasets(by_gas_records, co2e_records.copy(), labels))
        assert dashboard.store.current().naics == "111110"
        assert dashboard.views.slices

    def test_load_datasets_isolates_failures(self, settings):
        columns = settings.emissions_columns
        raw_emissions(BY_GAS_ROWS).to_csv(settings.data_path(settings.all_emissions_file), index=False)
        broken = raw_emissions([(n, t, "All GHGs", b, m) for n, t, b, m in CO2E_ROWS])
        broken.loc[0, columns["base"]] = "???"
        broken.to_csv(settings.data_path(settings.equiv_emissions_file), index=False)

        datasets = load_datasets(settings)
        assert datasets.loaded() == {"all_emissions": True, "equiv_emissions": False, "labels": False}
        board = Dashboard(datasets, settings)
        assert board.root.children == []
        assert board.gases() == ["Carbon dioxide", "Methane", "Nitrous oxide"]
        board.close()


def test_one_selection_many_views(dashboard):
    seen = []
    dashboard.store.subscribe(seen.append)
    dashboard.click("1:110000")
    assert seen == [dashboard.views.selection]


def test_resize_notifies_on_ui_thread(by_gas_records, co2e_records, labels, settings):
    timers = []

    def factory(delay, fn):
        timer = threading.Timer(delay, fn)
        timers.append(timer)
        return timer

    board = Dashboard(Datasets(by_gas_records, co2e_records, labels),
                      settings.model_copy(update={"resize_debounce_ms": 0}), timer_factory=factory)
    threads = []
    board.store.subscribe(lambda _: threads.append(threading.current_thread()))
    board.resize(800, 800)
    timers[-1].join(5)
    assert threads == []
    assert board.poll()
    assert threads == [threading.current_thread()]
    board.close()


def test_transition_only_animates_while_running(dashboard):
    clock = Clock()
    dashboard.timeline = TransitionTimeline(300, clock=clock)
    dashboard.click("1:110000")
    assert dashboard.transition_ms() == 300
    clock.now = 1.0
    assert dashboard.transition_ms() == 0
    # a change that leaves the zoom alone does not animate again
    dashboard.set_selected_gas("Methane")
    assert dashboard.transition_ms() == 0
