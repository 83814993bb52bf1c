"""Drives HistorySearchApp headlessly through Textual's pilot."""

import io

from rich.console import Console

from histsearch.app import FilterPanel, HistorySearchApp, ordinal, results_table, status_text
from histsearch.history import HistoryEntry, HistorySet
from histsearch.session import SearchSession


def make_app(history):
    return HistorySearchApp(SearchSession(history))


def render_lines(renderable, width=60):
    console = Console(file=io.StringIO(), width=width, color_system=None)
    console.print(renderable)
    return console.file.getvalue().splitlines()


class TestHelpers:
    def test_ordinal(self):
        assert [ordinal(n) for n in (1, 2, 3, 4, 11, 12, 13, 21, 22, 101)] == [
            "1st",
            "2nd",
            "3rd",
            "4th",
            "11th",
            "12th",
            "13th",
            "21st",
            "22nd",
            "101st",
        ]

    def test_status_text(self, sample_history):
        session = SearchSession(sample_history)
        assert not status_text(session).startswith("Press Ctrl+R")
        session.handle_key("l", "l")
        assert status_text(session).startswith("Press Ctrl+R to add a 2nd dimension filter")


class TestResultsTable:
    def test_one_line_per_row(self):
        history = HistorySet([HistoryEntry(f"echo {i} | grep {i}") for i in range(5)])
        lines = render_lines(results_table(history, range(5), 2, ["echo"]))
        assert len(lines) == 5
        assert [line.split()[0] for line in lines] == ["echo", "echo", "›", "echo", "echo"]

    def test_one_line_per_row_with_timestamps(self):
        history = HistorySet([HistoryEntry(f"ls {i}", timestamp=1000 + i) for i in range(4)])
        assert len(render_lines(results_table(history, range(1, 3), 1, []))) == 2

    def test_long_command_truncated_not_wrapped(self):
        history = HistorySet([HistoryEntry("echo " + "x" * 200)])
        lines = render_lines(results_table(history, range(1), 0, []), width=40)
        assert len(lines) == 1
        assert lines[0].rstrip().endswith("…")


async def test_typing_filters_results(sample_history):
    app = make_app(sample_history)
    async with app.run_test() as pilot:
        await pilot.press("l", "s")
        assert app.session.filter(0) == "ls"
        assert [e.command for e in app.session.result_view] == ["ls -la", "ls -l /tmp"]
        assert app.results_panel.border_title == "2 results"


async def test_dimensions_and_panels(sample_history):
    app = make_app(sample_history)
    async with app.run_test() as pilot:
        panels = list(app.query(FilterPanel))
        assert [p.display for p in panels] == [True, False, False, False, False]

        await pilot.press("l", "s", "ctrl+r", "t", "m", "p")
        assert app.session.current_dimension == 1
        assert [e.command for e in app.session.result_view] == ["ls -l /tmp"]
        assert [p.display for p in panels] == [True, True, False, False, False]
        assert panels[1].has_class("active")
        assert not panels[0].has_class("active")

        await pilot.press("backspace", "backspace", "backspace", "backspace")
        assert app.session.current_dimension == 0
        assert panels[0].has_class("active")


async def test_enter_returns_selected_command(sample_history):
    app = make_app(sample_history)
    async with app.run_test() as pilot:
        await pilot.press("down", "enter")
    assert app.return_value == "cd /tmp"


async def test_enter_with_no_results_keeps_running(sample_history):
    app = make_app(sample_history)
    async with app.run_test() as pilot:
        await pilot.press("z", "z", "enter")
        assert not app.session.terminated
        assert app.results_panel.border_title == "0 results"
        await pilot.press("escape")
    assert app.return_value is None


async def test_ctrl_c_cancels(sample_history):
    app = make_app(sample_history)
    async with app.run_test() as pilot:
        await pilot.press("c", "ctrl+c")
    assert app.return_value is None
    assert app.session.terminated


async def test_selection_scrolls_into_view():
    history = HistorySet([HistoryEntry(f"echo {i}", timestamp=1000 - i) for i in range(200)])
    app = make_app(history)
    async with app.run_test(size=(80, 24)) as pilot:
        for _ in range(60):
            await pilot.press("down")
        panel = app.results_panel
        assert app.session.selected_index == 60
        assert panel.offset_row <= 60 < panel.offset_row + panel.visible_rows
