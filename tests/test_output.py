"""Tests for CLI output: formats, stream discipline, settings rendering and logging."""

from __future__ import annotations

import json
import logging

import pytest

from sprest import output as output_module
from sprest.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    configure_logging,
    get_output,
    reset_output,
    set_output,
    strip_odata_annotations,
)


VERBOSE_LIST = {
    "__metadata": {"type": "SP.List", "uri": "https://contoso/_api/web/lists(guid'1')"},
    "Fields": {"__deferred": {"uri": "https://contoso/_api/web/lists(guid'1')/Fields"}},
    "Title": "Tasks",
    "ItemCount": 3,
}


@pytest.fixture(autouse=True)
def _reset_global_output():
    reset_output()
    yield
    reset_output()


@pytest.fixture()
def non_tty(monkeypatch):
    monkeypatch.setattr("sprest.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    monkeypatch.setattr("sprest.output._is_tty", lambda: True)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")


def _manager(fmt: OutputFormat, **kwargs) -> OutputManager:
    return OutputManager(format=fmt, no_color=True, **kwargs)


# ------------------------------------------------------------------ #
# Format selection
# ------------------------------------------------------------------ #


class TestFormatSelection:
    def test_auto_is_plain_when_piped(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_is_rich_on_colour_tty(self, tty):
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_is_plain_on_tty_without_colour(self, tty):
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_format_is_kept(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON

    @pytest.mark.parametrize(("env", "expected"), [({"NO_COLOR": ""}, True), ({"TERM": "dumb"}, True), ({}, False)])
    def test_colour_environment(self, monkeypatch, env, expected):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        assert _should_disable_color() is expected


# ------------------------------------------------------------------ #
# Stream discipline
# ------------------------------------------------------------------ #


class TestStreams:
    @pytest.mark.parametrize("method", ["info", "success", "warning", "error"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        getattr(_manager(OutputFormat.PLAIN), method)("Loaded 2 settings")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "Loaded 2 settings" in captured.err

    def test_prefixes_without_colour(self, capfd, non_tty):
        mgr = _manager(OutputFormat.PLAIN, verbose=True)
        mgr.warning("stale cache")
        mgr.error("list not found")
        mgr.debug("GET _api/web")
        err = capfd.readouterr().err.splitlines()
        assert err == ["Warning: stale cache", "Error: list not found", "[debug] GET _api/web"]

    def test_quiet_keeps_only_problems(self, capfd, non_tty):
        mgr = _manager(OutputFormat.PLAIN, quiet=True)
        mgr.info("hidden")
        mgr.success("hidden")
        mgr.warning("w")
        mgr.error("e")
        assert capfd.readouterr().err.splitlines() == ["Warning: w", "Error: e"]

    def test_debug_needs_verbose(self, capfd, non_tty):
        _manager(OutputFormat.PLAIN).debug("secret")
        assert capfd.readouterr().err == ""


# ------------------------------------------------------------------ #
# REST payloads
# ------------------------------------------------------------------ #


class TestStripOdataAnnotations:
    def test_removes_metadata_and_deferred_links(self):
        assert strip_odata_annotations(VERBOSE_LIST) == {"Title": "Tasks", "ItemCount": 3}

    def test_removes_minimal_metadata_annotations(self):
        data = [{"odata.type": "SP.List", "odata.id": "x", "Title": "Docs"}]
        assert strip_odata_annotations(data) == [{"Title": "Docs"}]

    def test_recurses_into_expanded_entities(self):
        data = {"Author": {"__metadata": {"type": "SP.User"}, "Title": "Ann"}}
        assert strip_odata_annotations(data) == {"Author": {"Title": "Ann"}}

    def test_scalars_unchanged(self):
        assert strip_odata_annotations("x") == "x"


class TestFormatResponse:
    def test_json_keeps_payload_as_returned(self, capfd, non_tty):
        _manager(OutputFormat.JSON).format_response(VERBOSE_LIST)
        assert json.loads(capfd.readouterr().out) == VERBOSE_LIST

    def test_json_passes_through_raw_text(self, capfd, non_tty):
        _manager(OutputFormat.JSON).format_response("<xml/>")
        assert capfd.readouterr().out.strip() == "<xml/>"

    def test_plain_entity_as_key_value_lines(self, capfd, non_tty):
        _manager(OutputFormat.PLAIN).format_response(VERBOSE_LIST)
        assert capfd.readouterr().out.splitlines() == ["Title\tTasks", "ItemCount\t3"]

    def test_plain_entity_list_as_rows(self, capfd, non_tty):
        data = [{"Title": "Tasks", "ItemCount": 3}, {"Title": "Docs", "ItemCount": None}]
        _manager(OutputFormat.PLAIN).format_response(data)
        assert capfd.readouterr().out.splitlines() == ["Tasks\t3", "Docs\t"]

    def test_plain_none_prints_nothing(self, capfd, non_tty):
        _manager(OutputFormat.PLAIN).format_response(None)
        assert capfd.readouterr().out == ""

    def test_rich_entity_list_is_a_table(self, capfd, non_tty):
        data = [{"Title": "Tasks", "Hidden": False}, {"Title": "Docs", "BaseTemplate": 101}]
        _manager(OutputFormat.RICH).format_response(data)
        out = capfd.readouterr().out
        for text in ("Title", "Hidden", "BaseTemplate", "Tasks", "101"):
            assert text in out
        assert "__metadata" not in out

    def test_rich_entity_is_highlighted_json(self, capfd, non_tty):
        _manager(OutputFormat.RICH).format_response(VERBOSE_LIST)
        out = capfd.readouterr().out
        assert "Tasks" in out
        assert "__deferred" not in out


class TestPrintSettings:
    VALUES = {"Theme": "dark", "Limit": "5"}

    def test_json_object(self, capfd, non_tty):
        _manager(OutputFormat.JSON).print_settings(self.VALUES, "AppSettings")
        assert json.loads(capfd.readouterr().out) == self.VALUES

    def test_plain_lines(self, capfd, non_tty):
        _manager(OutputFormat.PLAIN).print_settings(self.VALUES, "AppSettings")
        assert capfd.readouterr().out.splitlines() == ["Theme\tdark", "Limit\t5"]

    def test_rich_table_titled_by_list(self, capfd, non_tty):
        _manager(OutputFormat.RICH).print_settings(self.VALUES, "AppSettings")
        out = capfd.readouterr().out
        assert "'AppSettings'" in out
        assert "Setting" in out
        assert "dark" in out


class TestPrintTable:
    HEADERS = ["Profile", "Site URL"]
    ROWS = [["dev", "https://contoso.sharepoint.com/sites/dev"]]

    def test_json_records(self, capfd, non_tty):
        _manager(OutputFormat.JSON).print_table(self.HEADERS, self.ROWS)
        assert json.loads(capfd.readouterr().out) == [
            {"Profile": "dev", "Site URL": "https://contoso.sharepoint.com/sites/dev"}
        ]

    def test_plain_has_header_line(self, capfd, non_tty):
        _manager(OutputFormat.PLAIN).print_table(self.HEADERS, self.ROWS, title="ignored")
        assert capfd.readouterr().out.splitlines() == [
            "Profile\tSite URL",
            "dev\thttps://contoso.sharepoint.com/sites/dev",
        ]


# ------------------------------------------------------------------ #
# Logging and the process-wide manager
# ------------------------------------------------------------------ #


class TestConfigureLogging:
    def test_verbose_shows_debug_records(self, capfd, non_tty):
        configure_logging(_manager(OutputFormat.PLAIN, verbose=True))
        logging.getLogger("sprest.cache.cache").debug("Cache record %s expired", "k")
        assert "Cache record k expired" in capfd.readouterr().err

    def test_default_level_is_warning(self, capfd, non_tty):
        configure_logging(_manager(OutputFormat.PLAIN))
        logger = logging.getLogger("sprest.configuration.caching")
        logger.debug("quiet")
        logger.warning("loud")
        err = capfd.readouterr().err
        assert "quiet" not in err
        assert "loud" in err

    def test_reconfigure_replaces_handler(self, non_tty):
        configure_logging(_manager(OutputFormat.PLAIN))
        configure_logging(_manager(OutputFormat.PLAIN))
        assert len(logging.getLogger("sprest").handlers) == 1

    def test_reset_detaches_handler(self, non_tty):
        configure_logging(_manager(OutputFormat.PLAIN))
        reset_output()
        assert logging.getLogger("sprest").handlers == []


class TestGlobalManager:
    def test_created_lazily_once(self):
        assert get_output() is get_output()

    def test_module_functions_use_installed_manager(self, capfd, non_tty):
        set_output(_manager(OutputFormat.PLAIN))
        output_module.info("via module")
        output_module.print_settings({"k": "v"})
        captured = capfd.readouterr()
        assert "via module" in captured.err
        assert captured.out == "k\tv\n"
