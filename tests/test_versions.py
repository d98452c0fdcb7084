"""
Tests for Xray-core release listing, selection and download.
"""

import json
import stat
from pathlib import Path

import pytest

from marznodectl.core.errors import ExternalToolFailure, UserInputError, VersionSelectionError
from marznodectl.core.models.action import Receipt
from marznodectl.core.services.arch import build_asset
from marznodectl.core.services.xray import (
    choose_version,
    download_xray,
    list_versions,
    select_version,
)
from marznodectl.core.terminal import ScriptedTerminal

TAGS = ["v25.1.1", "v25.1.0", "v24.12.31", "v24.12.18", "v24.11.30"]


def _releases(tags):
    return json.dumps([{"tag_name": tag, "prerelease": False} for tag in tags])


# ── select_version ───────────────────────────────────────────────────


class TestSelectVersion:
    def test_first(self):
        assert select_version(TAGS, "1") == "v25.1.1"

    def test_last(self):
        assert select_version(TAGS, 5) == "v24.11.30"

    @pytest.mark.parametrize("choice", ["0", "6", "-1", "99"])
    def test_out_of_range(self, choice):
        with pytest.raises(VersionSelectionError, match="out of range"):
            select_version(TAGS, choice)

    @pytest.mark.parametrize("choice", ["", "abc", "1.5", None])
    def test_not_a_number(self, choice):
        with pytest.raises(VersionSelectionError, match="Invalid selection"):
            select_version(TAGS, choice)

    def test_is_user_input_error(self):
        assert issubclass(VersionSelectionError, UserInputError)


# ── list_versions ────────────────────────────────────────────────────


class TestListVersions:
    def test_tags_in_order(self, registry, mock_adapter, settings):
        mock_adapter.set_output("xray.releases", _releases(TAGS))
        assert list_versions(registry, settings) == TAGS

    def test_truncated_to_version_choices(self, registry, mock_adapter, settings):
        settings.version_choices = 3
        mock_adapter.set_output("xray.releases", _releases(TAGS))
        assert list_versions(registry, settings) == TAGS[:3]

    def test_fetch_failure(self, registry, mock_adapter, settings):
        mock_adapter.set_failure("xray.releases", error="HTTP 403")
        with pytest.raises(ExternalToolFailure, match="HTTP 403"):
            list_versions(registry, settings)

    def test_invalid_json(self, registry, mock_adapter, settings):
        mock_adapter.set_output("xray.releases", "<html>rate limited</html>")
        with pytest.raises(ExternalToolFailure, match="Invalid releases response"):
            list_versions(registry, settings)

    def test_not_a_list(self, registry, mock_adapter, settings):
        mock_adapter.set_output("xray.releases", json.dumps({"message": "Not Found"}))
        with pytest.raises(ExternalToolFailure, match="expected a list"):
            list_versions(registry, settings)

    def test_empty(self, registry, mock_adapter, settings):
        mock_adapter.set_output("xray.releases", "[]")
        with pytest.raises(ExternalToolFailure, match="No Xray-core releases"):
            list_versions(registry, settings)

    def test_requests_releases_api(self, registry, mock_adapter, settings):
        mock_adapter.set_output("xray.releases", _releases(TAGS))
        list_versions(registry, settings)
        params = mock_adapter.call_log[0].params
        assert params["url"] == settings.xray_releases_api
        assert params["operation"] == "fetch"


# ── choose_version ───────────────────────────────────────────────────


class TestChooseVersion:
    @pytest.fixture(autouse=True)
    def _releases(self, mock_adapter):
        mock_adapter.set_output("xray.releases", _releases(TAGS))

    def test_select_and_confirm_with_enter(self, registry, settings):
        terminal = ScriptedTerminal(answers=["2", ""])
        assert choose_version(registry, settings, terminal) == "v25.1.0"
        assert "Selected Xray version: v25.1.0" in terminal.texts("echo")

    def test_lists_numbered_tags(self, registry, settings):
        terminal = ScriptedTerminal(answers=["1", "y"])
        choose_version(registry, settings, terminal)
        listed = terminal.texts("echo")
        assert any(line.strip() == "1\tv25.1.1" for line in listed)
        assert any(line.strip() == "5\tv24.11.30" for line in listed)

    def test_out_of_range_asks_again(self, registry, settings):
        terminal = ScriptedTerminal(answers=["7", "3", "Y"])
        assert choose_version(registry, settings, terminal) == "v24.12.31"
        assert any("out of range" in w for w in terminal.texts("warn"))

    def test_decline_then_reselect(self, registry, settings):
        terminal = ScriptedTerminal(answers=["1", "n", "4", ""])
        assert choose_version(registry, settings, terminal) == "v24.12.18"
        assert "Selection cancelled. Please choose again." in terminal.texts("echo")

    def test_invalid_confirmation_reprompts(self, registry, settings):
        terminal = ScriptedTerminal(answers=["1", "maybe", "N", "2", "y"])
        assert choose_version(registry, settings, terminal) == "v25.1.0"
        assert "Invalid input. Please enter Y or n." in terminal.texts("echo")

    def test_releases_fetched_once(self, registry, mock_adapter, settings):
        terminal = ScriptedTerminal(answers=["9", "1", "n", "1", ""])
        choose_version(registry, settings, terminal)
        assert mock_adapter.called_ids.count("xray.releases") == 1

    def test_runs_out_of_answers(self, registry, settings):
        terminal = ScriptedTerminal(answers=["0"])
        with pytest.raises(UserInputError, match="No scripted answer"):
            choose_version(registry, settings, terminal)


# ── download_xray ────────────────────────────────────────────────────


class TestDownloadXray:
    @pytest.fixture
    def asset(self, settings):
        return build_asset("v25.1.1", "64", settings.xray_download_base)

    @pytest.fixture
    def extracts_xray(self, mock_adapter):
        def extract(ctx):
            (Path(ctx.params["dest"]) / "xray").write_text("binary")
            return Receipt.success(adapter="archive", action_id=ctx.action.id)

        mock_adapter.set_handler("xray.extract", extract)

    def test_full_sequence(self, registry, mock_adapter, settings, asset, extracts_xray):
        settings.install_dir.mkdir(parents=True)
        terminal = ScriptedTerminal()
        download_xray(registry, settings, asset, terminal)

        assert mock_adapter.called_ids == [
            "xray.download", "xray.extract", "xray.geoip", "xray.geosite",
        ]
        assert mock_adapter.call_log[0].params["url"] == asset.url
        assert mock_adapter.call_log[2].params["dest"] == str(settings.data_dir / "geoip.dat")
        assert mock_adapter.call_log[3].params["dest"] == str(settings.data_dir / "geosite.dat")
        assert settings.xray_executable.stat().st_mode & stat.S_IXUSR
        assert "Xray-core v25.1.1 installed successfully." in terminal.texts("success")

    def test_download_failure_stops(self, registry, mock_adapter, settings, asset):
        mock_adapter.set_failure("xray.download", error="HTTP 404")
        with pytest.raises(ExternalToolFailure, match="HTTP 404"):
            download_xray(registry, settings, asset, ScriptedTerminal())
        assert mock_adapter.called_ids == ["xray.download"]

    def test_archive_without_executable(self, registry, settings, asset):
        settings.install_dir.mkdir(parents=True)
        with pytest.raises(ExternalToolFailure, match="did not contain an xray executable"):
            download_xray(registry, settings, asset, ScriptedTerminal())

    def test_geodata_failure(self, registry, mock_adapter, settings, asset, extracts_xray):
        settings.install_dir.mkdir(parents=True)
        mock_adapter.set_failure("xray.geosite", error="timed out")
        with pytest.raises(ExternalToolFailure, match="geosite.dat"):
            download_xray(registry, settings, asset, ScriptedTerminal())
