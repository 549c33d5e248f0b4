"""Tests for canpi_config.cfg."""

import json

import pytest

from canpi_config.cfg import Cfg, CfgState
from canpi_config.errors import (
    SchemaViolationError,
    UninitializedError,
    UnwritableValueError,
    ValueStoreNotFoundError,
)
from canpi_config.models import Attribute, Visibility
from canpi_config.value_store import ValueDocument, read_value_store

from conftest import SECTIONED_CFG_DATA


def _new_start_event_id() -> Attribute:
    return Attribute(
        prompt="sTART eVENT iD",
        tooltip="new tooltip",
        current="1",
        default="2",
        format="[1-8]",
        action="Hide",
    )


@pytest.fixture
def cfg(cfg_file, defn_file):
    c = Cfg()
    c.load_configuration(cfg_file, defn_file)
    return c


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestLifecycle:
    def test_starts_uninitialized(self):
        assert Cfg().state == CfgState.UNINITIALIZED

    def test_loaded(self, cfg):
        assert cfg.state == CfgState.LOADED
        assert len(cfg.store) == 4

    def test_set_attribute_uninitialized(self):
        with pytest.raises(UninitializedError):
            Cfg().set_attribute("start_event_id", _new_start_event_id())

    @pytest.mark.parametrize("call", [
        lambda c: c.get_attribute("canid"),
        lambda c: c.set_current("canid", "1"),
        lambda c: c.attributes_with_visibility(Visibility.EDITABLE),
        lambda c: c.write_cfg("unused.cfg"),
        lambda c: c.store,
    ])
    def test_operations_need_load(self, call):
        with pytest.raises(UninitializedError):
            call(Cfg())

    def test_failed_load_keeps_state(self, tmp_path, cfg_file):
        bad = tmp_path / "bad.json"
        bad.write_text('{"canid": {"prompt": "x"}}', encoding="utf-8")
        c = Cfg()
        with pytest.raises(SchemaViolationError):
            c.load_configuration(cfg_file, bad)
        assert c.state == CfgState.UNINITIALIZED

    def test_load_definitions_str(self, defn_text):
        c = Cfg()
        c.load_definitions_str(defn_text)
        assert c.get_attribute("canid").current == "100"


# ---------------------------------------------------------------------------
# Loading values
# ---------------------------------------------------------------------------

class TestLoadConfiguration:
    def test_values_applied(self, cfg):
        sei = cfg.get_attribute("start_event_id")
        assert sei.prompt == "Start Event Id"
        assert sei.current == "2"
        assert sei.default == "1"

    def test_missing_value_file(self, tmp_path, defn_file):
        with pytest.raises(ValueStoreNotFoundError):
            Cfg().load_configuration(tmp_path / "none.cfg", defn_file)

    def test_missing_ok_uses_defined_values(self, tmp_path, defn_file):
        c = Cfg()
        c.load_configuration(tmp_path / "none.cfg", defn_file, missing_ok=True)
        assert c.get_attribute("start_event_id").current == "1"

    def test_unknown_keys_recorded(self, tmp_path, defn_file):
        p = tmp_path / "canpi.cfg"
        p.write_text("canid=1\nrouter_ssid=home\n", encoding="utf-8")
        c = Cfg()
        c.load_configuration(p, defn_file)
        assert c.unknown_keys == ["router_ssid"]

    def test_sections_option(self, tmp_path, defn_file):
        p = tmp_path / "canpi.cfg"
        p.write_text(SECTIONED_CFG_DATA, encoding="utf-8")
        c = Cfg(sections=["apmode", None])
        c.load_configuration(p, defn_file)
        assert c.get_attribute("canid").current == "101"
        assert "ap_ssid" in c.unknown_keys

    def test_reload_values(self, cfg, cfg_file):
        cfg_file.write_text("canid=555\n", encoding="utf-8")
        cfg.reload_values()
        assert cfg.get_attribute("canid").current == "555"
        assert cfg.get_attribute("start_event_id").current == "2"


# ---------------------------------------------------------------------------
# Attribute access
# ---------------------------------------------------------------------------

class TestAttributes:
    def test_get_absent(self, cfg):
        assert cfg.get_attribute("no_such_key") is None

    def test_write_attr_good(self, cfg):
        cfg.set_attribute("start_event_id", _new_start_event_id())
        nsei = cfg.get_attribute("start_event_id")
        assert nsei.prompt == "sTART eVENT iD"
        assert nsei.current == "1"
        assert nsei.default == "2"
        assert nsei.visibility == Visibility.HIDDEN

    def test_insert_new_key(self, cfg):
        cfg.set_attribute("ap_channel", _new_start_event_id())
        assert cfg.get_attribute("ap_channel") is not None
        assert len(cfg.store) == 5

    def test_set_current(self, cfg):
        updated = cfg.set_current("canid", "120")
        assert updated.current == "120"
        assert cfg.get_attribute("canid").prompt == "CAN Id"

    def test_set_current_unknown(self, cfg):
        with pytest.raises(KeyError):
            cfg.set_current("nope", "1")

    def test_visibility(self, cfg):
        assert set(cfg.attributes_with_visibility(Visibility.VIEW_ONLY)) == {"canid", "node_number"}
        hidden = cfg.attributes_with_visibility(Visibility.HIDDEN)
        assert hidden["node_mode"].current == "1"


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

class TestWriteCfg:
    def test_write_back(self, cfg, cfg_file):
        cfg.set_current("start_event_id", "9")
        backup = cfg.write_cfg()
        assert backup is not None and backup.exists()
        assert read_value_store(cfg_file)["start_event_id"] == "9"

    def test_write_elsewhere_without_backup(self, cfg, tmp_path):
        out = tmp_path / "copy.cfg"
        assert cfg.write_cfg(out, backup=False) is None
        assert read_value_store(out)["canid"] == "101"

    def test_needs_destination_when_loaded_from_str(self, defn_text):
        c = Cfg()
        c.load_definitions_str(defn_text)
        with pytest.raises(UninitializedError):
            c.write_cfg()

    def test_default_session_leaves_named_sections(self, tmp_path, defn_doc):
        defn_doc["router_ssid"] = dict(defn_doc["start_event_id"], current="none", default="none")
        defn = tmp_path / "defn.json"
        defn.write_text(json.dumps(defn_doc), encoding="utf-8")
        p = tmp_path / "canpi.cfg"
        p.write_text(SECTIONED_CFG_DATA, encoding="utf-8")

        c = Cfg()
        c.load_configuration(p, defn)
        assert c.get_attribute("router_ssid").current == "none"
        c.write_cfg(backup=False)

        doc = ValueDocument.read(p)
        assert doc.sections["network"] == {"router_ssid": "home", "router_passwd": "123456"}
        assert doc.general["router_ssid"] == "none"
        assert doc.general["canid"] == "101"

    def test_selected_section_updated_in_place(self, tmp_path, defn_doc):
        defn_doc["router_ssid"] = dict(defn_doc["start_event_id"], current="none", default="none")
        defn = tmp_path / "defn.json"
        defn.write_text(json.dumps(defn_doc), encoding="utf-8")
        p = tmp_path / "canpi.cfg"
        p.write_text(SECTIONED_CFG_DATA, encoding="utf-8")

        c = Cfg(sections=[None, "network"])
        c.load_configuration(p, defn)
        assert c.get_attribute("router_ssid").current == "home"
        c.set_current("router_ssid", "away")
        c.write_cfg(backup=False)

        doc = ValueDocument.read(p)
        assert doc.sections["network"]["router_ssid"] == "away"
        assert "router_ssid" not in doc.general

    def test_line_break_rejected(self, cfg, cfg_file):
        original = cfg_file.read_text()
        cfg.set_current("start_event_id", "1\n[x")
        with pytest.raises(UnwritableValueError):
            cfg.write_cfg()
        assert cfg_file.read_text() == original
        reloaded = Cfg()
        reloaded.load_configuration(cfg_file, cfg.defn_file)
        assert reloaded.get_attribute("start_event_id").current == "2"
