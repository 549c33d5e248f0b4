"""Shared fixtures for the canpi_config tests."""

import copy
import json
from pathlib import Path

import pytest


DEFN = {
    "canid": {
        "prompt": "CAN Id",
        "tooltip": "The CAN Id used by the CAN Pi CAP/Zero on the CBUS",
        "current": "100",
        "default": "100",
        "format": "[0-9]{1,4}",
        "action": "Display",
    },
    "node_number": {
        "prompt": "Node Number",
        "tooltip": "Module Node Number - change your peril",
        "current": "4321",
        "default": "4321",
        "format": "[0-9]{1,4}",
        "action": "Display",
    },
    "start_event_id": {
        "prompt": "Start Event Id",
        "tooltip": "The event that will be generated when the ED and GridConnect services start (ON) and stop (OFF)",
        "current": "1",
        "default": "1",
        "format": "[0-9]{1,2}",
        "action": "Edit",
    },
    "node_mode": {
        "prompt": "",
        "tooltip": "",
        "current": "0",
        "default": "0",
        "format": "[0-9]{1,2}",
        "action": "Hide",
    },
}

CFG_DATA = """
        canid=101
        node_number=5432
        start_event_id=2
        node_mode=1
        """

SECTIONED_CFG_DATA = """
canid=101
node_number=5432
start_event_id=2
node_mode=1
[network]
router_ssid = "home"
router_passwd = 123456
[apmode]
ap_ssid = canpi
ap_passwd = 654321
"""


@pytest.fixture
def defn_doc() -> dict:
    return copy.deepcopy(DEFN)


@pytest.fixture
def defn_text() -> str:
    return json.dumps(DEFN)


@pytest.fixture
def defn_file(tmp_path: Path) -> Path:
    path = tmp_path / "canpi-config-defn.json"
    path.write_text(json.dumps(DEFN, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def cfg_file(tmp_path: Path) -> Path:
    path = tmp_path / "canpi.cfg"
    path.write_text(CFG_DATA, encoding="utf-8")
    return path
