# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Tests for loading the tests and hardware files.
"""

import json

import pytest
from utils import write_yaml

from common.config import load_hardware_config, load_tests_config, read_config_file
from common.validation import ConfigurationError
from harness.registry import registry


def test_load_tests_config(tmp_path):
    path = write_yaml(
        tmp_path / "tests.yaml",
        {"protocol": "ipmi", "provider": "ipmitool", "features": ["powerState", "userRead"]},
    )
    tests = load_tests_config(path, registry.features())
    assert tests.protocol == "ipmi"
    assert tests.provider == "ipmitool"
    assert tests.features == ["powerState", "userRead"]


def test_load_tests_config_unknown_feature(tmp_path):
    path = write_yaml(
        tmp_path / "tests.yaml",
        {"protocol": "ipmi", "provider": "ipmitool", "features": ["firmwareInstall"]},
    )
    with pytest.raises(ConfigurationError, match="firmwareInstall"):
        load_tests_config(path, registry.features())


def test_load_hardware_config(config_files):
    _, hardware_file = config_files
    hardware = load_hardware_config(hardware_file)
    assert len(hardware.devices) == 1
    device = hardware.devices[0]
    assert device.name == "node1"
    assert device.bmc_host == "10.0.0.1"
    assert device.bmc_pass == "secret"
    assert device.ipmi_port == "623"


def test_json_files_are_accepted(tmp_path):
    path = tmp_path / "tests.json"
    path.write_text(
        json.dumps({"protocol": "redfish", "provider": "gofish", "features": ["userRead"]})
    )
    tests = load_tests_config(path)
    assert tests.features == ["userRead"]


def test_missing_file_raises_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError, match="Failed to read"):
        read_config_file(tmp_path / "missing.yaml")


def test_invalid_yaml_raises_configuration_error(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("devices: [unclosed\n")
    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        load_hardware_config(path)
