# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Test configuration and fixtures for the bmc-tester test suite.
"""

import os
import sys
from pathlib import Path

import pytest

# Add src directory to Python path for imports
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

# Import the procedures - this will trigger feature registration
import features  # noqa: F401, E402
from common.validation import DeviceConfig, TestsConfig  # noqa: E402

# Test environment variables
os.environ.update(
    {
        "BMC_TESTER_MAX_RETRIES": "0",
        "BMC_TESTER_INITIAL_DELAY": "0.01",
        "BMC_TESTER_JITTER": "false",
    }
)


@pytest.fixture
def tests_config():
    """Provide an ipmi tests configuration covering every feature."""
    return TestsConfig(
        protocol="ipmi",
        provider="ipmitool",
        features=["powerState", "userRead", "powerSet", "bmcReset", "bootDeviceSet"],
    )


@pytest.fixture
def sample_devices():
    """Provide sample device configurations for testing."""
    return [
        DeviceConfig(
            name="node1",
            vendor="supermicro",
            model="x11",
            bmc_host="10.0.0.1",
            bmc_user="admin",
            bmc_pass="pass1",
        ),
        DeviceConfig(
            name="node2",
            vendor="dell",
            model="r640",
            bmc_host="10.0.0.2",
            bmc_user="root",
            bmc_pass="pass2",
        ),
    ]


@pytest.fixture
def config_files(tmp_path):
    """Write valid tests and hardware files, returning their paths."""
    from utils import write_yaml

    tests_file = write_yaml(
        tmp_path / "tests.yaml",
        {"protocol": "redfish", "provider": "gofish", "features": ["powerState"]},
    )
    hardware_file = write_yaml(
        tmp_path / "hardware.yaml",
        {
            "devices": [
                {
                    "name": "node1",
                    "vendor": "supermicro",
                    "model": "x11",
                    "bmcHost": "10.0.0.1",
                    "bmcUser": "admin",
                    "bmcPass": "secret",
                    "ipmiPort": 623,
                }
            ]
        },
    )
    return tests_file, hardware_file
