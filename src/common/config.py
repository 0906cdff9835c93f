# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Configuration loader for the BMC tester.
Loads the tests and hardware files and environment defaults with validation.
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .validation import (
    ConfigurationError,
    ConfigValidator,
    HardwareConfig,
    TestsConfig,
)

logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

DEFAULT_TIMEOUT = os.getenv("BMC_TESTER_TIMEOUT", "1m")
DEFAULT_LOG_LEVEL = os.getenv("BMC_TESTER_LOG_LEVEL", "info")


def read_config_file(path: str | Path) -> Any:
    """Read a YAML (or JSON) document from disk."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to read {path}: {e}") from e

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e


def load_tests_config(
    path: str | Path, known_features: Iterable[str] | None = None
) -> TestsConfig:
    """Load and validate the tests file."""
    tests = ConfigValidator.parse_tests(read_config_file(path), known_features)
    logger.info(
        f"Tests configuration loaded: protocol {tests.protocol}, provider {tests.provider}, {len(tests.features)} features"
    )
    return tests


def load_hardware_config(path: str | Path) -> HardwareConfig:
    """Load and validate the hardware file."""
    hardware = ConfigValidator.parse_hardware(read_config_file(path))
    logger.info(f"Hardware configuration loaded: {len(hardware.devices)} devices")
    return hardware
