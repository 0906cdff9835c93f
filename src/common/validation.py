# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Configuration validation module for the BMC tester.
Provides schema validation and error handling for the tests and hardware files.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ["ipmitool", "gofish"]
SUPPORTED_PROTOCOLS = ["ipmi", "redfish"]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
DEFAULT_IPMI_PORT = "623"

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class TestsConfig:
    """Tests to run: the protocol, preferred provider and features."""

    __test__ = False  # not a pytest test class

    protocol: str
    provider: str
    features: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate tests configuration after initialization."""
        if not self.provider:
            raise ValueError("no bmclib Provider defined in configuration")

        if not self.protocol:
            raise ValueError("no bmclib Protocol defined in configuration")

        if self.provider not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"unsupported bmclib provider '{self.provider}' defined in test. Must be one of: {SUPPORTED_PROVIDERS}"
            )

        if self.protocol not in SUPPORTED_PROTOCOLS:
            raise ValueError(
                f"unsupported bmclib protocol '{self.protocol}' defined in test. Must be one of: {SUPPORTED_PROTOCOLS}"
            )

        if not self.features:
            raise ValueError("no bmclib features to test defined in configuration")

    def to_dict(self) -> dict[str, Any]:
        return {
            "protocol": self.protocol,
            "provider": self.provider,
            "features": list(self.features),
        }


@dataclass
class DeviceConfig:
    """Configuration for a single device under test."""

    bmc_host: str
    name: str = ""
    vendor: str = ""
    model: str = ""
    bmc_user: str = ""
    bmc_pass: str = ""
    ipmi_port: str = DEFAULT_IPMI_PORT

    def __post_init__(self) -> None:
        """Validate device configuration after initialization."""
        if not self.bmc_host:
            raise ValueError("Device bmcHost cannot be empty")

        self.ipmi_port = str(self.ipmi_port) if self.ipmi_port else DEFAULT_IPMI_PORT
        if not self.ipmi_port.isdigit() or not 1 <= int(self.ipmi_port) <= 65535:
            raise ValueError(
                f"ipmiPort must be between 1 and 65535, got: {self.ipmi_port}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "vendor": self.vendor,
            "model": self.model,
            "bmcHost": self.bmc_host,
            "bmcUser": self.bmc_user,
            "bmcPass": self.bmc_pass,
            "ipmiPort": self.ipmi_port,
        }


@dataclass
class HardwareConfig:
    """Complete hardware inventory."""

    devices: list[DeviceConfig] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.devices:
            raise ValueError("no servers defined in configuration")

    def to_dict(self) -> dict[str, Any]:
        return {"devices": [d.to_dict() for d in self.devices]}


@dataclass
class RunConfig:
    """Settings for a single `run` invocation."""

    timeout: float = 60.0
    log_level: str = "INFO"
    disable_filtering: bool = False

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got: {self.timeout}")

        level = self.log_level.upper()
        if level not in VALID_LOG_LEVELS:
            logger.warning(f"Unknown log_level {self.log_level!r}, using INFO")
            level = "INFO"

        self.log_level = level


class ConfigValidator:
    """Validates parsed tests and hardware documents."""

    # File keys of a device entry mapped to DeviceConfig fields
    DEVICE_KEYS = {
        "name": "name",
        "vendor": "vendor",
        "model": "model",
        "bmcHost": "bmc_host",
        "bmcUser": "bmc_user",
        "bmcPass": "bmc_pass",
        "ipmiPort": "ipmi_port",
    }

    @staticmethod
    def parse_tests(
        data: Any, known_features: Iterable[str] | None = None
    ) -> TestsConfig:
        """Validate a tests document, optionally checking feature names."""
        if not isinstance(data, dict):
            raise ConfigurationError("Tests configuration must be a mapping")

        features = data.get("features") or []
        if not isinstance(features, list):
            raise ConfigurationError("features must be a list")

        try:
            tests = TestsConfig(
                protocol=str(data.get("protocol") or ""),
                provider=str(data.get("provider") or ""),
                features=[str(f) for f in features],
            )
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        if known_features is not None:
            known = set(known_features)
            for feature in tests.features:
                if feature not in known:
                    raise ConfigurationError(
                        f"unknown bmclib feature defined in test: {feature}"
                    )

        return tests

    @classmethod
    def parse_device(cls, index: int, data: Any) -> DeviceConfig:
        if not isinstance(data, dict):
            raise ConfigurationError(f"Device {index} must be a mapping")

        unknown = sorted(set(data) - set(cls.DEVICE_KEYS))
        if unknown:
            logger.warning(f"Ignoring unknown keys for device {index}: {unknown}")

        kwargs = {
            attr: "" if data.get(key) is None else str(data[key])
            for key, attr in cls.DEVICE_KEYS.items()
        }
        try:
            return DeviceConfig(**kwargs)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid device configuration at index {index}: {e}"
            ) from e

    @classmethod
    def parse_hardware(cls, data: Any) -> HardwareConfig:
        """Validate a hardware document."""
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("Hardware configuration must be a mapping")

        devices_data = data.get("devices") or []
        if not isinstance(devices_data, list):
            raise ConfigurationError("devices must be a list")

        devices = [cls.parse_device(i, d) for i, d in enumerate(devices_data)]
        try:
            return HardwareConfig(devices=devices)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    @staticmethod
    def parse_duration(value: str | float | int) -> float:
        """
        Parse a duration into seconds.

        Accepts bare numbers (seconds) and Go style durations such as
        "1m", "90s", "1m30s" or "500ms".
        """
        if isinstance(value, int | float):
            seconds = float(value)
        else:
            text = value.strip()
            try:
                seconds = float(text)
            except ValueError:
                pos = 0
                seconds = 0.0
                for match in _DURATION_PART.finditer(text):
                    if match.start() != pos:
                        break
                    seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
                    pos = match.end()
                if pos != len(text) or not text:
                    raise ConfigurationError(f"Invalid duration: {value!r}") from None

        if seconds <= 0:
            raise ConfigurationError(f"Duration must be positive, got: {value!r}")
        return seconds

    @staticmethod
    def build_run_config(
        timeout: str | float, log_level: str, disable_filtering: bool = False
    ) -> RunConfig:
        try:
            return RunConfig(
                timeout=ConfigValidator.parse_duration(timeout),
                log_level=log_level,
                disable_filtering=disable_filtering,
            )
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
