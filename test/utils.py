# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Test utilities and helper functions for the bmc-tester test suite.
"""

import os
import time
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import yaml

from common.client import BMCClient
from common.drivers import Driver, Feature


class FakeDriver(Driver):
    """In-memory driver with scripted behaviour."""

    features = frozenset({Feature.POWER_STATE.value, Feature.USER_READ.value})

    def __init__(
        self,
        host: str = "10.0.0.1",
        port: str = "623",
        username: str = "admin",
        password: str = "secret",
        timeout: float = 30.0,
        name: str = "ipmitool",
        protocol: str = "ipmi",
        open_error: Exception | None = None,
        close_error: Exception | None = None,
        power: str = "on",
        power_error: Exception | None = None,
        users: str = '[{"name": "admin"}]',
        delay: float = 0.0,
    ) -> None:
        super().__init__(host, port, username, password, timeout)
        self.name = name
        self.protocol = protocol
        self.open_error = open_error
        self.close_error = close_error
        self.power = power
        self.power_error = power_error
        self.users = users
        self.delay = delay
        self.open_calls = 0
        self.close_calls = 0
        self.close_contexts: list[Any] = []
        self.operations: list[str] = []

    def open(self, ctx) -> None:
        self.open_calls += 1
        if self.open_error:
            raise self.open_error

    def close(self, ctx) -> None:
        self.close_calls += 1
        self.close_contexts.append(ctx)
        if self.close_error:
            raise self.close_error

    def power_state(self, ctx) -> str:
        self.operations.append("power_state")
        if self.delay:
            time.sleep(self.delay)
        if self.power_error:
            raise self.power_error
        return self.power

    def read_users(self, ctx) -> str:
        self.operations.append("read_users")
        return self.users


class FakeClientFactory:
    """
    Client factory for testers that builds clients on FakeDrivers.

    Driver options can be given per host; created clients are recorded.
    """

    def __init__(self, per_host: dict[str, list[dict]] | None = None, **defaults):
        self.per_host = per_host or {}
        self.defaults = defaults
        self.clients: list[BMCClient] = []
        self.drivers: dict[str, list[FakeDriver]] = {}

    def __call__(self, host, port, username, password, per_provider_timeout=60.0):
        specs = self.per_host.get(host, [self.defaults])
        drivers = [
            FakeDriver(host, port, username, password, **spec) for spec in specs
        ]
        client = BMCClient(
            host, port, username, password, per_provider_timeout, drivers=drivers
        )
        self.clients.append(client)
        self.drivers[host] = drivers
        return client


def create_mock_redfish_response(data: dict[str, Any], status: int = 200) -> MagicMock:
    """Create a mock Redfish response object."""
    mock_response = MagicMock()
    mock_response.status = status
    mock_response.dict = data
    return mock_response


def create_mock_redfish_client(resources: dict[str, dict[str, Any]]) -> MagicMock:
    """Create a mock Redfish client serving the given resources by path."""
    mock_client = MagicMock()
    mock_client.login.return_value = None
    mock_client.logout.return_value = None

    def get(path):
        if path in resources:
            return create_mock_redfish_response(resources[path])
        return create_mock_redfish_response({"error": "not found"}, status=404)

    mock_client.get.side_effect = get
    return mock_client


def write_yaml(path: Path, data: Any) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class MockEnvironment:
    """Context manager for temporarily setting environment variables in tests."""

    def __init__(self, env_vars: dict[str, str]):
        self.env_vars = env_vars
        self.original_values = {}

    def __enter__(self):
        for key, value in self.env_vars.items():
            self.original_values[key] = os.environ.get(key)
            os.environ[key] = value
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        for key in self.env_vars:
            original_value = self.original_values[key]
            if original_value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = original_value
