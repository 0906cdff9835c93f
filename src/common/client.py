# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Multi-provider BMC client.

The client holds an ordered list of drivers. Opening tries each driver and
keeps the ones that connect; operations run on the opened drivers in order
until one succeeds. Which drivers were tried and which one answered is
exposed through `metadata`.
"""

import logging
from dataclasses import dataclass, field

from .context import Context, DeadlineExceeded
from .drivers import DEFAULT_REQUEST_TIMEOUT, Driver, Feature, default_drivers
from .errors import (
    BMCError,
    ConnectionOpenError,
    FeatureNotSupported,
    ProviderError,
)

logger = logging.getLogger(__name__)


@dataclass
class ClientMetadata:
    """Provider bookkeeping for the most recent client calls."""

    providers_attempted: list[str] = field(default_factory=list)
    successful_provider: str = ""
    successful_open_conns: list[str] = field(default_factory=list)
    successful_close_conns: list[str] = field(default_factory=list)
    failed_provider_detail: dict[str, str] = field(default_factory=dict)

    def copy(self) -> "ClientMetadata":
        return ClientMetadata(
            providers_attempted=list(self.providers_attempted),
            successful_provider=self.successful_provider,
            successful_open_conns=list(self.successful_open_conns),
            successful_close_conns=list(self.successful_close_conns),
            failed_provider_detail=dict(self.failed_provider_detail),
        )


class BMCClient:
    def __init__(
        self,
        host: str,
        port: str,
        username: str,
        password: str,
        per_provider_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        drivers: list[Driver] | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.per_provider_timeout = per_provider_timeout
        if drivers is None:
            drivers = default_drivers(
                host, port, username, password, per_provider_timeout
            )
        self.drivers = list(drivers)
        self._opened: list[Driver] = []
        self._metadata = ClientMetadata()

    def using(self, protocol: str) -> "BMCClient":
        """Restrict the drivers to those speaking `protocol`."""
        self.drivers = [d for d in self.drivers if d.protocol == protocol]
        return self

    def prefer(self, provider: str) -> "BMCClient":
        """Move the named provider to the front, keeping the others in order."""
        self.drivers.sort(key=lambda d: d.name != provider)
        return self

    @property
    def metadata(self) -> ClientMetadata:
        return self._metadata.copy()

    @property
    def is_open(self) -> bool:
        return bool(self._opened)

    def open(self, ctx: Context) -> None:
        """
        Open a connection with every eligible driver.

        Each driver gets at most `per_provider_timeout` seconds.

        Raises:
            ConnectionOpenError: if no driver could connect.
        """
        self._metadata = ClientMetadata()
        if not self.drivers:
            raise ConnectionOpenError(f"no drivers available for {self.host}")

        for driver in self.drivers:
            self._metadata.providers_attempted.append(driver.name)
            try:
                driver.open(ctx.with_timeout(self.per_provider_timeout))
            except Exception as e:
                logger.warning(f"Provider {driver.name} failed to open {self.host}: {e}")
                self._metadata.failed_provider_detail[driver.name] = str(e)
                continue
            self._opened.append(driver)
            self._metadata.successful_open_conns.append(driver.name)
            logger.debug(f"Provider {driver.name} opened {self.host}")

        if not self._opened:
            details = "; ".join(
                f"{name}: {error}"
                for name, error in self._metadata.failed_provider_detail.items()
            )
            raise ConnectionOpenError(f"failed to open connection: {details}")

    def close(self, ctx: Context) -> None:
        """Close every opened driver; raises BMCError if any close failed."""
        errors = []
        for driver in self._opened:
            try:
                driver.close(ctx)
            except Exception as e:
                errors.append(f"{driver.name}: {e}")
                self._metadata.failed_provider_detail[driver.name] = str(e)
            else:
                self._metadata.successful_close_conns.append(driver.name)
        self._opened = []
        if errors:
            raise BMCError(f"failed to close connection: {'; '.join(errors)}")

    def _execute(self, ctx: Context, feature: Feature, operation: str):
        if not self._opened:
            raise BMCError("connection is not open")

        errors = []
        for driver in self._opened:
            if feature.value not in driver.features:
                continue
            ctx.check()
            try:
                result = getattr(driver, operation)(ctx)
            except DeadlineExceeded:
                raise
            except Exception as e:
                logger.debug(f"Provider {driver.name} failed {feature.value}: {e}")
                errors.append(f"{driver.name}: {e}")
                self._metadata.failed_provider_detail[driver.name] = str(e)
                continue
            self._metadata.successful_provider = driver.name
            return result

        if not errors:
            raise FeatureNotSupported(
                f"no opened provider implements {feature.value}"
            )
        raise ProviderError(f"{feature.value} failed: {'; '.join(errors)}")

    def get_power_state(self, ctx: Context) -> str:
        return self._execute(ctx, Feature.POWER_STATE, "power_state")

    def read_users(self, ctx: Context) -> str:
        return self._execute(ctx, Feature.USER_READ, "read_users")
