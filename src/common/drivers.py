# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
BMC drivers: thin adapters over the Redfish library and the ipmitool binary.
"""

import json
import logging
import os
import shutil
import subprocess
from enum import Enum
from typing import Any

import redfish
from redfish.rest.v1 import AuthMethod, ServerDownOrUnreachableError

# Using tenacity for retry logic
from tenacity import (
    Retrying,
    before_sleep_log,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_random_exponential,
)

from .context import DeadlineExceeded
from .errors import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0


class Feature(str, Enum):
    """BMC features a driver can implement."""

    POWER_STATE = "powerState"
    POWER_SET = "powerSet"
    BOOT_DEVICE_SET = "bootDeviceSet"
    BMC_RESET = "bmcReset"
    USER_READ = "userRead"


def get_retry_configuration(ctx: Any = None) -> dict[str, Any]:
    """Get consistent retry configuration from environment variables."""
    max_retries = int(os.getenv("BMC_TESTER_MAX_RETRIES", "2"))
    initial_delay = float(os.getenv("BMC_TESTER_INITIAL_DELAY", "1.0"))
    max_delay = float(os.getenv("BMC_TESTER_MAX_DELAY", "10.0"))
    backoff_factor = float(os.getenv("BMC_TESTER_BACKOFF_FACTOR", "2.0"))
    jitter = os.getenv("BMC_TESTER_JITTER", "true").lower() == "true"

    # Configure wait strategy with backoff factor and optional jitter
    wait_strategy: wait_exponential | wait_random_exponential
    if jitter:
        wait_strategy = wait_random_exponential(
            multiplier=initial_delay, max=max_delay, exp_base=backoff_factor
        )
    else:
        wait_strategy = wait_exponential(
            multiplier=initial_delay, max=max_delay, exp_base=backoff_factor
        )

    # +1 because MAX_RETRIES means "retries after initial attempt"
    stop = stop_after_attempt(max_retries + 1)
    remaining = ctx.remaining() if ctx is not None else None
    if remaining is not None:
        stop = stop | stop_after_delay(remaining)

    return {
        "stop": stop,
        "wait": wait_strategy,
        "retry": should_retry_bmc_exception,
        "reraise": True,
    }


def should_retry_bmc_exception(retry_state) -> bool:
    """Retry on network/connection errors but not on driver or deadline errors."""
    if (
        hasattr(retry_state, "outcome")
        and retry_state.outcome
        and retry_state.outcome.exception()
    ):
        exception = retry_state.outcome.exception()
    else:
        return False

    # DeadlineExceeded is a TimeoutError but the run is over
    if isinstance(exception, DeadlineExceeded | ProviderError):
        return False

    return isinstance(
        exception, ConnectionError | TimeoutError | ServerDownOrUnreachableError
    )


class Driver:
    """
    Base class for BMC drivers.

    Drivers are owned by a single client and are never shared across threads.
    """

    name = ""
    protocol = ""
    features: frozenset[str] = frozenset()

    def __init__(
        self,
        host: str,
        port: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout

    def call(self, ctx, fn, *args, **kwargs):
        """Run `fn` with retries, giving up at the context deadline."""
        ctx.check()
        retrying = Retrying(
            **get_retry_configuration(ctx),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        return retrying(fn, *args, **kwargs)

    def open(self, ctx) -> None:
        raise NotImplementedError

    def close(self, ctx) -> None:
        raise NotImplementedError

    def power_state(self, ctx) -> str:
        raise NotImplementedError

    def read_users(self, ctx) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.host!r})"


class IpmitoolDriver(Driver):
    """IPMI over LAN through the ipmitool executable."""

    name = "ipmitool"
    protocol = "ipmi"
    features = frozenset({Feature.POWER_STATE.value, Feature.USER_READ.value})

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.binary: str | None = None

    def _exec(self, ctx, *args: str) -> str:
        command = [
            self.binary or "ipmitool",
            "-I",
            "lanplus",
            "-H",
            self.host,
            "-p",
            self.port,
            "-U",
            self.username,
            "-E",
            *args,
        ]
        env = {**os.environ, "IPMI_PASSWORD": self.password}
        logger.debug(f"Running ipmitool {' '.join(args)} against {self.host}")

        try:
            proc = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=ctx.bound(self.timeout),
                env=env,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise TimeoutError(f"ipmitool {' '.join(args)} timed out") from e
        except OSError as e:
            raise ProviderError(f"Failed to run ipmitool: {e}") from e

        if proc.returncode != 0:
            detail = proc.stderr.strip() or f"exit status {proc.returncode}"
            raise ProviderError(f"ipmitool {' '.join(args)} failed: {detail}")
        return proc.stdout

    def open(self, ctx) -> None:
        self.binary = shutil.which("ipmitool")
        if not self.binary:
            raise ProviderError("ipmitool executable not found in PATH")
        self.call(ctx, self._exec, ctx, "mc", "info")
        logger.info(f"ipmitool session check succeeded for {self.host}")

    def close(self, ctx) -> None:
        # lanplus sessions are per invocation
        self.binary = None

    def power_state(self, ctx) -> str:
        output = self.call(ctx, self._exec, ctx, "chassis", "power", "status")
        # "Chassis Power is on"
        return output.strip().rsplit(" ", 1)[-1].lower()

    def read_users(self, ctx) -> str:
        return self.call(ctx, self._exec, ctx, "user", "list", "1").strip()


class RedfishDriver(Driver):
    """
    Redfish through the DMTF redfish library.

    Registered under the provider name "gofish" used by test configurations.
    """

    name = "gofish"
    protocol = "redfish"
    features = frozenset({Feature.POWER_STATE.value, Feature.USER_READ.value})

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.client = None

    def _login(self, timeout: float):
        base_url = f"https://{self.host}"
        logger.info(f"Setting up Redfish client for {base_url}")
        client = redfish.redfish_client(
            base_url=base_url,
            username=self.username,
            password=self.password,
            default_prefix="/redfish/v1",
            timeout=timeout,
            max_retry=1,
        )
        client.login(auth=AuthMethod.SESSION)
        return client

    def open(self, ctx) -> None:
        try:
            self.client = self.call(ctx, self._login, ctx.bound(self.timeout))
        except TimeoutError:
            raise
        except Exception as e:
            logger.error(f"Failed to create Redfish client: {e}")
            raise ProviderError(f"Failed to create Redfish client: {e}") from e
        logger.info("Redfish client setup completed successfully")

    def close(self, ctx) -> None:
        """Logout from Redfish session."""
        if self.client:
            try:
                self.client.logout()
                logger.info("Redfish client logged out successfully")
            finally:
                self.client = None

    def _request(self, resource_path: str) -> dict[str, Any]:
        if not self.client:
            raise ProviderError("Redfish client not initialized")

        logger.debug(f"Performing GET request for resource: {resource_path}")
        response = self.client.get(resource_path)
        if response is None:
            raise ProviderError("Redfish GET request returned None")
        if response.status >= 400:
            raise ProviderError(
                f"Redfish GET {resource_path} returned status {response.status}"
            )
        return response.dict

    def get(self, ctx, resource_path: str) -> dict[str, Any]:
        """Get resource data with retry logic."""
        return self.call(ctx, self._request, resource_path)

    def _members(self, ctx, collection: str) -> list[str]:
        data = self.get(ctx, collection)
        return [m["@odata.id"] for m in data.get("Members", []) if "@odata.id" in m]

    def power_state(self, ctx) -> str:
        systems = self._members(ctx, "/redfish/v1/Systems")
        if not systems:
            raise ProviderError("No computer systems found")
        system = self.get(ctx, systems[0])
        state = system.get("PowerState")
        if not state:
            raise ProviderError(f"{systems[0]} has no PowerState")
        return state.lower()

    def read_users(self, ctx) -> str:
        users = []
        for account in self._members(ctx, "/redfish/v1/AccountService/Accounts"):
            data = self.get(ctx, account)
            if not data.get("UserName"):
                continue
            users.append(
                {
                    "name": data["UserName"],
                    "role": data.get("RoleId", ""),
                    "enabled": data.get("Enabled", False),
                }
            )
        return json.dumps(users)


DRIVERS: list[type[Driver]] = [IpmitoolDriver, RedfishDriver]


def default_drivers(
    host: str,
    port: str,
    username: str,
    password: str,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> list[Driver]:
    """Instantiate every known driver for one device."""
    return [cls(host, port, username, password, timeout) for cls in DRIVERS]
