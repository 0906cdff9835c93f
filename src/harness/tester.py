# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Device tester: runs the configured feature tests against a single BMC.
"""

import logging
import time
from collections.abc import Callable

from common.client import BMCClient
from common.context import Context
from common.validation import TestsConfig

from .registry import FeatureNotImplemented, FeatureRegistry, ResolvedTest, registry
from .results import (
    STATUS_FAILED,
    STATUS_NOT_IMPLEMENTED,
    STATUS_PASSED,
    TestResult,
)

logger = logging.getLogger(__name__)

LOGIN_TIMEOUT = 60.0
LOGOUT_TIMEOUT = 60.0

ClientFactory = Callable[..., BMCClient]


class Tester:
    """
    Runs tests on one device.

    The tester exclusively owns its client and its result list. Errors are
    recorded in the results; `run` never raises for device or test failures.
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        bmc_host: str,
        bmc_user: str,
        bmc_pass: str,
        bmc_port: str,
        disable_filtering: bool = False,
        feature_registry: FeatureRegistry | None = None,
        client_factory: ClientFactory = BMCClient,
    ) -> None:
        self.bmc_host = bmc_host
        self.bmc_user = bmc_user
        self.bmc_pass = bmc_pass
        self.bmc_port = bmc_port
        self.disable_filtering = disable_filtering
        self.registry = feature_registry or registry
        self.client_factory = client_factory
        self.tests: list[ResolvedTest] = []
        self._results: list[TestResult] = []

    def _init_tests(self, tests: TestsConfig) -> None:
        if not tests.provider:
            raise ValueError("no bmclib Provider defined in configuration")
        if not tests.protocol:
            raise ValueError("no bmclib Protocol defined in configuration")
        self.tests = self.registry.resolve(tests.features)

    def _new_client(self, provider: str, protocol: str) -> BMCClient:
        client = self.client_factory(
            self.bmc_host,
            self.bmc_port,
            self.bmc_user,
            self.bmc_pass,
            per_provider_timeout=LOGIN_TIMEOUT,
        )
        if not self.disable_filtering:
            client.using(protocol)
        return client.prefer(provider)

    def run(self, ctx: Context, tests: TestsConfig) -> None:
        """Run all configured tests; results are available from `results()`."""
        try:
            self._init_tests(tests)
        except (KeyError, ValueError) as e:
            logger.error(f"[{self.bmc_host}] tester init error: {e}")
            return

        client = self._new_client(tests.provider, tests.protocol)
        try:
            try:
                client.open(ctx)
            except Exception as e:
                logger.warning(f"[{self.bmc_host}] failed to open connection: {e}")
                providers = client.metadata.providers_attempted
                for test in self.tests:
                    self._results.append(
                        TestResult(
                            feature=test.feature,
                            protocol=tests.protocol,
                            providers_attempted=list(providers),
                            error=str(e),
                        )
                    )
                return

            for test in self.tests:
                self._results.append(self._run_test(ctx, client, test, tests.protocol))
        finally:
            self._close(client)

    def _run_test(
        self, ctx: Context, client: BMCClient, test: ResolvedTest, protocol: str
    ) -> TestResult:
        logger.debug(f"[{self.bmc_host}] running test feature={test.feature}")
        start = time.monotonic()
        output = ""
        error = ""
        status = STATUS_PASSED

        try:
            ctx.check()
            output = test.procedure(ctx, client) or ""
        except FeatureNotImplemented as e:
            error = str(e)
            status = STATUS_NOT_IMPLEMENTED
        except Exception as e:
            error = str(e) or type(e).__name__
            status = STATUS_FAILED

        runtime = time.monotonic() - start
        if status == STATUS_PASSED:
            logger.debug(f"[{self.bmc_host}] test successful feature={test.feature}")
        else:
            logger.debug(
                f"[{self.bmc_host}] test {status} feature={test.feature}: {error}"
            )

        metadata = client.metadata
        return TestResult(
            feature=test.feature,
            protocol=protocol,
            providers_attempted=list(metadata.providers_attempted),
            successful_provider=metadata.successful_provider,
            output=output,
            error=error,
            succeeded=status == STATUS_PASSED,
            status=status,
            runtime=runtime,
        )

    def _close(self, client: BMCClient) -> None:
        # Detached from the run context so teardown runs after its deadline
        ctx = Context.background().with_timeout(LOGOUT_TIMEOUT)
        try:
            client.close(ctx)
        except Exception as e:
            logger.warning(f"[{self.bmc_host}] failed to close connection: {e}")

    def results(self) -> list[TestResult]:
        return list(self._results)
