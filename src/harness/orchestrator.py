# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Runs device testers concurrently and collects their results.
"""

import logging
import threading

from common.context import Context
from common.validation import DeviceConfig, TestsConfig

from .results import DeviceResult, ResultStore
from .tester import Tester

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Starts one tester thread per device under a shared deadline.

    Results are saved to the store as each device finishes, so the returned
    list is in completion order.
    """

    def __init__(self, tester_factory=None) -> None:
        self.tester_factory = tester_factory or Tester

    def _run_device(
        self,
        ctx: Context,
        tests: TestsConfig,
        device: DeviceConfig,
        tester: Tester,
        store: ResultStore,
    ) -> None:
        try:
            tester.run(ctx, tests)
        except Exception as e:
            logger.error(f"[{device.bmc_host}] tester aborted: {e}")
        finally:
            store.save(
                DeviceResult(
                    vendor=device.vendor,
                    model=device.model,
                    name=device.name,
                    bmc_ip=device.bmc_host,
                    results=tester.results(),
                )
            )

    def run_all(
        self,
        ctx: Context,
        tests: TestsConfig,
        devices: list[DeviceConfig],
        timeout: float,
        disable_filtering: bool = False,
    ) -> list[DeviceResult]:
        ctx = ctx.with_timeout(timeout)
        store = ResultStore()
        threads = []

        for device in devices:
            tester = self.tester_factory(
                device.bmc_host,
                device.bmc_user,
                device.bmc_pass,
                device.ipmi_port,
                disable_filtering=disable_filtering,
            )
            thread = threading.Thread(
                target=self._run_device,
                args=(ctx, tests, device, tester, store),
                name=f"tester-{device.bmc_host}",
                daemon=True,
            )
            threads.append(thread)
            thread.start()

        logger.info(f"waiting for tests to complete on {len(threads)} devices...")

        for thread in threads:
            thread.join()

        return store.read()


def run_all(
    ctx: Context,
    tests: TestsConfig,
    devices: list[DeviceConfig],
    timeout: float,
    disable_filtering: bool = False,
) -> list[DeviceResult]:
    """Test every device concurrently and return the merged results."""
    return Orchestrator().run_all(ctx, tests, devices, timeout, disable_filtering)
