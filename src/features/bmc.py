# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
BMC and boot configuration feature tests.

Both features change device state, so they are reported as not implemented
rather than passing without touching the BMC.
"""

from common.client import BMCClient
from common.context import Context
from harness.registry import Feature, FeatureNotImplemented, registry


@registry.register(Feature.BMC_RESET)
def bmc_reset(ctx: Context, client: BMCClient) -> str:
    raise FeatureNotImplemented(Feature.BMC_RESET.value, "BMC resets are not exercised")


@registry.register(Feature.BOOT_DEVICE_SET)
def boot_device_set(ctx: Context, client: BMCClient) -> str:
    raise FeatureNotImplemented(
        Feature.BOOT_DEVICE_SET.value, "boot overrides are not exercised"
    )
