# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Power related feature tests.
"""

import logging

from common.client import BMCClient
from common.context import Context
from harness.registry import Feature, FeatureNotImplemented, registry

logger = logging.getLogger(__name__)


@registry.register(Feature.POWER_STATE)
def power_state(ctx: Context, client: BMCClient) -> str:
    """Read the chassis power state, e.g. "on" or "off"."""
    state = client.get_power_state(ctx)
    logger.debug(f"Power state of {client.host}: {state}")
    return state


@registry.register(Feature.POWER_SET)
def power_set(ctx: Context, client: BMCClient) -> str:
    raise FeatureNotImplemented(
        Feature.POWER_SET.value, "changing power state is not exercised"
    )
