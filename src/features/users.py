# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

from common.client import BMCClient
from common.context import Context
from harness.registry import Feature, registry


@registry.register(Feature.USER_READ)
def user_read(ctx: Context, client: BMCClient) -> str:
    """List the BMC user accounts."""
    return client.read_users(ctx)
