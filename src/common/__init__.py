# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Common modules for the BMC tester.
Exposes submodules for easy access.
"""

from . import (
    client,  # noqa: F401
    config,  # noqa: F401
    context,  # noqa: F401
    validation,  # noqa: F401
)
