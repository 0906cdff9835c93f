# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Test procedures for BMC features.
Imports all procedure modules to register them with the feature registry.
"""

# Import all procedure modules to register them with the registry
from . import (
    bmc,  # noqa: F401
    power,  # noqa: F401
    users,  # noqa: F401
)
