# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Per-device test orchestration: feature registry, testers and result store.
"""

from . import (
    orchestrator,  # noqa: F401
    registry,  # noqa: F401
    results,  # noqa: F401
    tester,  # noqa: F401
)

# Register the feature procedures with the global registry
import features  # noqa: F401, E402
