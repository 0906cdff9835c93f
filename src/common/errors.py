# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Exceptions raised by the BMC client and its drivers.
"""


class BMCError(Exception):
    """Base class for BMC client errors."""

    pass


class ConnectionOpenError(BMCError):
    """Raised when no driver could open a connection to the BMC."""

    pass


class ProviderError(BMCError):
    """Raised when a driver fails to perform an operation."""

    pass


class FeatureNotSupported(BMCError):
    """Raised when no opened driver implements the requested feature."""

    pass
