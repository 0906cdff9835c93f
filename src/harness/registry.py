# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Feature registry: maps BMC feature names to the procedures that test them.

Procedures are registered with the `registry.register` decorator from the
`features` package and the registry is frozen by `validate()` at startup.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from types import MappingProxyType

from common.client import BMCClient
from common.context import Context
from common.drivers import Feature

logger = logging.getLogger(__name__)

# A procedure takes the run context and an open BMC client and returns the
# test output. Failures are raised.
Procedure = Callable[[Context, BMCClient], str]


class RegistryError(Exception):
    """Raised on invalid registrations or an incomplete registry."""

    pass


class FeatureNotImplemented(Exception):
    """Raised by procedures that deliberately do not exercise the BMC."""

    def __init__(self, feature: str, reason: str = "") -> None:
        message = f"test for {feature} is not implemented"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.feature = feature


class UnknownFeature(KeyError):
    """Raised when a tests file names a feature with no procedure."""

    def __init__(self, feature: str) -> None:
        super().__init__(feature)
        self.feature = feature

    def __str__(self) -> str:
        return f"unknown bmclib feature defined in test: {self.feature}"


@dataclass(frozen=True)
class ResolvedTest:
    """A feature name bound to its test procedure."""

    feature: str
    procedure: Procedure


class FeatureRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._procedures: dict[str, Procedure] = {}
        self._frozen = False

    def register(self, feature: Feature | str) -> Callable[[Procedure], Procedure]:
        """Decorator binding a procedure to a feature."""
        name = Feature(feature).value

        def decorator(procedure: Procedure) -> Procedure:
            with self._lock:
                if self._frozen:
                    raise RegistryError(
                        f"Cannot register {name}: registry is frozen"
                    )
                if name in self._procedures:
                    raise RegistryError(f"Feature {name} is already registered")
                self._procedures[name] = procedure
            logger.debug(f"Registered test procedure for feature {name}")
            return procedure

        return decorator

    def validate(self) -> None:
        """Check every feature has a procedure, then freeze the registry."""
        with self._lock:
            if self._frozen:
                return
            missing = [f.value for f in Feature if f.value not in self._procedures]
            if missing:
                raise RegistryError(
                    f"No test procedure registered for: {', '.join(missing)}"
                )
            self._procedures = MappingProxyType(dict(self._procedures))  # type: ignore[assignment]
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def features(self) -> list[str]:
        return list(self._procedures)

    def resolve(self, names: Iterable[str]) -> list[ResolvedTest]:
        """
        Resolve feature names into tests, preserving order.

        Raises:
            UnknownFeature: if any name has no registered procedure. Nothing
                is returned in that case.
        """
        resolved = []
        for name in names:
            procedure = self._procedures.get(name)
            if procedure is None:
                raise UnknownFeature(name)
            resolved.append(ResolvedTest(feature=name, procedure=procedure))
        return resolved


registry = FeatureRegistry()
