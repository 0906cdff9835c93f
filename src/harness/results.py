# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Test result model, thread-safe result store and JSON report codec.
"""

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

STATUS_PASSED = "passed"
STATUS_FAILED = "failed"
STATUS_NOT_IMPLEMENTED = "not_implemented"


@dataclass(frozen=True)
class TestResult:
    """Outcome of one feature test on one device."""

    __test__ = False  # not a pytest test class

    feature: str
    protocol: str
    providers_attempted: tuple[str, ...] = ()
    successful_provider: str = ""
    output: str = ""
    error: str = ""
    succeeded: bool = False
    status: str = STATUS_FAILED
    runtime: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "providers_attempted", tuple(self.providers_attempted))

    def to_dict(self) -> dict[str, Any]:
        return {
            "Feature": self.feature,
            "Protocol": self.protocol,
            "ProvidersAttempted": list(self.providers_attempted),
            "SuccessfulProvider": self.successful_provider,
            "Output": self.output,
            "Error": self.error,
            "Succeeded": self.succeeded,
            "Status": self.status,
            "Runtime": self.runtime,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TestResult":
        return cls(
            feature=data["Feature"],
            protocol=data.get("Protocol", ""),
            providers_attempted=data.get("ProvidersAttempted") or (),
            successful_provider=data.get("SuccessfulProvider", ""),
            output=data.get("Output", ""),
            error=data.get("Error", ""),
            succeeded=bool(data.get("Succeeded", False)),
            status=data.get("Status", STATUS_FAILED),
            runtime=float(data.get("Runtime", 0.0)),
        )


@dataclass(frozen=True)
class DeviceResult:
    """All test results for a single device."""

    vendor: str
    model: str
    name: str
    bmc_ip: str
    results: tuple[TestResult, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", tuple(self.results))

    def to_dict(self) -> dict[str, Any]:
        return {
            "Vendor": self.vendor,
            "Model": self.model,
            "Name": self.name,
            "BMCIP": self.bmc_ip,
            "Results": [r.to_dict() for r in self.results],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeviceResult":
        return cls(
            vendor=data.get("Vendor", ""),
            model=data.get("Model", ""),
            name=data.get("Name", ""),
            bmc_ip=data.get("BMCIP", ""),
            results=[TestResult.from_dict(r) for r in data.get("Results") or []],
        )


class ResultStore:
    """Append-only collection of device results, safe for concurrent use."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._results: list[DeviceResult] = []

    def save(self, result: DeviceResult) -> None:
        with self._lock:
            self._results.append(result)
        logger.debug(f"Saved results for device {result.name} ({result.bmc_ip})")

    def read(self) -> list[DeviceResult]:
        """Return a snapshot of the results saved so far."""
        with self._lock:
            return list(self._results)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)


def report_to_json(results: list[DeviceResult], bmclib_version: str = "") -> str:
    """Serialize device results into the report document."""
    document = {
        "bmclib_version": bmclib_version,
        "results": [r.to_dict() for r in results],
    }
    return json.dumps(document, indent=" ")


def report_from_json(text: str) -> tuple[str, list[DeviceResult]]:
    """Parse a report document back into its version and device results."""
    document = json.loads(text)
    if not isinstance(document, dict):
        raise ValueError("Report must be a JSON object")
    results = [DeviceResult.from_dict(r) for r in document.get("results") or []]
    return document.get("bmclib_version", ""), results
