# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Main entry point for the BMC tester.
Loads the tests and hardware files and runs the configured feature tests.
"""

import json
import logging
import sys
from importlib import metadata

import click

import features  # noqa: F401
from common.config import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_TIMEOUT,
    load_hardware_config,
    load_tests_config,
)
from common.context import Context
from common.validation import ConfigurationError, ConfigValidator
from harness.orchestrator import run_all
from harness.registry import registry
from harness.results import report_to_json

logger = logging.getLogger(__name__)


def configure_logging(log_level: str) -> None:
    # Configure logging to stderr, stdout carries the JSON documents
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
        force=True,
    )


def fatal(message: str) -> None:
    logger.critical(message)
    sys.exit(1)


def bmclib_version() -> str:
    """Version of the installed Redfish library, empty when unknown."""
    try:
        return metadata.version("redfish")
    except metadata.PackageNotFoundError:
        return ""


def load_configs(tests_file: str, hardware_file: str):
    registry.validate()
    tests = load_tests_config(tests_file, registry.features())
    hardware = load_hardware_config(hardware_file)
    return tests, hardware


@click.group()
def cli():
    """Test bmclib style BMC features against a fleet of servers."""
    pass


@cli.command("list")
@click.option("--tests", "tests_file", required=True, help="YAML file with test configuration")
@click.option("--hardware", "hardware_file", required=True, help="YAML file with hardware configuration")
def list_tests(tests_file, hardware_file):
    """List tests configured."""
    configure_logging(DEFAULT_LOG_LEVEL)
    try:
        tests, hardware = load_configs(tests_file, hardware_file)
    except ConfigurationError as e:
        fatal(str(e))

    document = {"Hardware": hardware.to_dict(), "Tests": tests.to_dict()}
    click.echo(json.dumps(document, indent=" "))


@cli.command()
@click.option("--tests", "tests_file", required=True, help="YAML file with test configuration")
@click.option("--hardware", "hardware_file", required=True, help="YAML file with hardware configuration")
@click.option("--timeout", default=DEFAULT_TIMEOUT, show_default=True, help="Abort tests after timeout value")
@click.option("--log-level", default=DEFAULT_LOG_LEVEL, show_default=True, help="Log level")
@click.option(
    "--disable-filtering",
    is_flag=True,
    envvar="BMC_TESTER_DISABLE_FILTERING",
    help="Attempt every provider regardless of the configured protocol",
)
def run(tests_file, hardware_file, timeout, log_level, disable_filtering):
    """Run tests defined in --tests on the hardware defined in --hardware."""
    try:
        run_config = ConfigValidator.build_run_config(
            timeout, log_level, disable_filtering
        )
    except ConfigurationError as e:
        configure_logging(DEFAULT_LOG_LEVEL)
        fatal(str(e))

    configure_logging(run_config.log_level)
    try:
        tests, hardware = load_configs(tests_file, hardware_file)
    except ConfigurationError as e:
        fatal(str(e))

    results = run_all(
        Context.background(),
        tests,
        hardware.devices,
        run_config.timeout,
        disable_filtering=run_config.disable_filtering,
    )
    click.echo(report_to_json(results, bmclib_version()))


def main():
    """
    Main entry point for the BMC tester.
    """
    cli()


if __name__ == "__main__":
    main()
