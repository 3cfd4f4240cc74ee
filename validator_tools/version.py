"""Version info for validator-tools."""

import os
import platform
from importlib.metadata import PackageNotFoundError, version as package_version

PACKAGE_NAME = "validator-tools"


def get_version() -> str:
    """Installed package version, or VALIDATOR_TOOLS_VERSION when not installed."""
    try:
        return package_version(PACKAGE_NAME)
    except PackageNotFoundError:
        return os.environ.get("VALIDATOR_TOOLS_VERSION", "0.1.0")


def get_commit() -> str:
    return os.environ.get("VALIDATOR_TOOLS_COMMIT", "")


def get_platform() -> str:
    return f"{platform.system().lower()}/{platform.machine().lower()}"
