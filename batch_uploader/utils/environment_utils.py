"""
Environment utility functions for configuration and machine identity.
"""

import getpass
import os
import socket
import uuid
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class MachineIdentity:
    """Identity of the host running the uploader, recorded in audit rows."""

    hostname: str
    ipv4_address: str
    mac_address: str
    os_user: str


def get_environment() -> str:
    """Get current environment (prod/test)."""
    return os.getenv("ENVIRONMENT", "prod").lower()


def get_run_id() -> str:
    """Identifier of this run, used in log lines."""
    return os.getenv("RUN_ID", "local")


def format_mac_address(node: int) -> str:
    """Format a 48-bit hardware address as AA-BB-CC-DD-EE-FF."""
    raw = f"{node:012X}"
    return "-".join(raw[i : i + 2] for i in range(0, 12, 2))


def get_machine_identity() -> MachineIdentity:
    """Collect hostname, IPv4, MAC and OS user of this machine."""
    hostname = socket.gethostname()
    try:
        ipv4_address = socket.gethostbyname(hostname)
    except OSError:
        ipv4_address = "127.0.0.1"

    try:
        os_user = getpass.getuser()
    except (KeyError, OSError):
        os_user = os.getenv("USERNAME", "unknown")

    return MachineIdentity(
        hostname=hostname,
        ipv4_address=ipv4_address,
        mac_address=format_mac_address(uuid.getnode()),
        os_user=os_user,
    )


def mask_sensitive_value(value: str, mask_char: str = "*") -> str:
    """Mask sensitive values for logging."""
    if not value or len(value) <= 4:
        return mask_char * len(value) if value else ""
    return value[:2] + mask_char * (len(value) - 4) + value[-2:]


def log_environment_variables(logger, sensitive_vars: Optional[list] = None) -> None:
    """Log environment variables for debugging."""
    if sensitive_vars is None:
        sensitive_vars = [
            "DB_PASSWORD",
            "REPOSITORY_PASSWORD",
            "SECRET_KEY",
        ]

    for var in sorted(os.environ):
        if var.startswith(("DB_", "REPOSITORY_", "THREAD_", "SECRET_")) or var.endswith(
            "_DIR"
        ):
            value = os.environ[var]
            if var in sensitive_vars:
                logger.info(f"Environment variable {var}: {mask_sensitive_value(value)}")
            else:
                logger.info(f"Environment variable {var}: {value}")


def get_environment_info() -> Dict[str, str]:
    """Get environment information for the startup banner."""
    identity = get_machine_identity()
    return {
        "environment": get_environment(),
        "run_id": get_run_id(),
        "hostname": identity.hostname,
        "os_user": identity.os_user,
    }
