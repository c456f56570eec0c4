"""Shared config defaults for the NFSv3 driver server and mount helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .negotiation import NegotiationConfig
from .options import split_list

DEFAULT_HOST = os.environ.get("NFSV3_LISTEN_HOST", "0.0.0.0")
DEFAULT_PORT = int(os.environ.get("NFSV3_LISTEN_PORT", "7589"))
DEFAULT_ALLOWED_IN_SOURCE = os.environ.get("NFSV3_ALLOWED_IN_SOURCE", "")
DEFAULT_DEFAULT_IN_SOURCE = os.environ.get("NFSV3_DEFAULT_IN_SOURCE", "")
DEFAULT_ALLOWED_IN_MOUNT = os.environ.get("NFSV3_ALLOWED_IN_MOUNT", "")
DEFAULT_DEFAULT_IN_MOUNT = os.environ.get("NFSV3_DEFAULT_IN_MOUNT", "")
DEFAULT_MANDATORY_IN_SOURCE = os.environ.get("NFSV3_MANDATORY_IN_SOURCE", "")
DEFAULT_MANDATORY_IN_MOUNT = os.environ.get("NFSV3_MANDATORY_IN_MOUNT", "")
DEFAULT_MOUNT_HELPER = os.environ.get("NFSV3_MOUNT_HELPER", "fuse-nfs")
DEFAULT_UNMOUNT_HELPER = os.environ.get("NFSV3_UNMOUNT_HELPER", "fusermount")
DEFAULT_CHECK_HELPER = os.environ.get("NFSV3_CHECK_HELPER", "mountpoint")
DEFAULT_CHECK_TIMEOUT = os.environ.get("NFSV3_CHECK_TIMEOUT")


def _parse_timeout(value: str | None, fallback: float) -> float:
    if value is None:
        return fallback
    try:
        return float(value)
    except ValueError:
        return fallback


DEFAULT_CHECK_TIMEOUT_VALUE = _parse_timeout(DEFAULT_CHECK_TIMEOUT, 5.0)


def debug_enabled() -> bool:
    return os.environ.get("NFSV3_DEBUG") == "1"


@dataclass(frozen=True)
class DriverConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    allowed_in_source: str = DEFAULT_ALLOWED_IN_SOURCE
    default_in_source: str = DEFAULT_DEFAULT_IN_SOURCE
    allowed_in_mount: str = DEFAULT_ALLOWED_IN_MOUNT
    default_in_mount: str = DEFAULT_DEFAULT_IN_MOUNT
    mandatory_in_source: str = DEFAULT_MANDATORY_IN_SOURCE
    mandatory_in_mount: str = DEFAULT_MANDATORY_IN_MOUNT
    mount_helper: str = DEFAULT_MOUNT_HELPER
    unmount_helper: str = DEFAULT_UNMOUNT_HELPER
    check_helper: str = DEFAULT_CHECK_HELPER
    check_timeout: float = DEFAULT_CHECK_TIMEOUT_VALUE

    def negotiation(self) -> NegotiationConfig:
        return NegotiationConfig(
            allowed_in_source=self.allowed_in_source,
            default_in_source=self.default_in_source,
            allowed_in_mount=self.allowed_in_mount,
            default_in_mount=self.default_in_mount,
            mandatory_in_source=split_list(self.mandatory_in_source),
            mandatory_in_mount=split_list(self.mandatory_in_mount),
        )
