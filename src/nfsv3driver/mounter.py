"""Mount, unmount and health-check of NFS shares through helper programs."""

from __future__ import annotations

import logging
import shlex
from typing import Iterable, Mapping

from .errors import InvocationError
from .invoker import Invoker
from .negotiation import NegotiationConfig

logger = logging.getLogger(__name__)

# Request keys consumed by the volume layer itself, never passed to helpers.
DEFAULT_IGNORED_KEYS = ("source", "mount", "readonly")


class Mounter:
    def __init__(
        self,
        invoker: Invoker,
        negotiation: NegotiationConfig,
        mount_helper: str = "fuse-nfs",
        unmount_helper: str = "fusermount",
        check_helper: str = "mountpoint",
        check_timeout: float = 5.0,
        ignored_keys: Iterable[str] = DEFAULT_IGNORED_KEYS,
    ) -> None:
        self.invoker = invoker
        self.negotiation = negotiation
        self.mount_helper = mount_helper
        self.unmount_helper = unmount_helper
        self.check_helper = check_helper
        self.check_timeout = check_timeout
        self.ignored_keys = tuple(ignored_keys)

    def mount_command(
        self,
        share: str,
        target: str,
        request_options: Mapping[str, object],
    ) -> list[str]:
        """Negotiate ``request_options`` and build the helper argument list."""
        rendered_share, mount_args = self.render(share, request_options)
        return self.helper_params(rendered_share, target, mount_args)

    @staticmethod
    def helper_params(rendered_share: str, target: str, mount_args: list[str]) -> list[str]:
        params = ["-n", rendered_share, "-m", target, *mount_args]
        if not mount_args:
            params.append("-a")
        return params

    def render(self, share: str, request_options: Mapping[str, object]) -> tuple[str, list[str]]:
        resolved = self.negotiation.set_entries(share, request_options, self.ignored_keys)
        return resolved.rendered_share(share), resolved.rendered_mount_args()

    def mount(self, share: str, target: str, request_options: Mapping[str, object]) -> None:
        logger.info("mount start target=%s", target)
        logger.debug("parse-mount share=%s target=%s options=%r", share, target, dict(request_options))
        params = self.mount_command(share, target, request_options)
        logger.debug("exec-mount %s %s", self.mount_helper, shlex.join(params))
        self.invoker.invoke(self.mount_helper, params)
        logger.info("mount end target=%s", target)

    def unmount(self, target: str) -> None:
        logger.info("unmount target=%s", target)
        self.invoker.invoke(self.unmount_helper, ["-u", target])

    def check(self, name: str, mount_point: str) -> bool:
        try:
            self.invoker.invoke(self.check_helper, ["-q", mount_point], timeout=self.check_timeout)
        except InvocationError as exc:
            logger.info("unable to verify volume %s (%s)", name, exc)
            return False
        return True
