"""Per-request negotiation of share and mount options."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from .errors import MissingMandatoryOptionsError, UnsupportedOptionsError
from .options import SLOPPY_MOUNT, OptionSet

logger = logging.getLogger(__name__)

# Reserved for required share parameters (e.g. a principal identity).
SHARE_MANDATORY: tuple[str, ...] = ()


def split_share(share: str) -> tuple[str, str]:
    base, _, query = share.partition("?")
    return base, query


def _dedupe(keys: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for key in keys:
        if key not in seen:
            seen.add(key)
            result.append(key)
    return result


class Negotiation:
    """Resolved options for a single mount request."""

    def __init__(self, share: OptionSet, mount: OptionSet, lenient: bool) -> None:
        self.share = share
        self.mount = mount
        self.lenient = lenient

    def rendered_share(self, share: str) -> str:
        base, _ = split_share(share)
        query = "&".join(self.share.make_params(""))
        if not query:
            return base
        return f"{base}?{query}"

    def rendered_mount_args(self) -> list[str]:
        return self.mount.make_params("--")

    def mount_config(self) -> dict[str, str]:
        return self.mount.make_config()


class NegotiationConfig:
    """Operator configuration for share and mount options.

    The base option sets built here are never modified; ``set_entries`` works
    on copies so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        allowed_in_source: str = "",
        default_in_source: str = "",
        allowed_in_mount: str = "",
        default_in_mount: str = "",
        mandatory_in_source: Iterable[str] = SHARE_MANDATORY,
        mandatory_in_mount: Iterable[str] = (),
    ) -> None:
        self._share = OptionSet.from_strings(
            allowed_in_source, default_in_source, mandatory=mandatory_in_source
        )
        self._mount = OptionSet.from_strings(
            allowed_in_mount,
            default_in_mount,
            mandatory=mandatory_in_mount,
            implicit=(SLOPPY_MOUNT,),
        )
        logger.debug(
            "negotiation config loaded share_allowed=%s share_forced=%s mount_allowed=%s mount_forced=%s",
            sorted(self._share.allowed),
            self._share.forced,
            sorted(self._mount.allowed),
            self._mount.forced,
        )

    @property
    def share(self) -> OptionSet:
        return self._share.copy()

    @property
    def mount(self) -> OptionSet:
        return self._mount.copy()

    def set_entries(
        self,
        share: str,
        request_options: Mapping[str, object],
        ignore_list: Iterable[str] = (),
    ) -> Negotiation:
        ignore_list = list(ignore_list)
        share_set = self._share.copy()
        mount_set = self._mount.copy()

        share_set.parse_map(request_options, ignore_list)
        mount_set.parse_map(request_options, ignore_list)

        accepted = set(ignore_list) | share_set.accepted_keys() | mount_set.accepted_keys()
        rejected = share_set.parse_url(share, ignore_list)
        lenient = mount_set.is_sloppy_mount()
        # The share side never toggles lenient mode; drop the key if present.
        share_set.is_sloppy_mount()

        rejected.extend(key for key in request_options if key not in accepted)
        rejected = _dedupe(rejected)

        if rejected:
            if not lenient:
                logger.warning("rejecting request: unsupported options %s", rejected)
                raise UnsupportedOptionsError(rejected)
            logger.info("sloppy mount: ignoring unsupported options %s", rejected)

        missing = share_set.missing_mandatory() + mount_set.missing_mandatory()
        if missing:
            logger.warning("rejecting request: missing mandatory options %s", missing)
            raise MissingMandatoryOptionsError(missing)

        return Negotiation(share_set, mount_set, lenient)
