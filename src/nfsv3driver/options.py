"""Allow-list / default option sets and their flag rendering."""

from __future__ import annotations

import re
from typing import Iterable, Mapping, Union

OptionValue = Union[bool, int, str]

SLOPPY_MOUNT = "sloppy_mount"

# Options whose boolean values are encoded as integers instead of true/false.
BOOLEAN_ENCODINGS: Mapping[str, tuple[str, str]] = {
    "auto-traverse-mounts": ("1", "0"),
    "dircache": ("1", "0"),
}
DEFAULT_BOOLEAN_ENCODING = ("true", "false")

_TRUE_TEXT = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_TEXT = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT16_MIN = -(1 << 15)
_INT16_MAX = (1 << 15) - 1


def parse_bool(text: str) -> bool | None:
    if text in _TRUE_TEXT:
        return True
    if text in _FALSE_TEXT:
        return False
    return None


def parse_int16(text: str) -> int | None:
    if not _INT_RE.fullmatch(text):
        return None
    value = int(text)
    if value < _INT16_MIN or value > _INT16_MAX:
        return None
    return value


def uniformize(key: str, value: object) -> str:
    """Return the canonical string form of a request value.

    Booleans are checked before integers because ``bool`` subclasses ``int``.
    Unsupported types map to ``""``, which callers treat as absent.
    """
    if isinstance(value, bool):
        true_text, false_text = BOOLEAN_ENCODINGS.get(key, DEFAULT_BOOLEAN_ENCODING)
        return true_text if value else false_text
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    return ""


class OptionSet:
    """Options for one target (share URL or mount command line).

    ``options`` holds allowed keys with their current value, ``forced`` holds
    operator defaults for keys callers may not set. The two never share a key.
    """

    def __init__(
        self,
        allowed: Iterable[str] = (),
        options: Mapping[str, str] | None = None,
        forced: Mapping[str, str] | None = None,
        mandatory: Iterable[str] = (),
        implicit: Iterable[str] = (),
    ) -> None:
        self.allowed = frozenset(allowed)
        self.options: dict[str, str] = dict(options or {})
        self.forced: dict[str, str] = dict(forced or {})
        self.mandatory = tuple(mandatory)
        # Control keys accepted from requests without appearing in the
        # allow-list, unless the operator has forced a value for them.
        self.implicit = frozenset(implicit)

    @classmethod
    def from_strings(
        cls,
        allowed: str,
        defaults: str,
        mandatory: Iterable[str] = (),
        implicit: Iterable[str] = (),
    ) -> "OptionSet":
        option_set = cls(mandatory=mandatory, implicit=implicit)
        option_set.read_allowed(allowed)
        option_set.read_defaults(defaults)
        return option_set

    def read_allowed(self, flag_string: str) -> None:
        # "" splits to [""], so an empty allow-list still allows the empty key.
        self.allowed = frozenset(flag_string.split(","))

    def read_defaults(self, flag_string: str) -> None:
        self.options = {}
        self.forced = {}
        for key, value in parse_config(flag_string.split(",")).items():
            if key in self.allowed:
                self.options[key] = value
            else:
                self.forced[key] = value

    def copy(self) -> "OptionSet":
        return OptionSet(
            allowed=self.allowed,
            options=self.options,
            forced=self.forced,
            mandatory=self.mandatory,
            implicit=self.implicit,
        )

    def allows(self, key: str) -> bool:
        if key in self.allowed:
            return True
        return key in self.implicit and key not in self.forced

    def accepted_keys(self) -> frozenset[str]:
        return self.allowed | {key for key in self.implicit if key not in self.forced}

    def parse_map(self, entries: Mapping[str, object], ignore_list: Iterable[str] = ()) -> list[str]:
        """Merge request values into ``options``; return the rejected keys."""
        ignored = set(ignore_list)
        rejected: list[str] = []
        for key, raw in entries.items():
            if key in ignored:
                continue
            value = uniformize(key, raw)
            if value == "":
                continue
            if self.allows(key):
                self.options[key] = value
            else:
                rejected.append(key)
        return rejected

    def parse_url(self, url: str, ignore_list: Iterable[str] = ()) -> list[str]:
        """Merge ``key=value`` pairs from the query part of ``url``."""
        ignored = set(ignore_list)
        rejected: list[str] = []
        _, _, query = url.partition("?")
        for pair in query.split("&"):
            key, sep, value = pair.partition("=")
            if not sep or value == "" or key in ignored:
                continue
            if self.allows(key):
                self.options[key] = uniformize(key, value)
            else:
                rejected.append(key)
        return rejected

    def is_sloppy_mount(self) -> bool:
        """Pop ``sloppy_mount`` from both maps and return its boolean value."""
        value = ""
        if SLOPPY_MOUNT in self.options:
            value = self.options.pop(SLOPPY_MOUNT)
        if SLOPPY_MOUNT in self.forced:
            value = self.forced.pop(SLOPPY_MOUNT)
        if value:
            return parse_bool(value) is True
        return False

    def missing_mandatory(self) -> list[str]:
        return [
            key for key in self.mandatory
            if key not in self.options and key not in self.forced
        ]

    def make_params(self, prefix: str) -> list[str]:
        params = []
        for key, value in self.make_config().items():
            if key == SLOPPY_MOUNT:
                continue
            flag = parse_bool(value)
            if flag is not None:
                if flag:
                    params.append(f"{prefix}{key}")
                continue
            number = parse_int16(value)
            if number is not None:
                params.append(f"{prefix}{key}={number}")
                continue
            params.append(f"{prefix}{key}={value}")
        return params

    def make_config(self) -> dict[str, str]:
        config = dict(self.options)
        config.update(self.forced)
        return config


def parse_config(entries: Iterable[str]) -> dict[str, str]:
    """Parse ``key`` / ``key:value`` tokens, skipping tokens with an empty key."""
    result: dict[str, str] = {}
    for entry in entries:
        key, _, value = entry.partition(":")
        if not key:
            continue
        result[key] = value
    return result


def split_list(flag_string: str) -> list[str]:
    return [item for item in flag_string.split(",") if item]
