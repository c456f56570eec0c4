"""Command-line interface for the NFSv3 driver (server and local mounts)."""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
from typing import Iterable

from .config import DriverConfig, debug_enabled
from .errors import InvocationError, NegotiationError
from .server import MountServer, build_mounter
from .version import get_version


def _add_option_flags(parser: argparse.ArgumentParser) -> None:
    defaults = DriverConfig()
    parser.add_argument(
        "--allowed-in-source",
        default=defaults.allowed_in_source,
        help="Comma separated parameters callers may set in the share url",
    )
    parser.add_argument(
        "--default-in-source",
        default=defaults.default_in_source,
        help="Comma separated key:value defaults for the share url; keys not allowed are forced",
    )
    parser.add_argument(
        "--allowed-in-mount",
        default=defaults.allowed_in_mount,
        help="Comma separated parameters callers may pass to the mount helper",
    )
    parser.add_argument(
        "--default-in-mount",
        default=defaults.default_in_mount,
        help="Comma separated key:value defaults for the mount helper; keys not allowed are forced",
    )
    parser.add_argument("--mandatory-in-source", default=defaults.mandatory_in_source)
    parser.add_argument("--mandatory-in-mount", default=defaults.mandatory_in_mount)
    parser.add_argument("--mount-helper", default=defaults.mount_helper)
    parser.add_argument("--unmount-helper", default=defaults.unmount_helper)
    parser.add_argument("--check-helper", default=defaults.check_helper)
    parser.add_argument("--check-timeout", type=float, default=defaults.check_timeout)


def _add_request_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--share", required=True, help="Share address, e.g. nfs://host/export?uid=1000")
    parser.add_argument(
        "--opt",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Request option (repeatable)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nfsv3driver")
    parser.add_argument("--version", action="version", version=f"nfsv3driver {get_version()}")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--debug", action="store_true")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the mount driver HTTP server")
    serve.add_argument("--host", default=DriverConfig().host)
    serve.add_argument("--port", type=int, default=DriverConfig().port)
    _add_option_flags(serve)

    mount = subparsers.add_parser("mount", help="Negotiate options and mount a share")
    _add_option_flags(mount)
    _add_request_flags(mount)
    mount.add_argument("--target", required=True, help="Local mount point")

    render = subparsers.add_parser("render", help="Print the negotiated share and mount arguments")
    _add_option_flags(render)
    _add_request_flags(render)
    render.add_argument("--target", default="TARGET", help="Mount point shown in the command line")

    unmount = subparsers.add_parser("unmount", help="Unmount a mount point")
    _add_option_flags(unmount)
    unmount.add_argument("--target", required=True)

    check = subparsers.add_parser("check", help="Report whether a mount point is mounted")
    _add_option_flags(check)
    check.add_argument("--mount-point", required=True)
    check.add_argument("--name", default=None)

    return parser


def _parse_opts(values: Iterable[str]) -> dict[str, str]:
    opts = {}
    for value in values:
        key, sep, raw = value.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {value!r}")
        opts[key] = raw
    return opts


def _config_from_args(args: argparse.Namespace) -> DriverConfig:
    return DriverConfig(
        host=getattr(args, "host", DriverConfig().host),
        port=getattr(args, "port", DriverConfig().port),
        allowed_in_source=args.allowed_in_source,
        default_in_source=args.default_in_source,
        allowed_in_mount=args.allowed_in_mount,
        default_in_mount=args.default_in_mount,
        mandatory_in_source=args.mandatory_in_source,
        mandatory_in_mount=args.mandatory_in_mount,
        mount_helper=args.mount_helper,
        unmount_helper=args.unmount_helper,
        check_helper=args.check_helper,
        check_timeout=args.check_timeout,
    )


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.WARNING
    if args.verbose:
        level = logging.INFO
    if args.debug or debug_enabled():
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Iterable[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)
    config = _config_from_args(args)

    if args.command == "serve":
        server = MountServer(config)
        server.serve_forever()
        return

    mounter = build_mounter(config)

    try:
        if args.command == "render":
            try:
                opts = _parse_opts(args.opt)
            except argparse.ArgumentTypeError as exc:
                parser.error(str(exc))
            share, mount_args = mounter.render(args.share, opts)
            command = [config.mount_helper, *mounter.helper_params(share, args.target, mount_args)]
            print(f"share: {share}")
            print(f"mount args: {shlex.join(mount_args)}")
            print(f"command: {shlex.join(command)}")
            return

        if args.command == "mount":
            try:
                opts = _parse_opts(args.opt)
            except argparse.ArgumentTypeError as exc:
                parser.error(str(exc))
            mounter.mount(args.share, args.target, opts)
            return

        if args.command == "unmount":
            mounter.unmount(args.target)
            return

        if args.command == "check":
            name = args.name or args.mount_point
            mounted = mounter.check(name, args.mount_point)
            print(f"{args.mount_point}: {'mounted' if mounted else 'not mounted'}")
            if not mounted:
                raise SystemExit(1)
            return
    except (NegotiationError, InvocationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1)
