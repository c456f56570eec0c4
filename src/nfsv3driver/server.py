"""Mount driver HTTP server."""

from __future__ import annotations

import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlparse

from .config import DriverConfig
from .errors import InvocationError, NegotiationError
from .invoker import SubprocessInvoker
from .mounter import Mounter

logger = logging.getLogger(__name__)


def build_mounter(config: DriverConfig, invoker=None) -> Mounter:
    return Mounter(
        invoker if invoker is not None else SubprocessInvoker(),
        config.negotiation(),
        mount_helper=config.mount_helper,
        unmount_helper=config.unmount_helper,
        check_helper=config.check_helper,
        check_timeout=config.check_timeout,
    )


class MountServer:
    def __init__(self, config: DriverConfig, mounter: Mounter | None = None) -> None:
        self.config = config
        self.mounter = mounter if mounter is not None else build_mounter(config)
        self._server: ThreadingHTTPServer | None = None

    def serve_forever(self) -> None:
        self._server = ThreadingHTTPServer(
            (self.config.host, self.config.port),
            self._make_handler(self.mounter),
        )
        logger.info("listening on %s:%s", self.config.host, self.config.port)
        self._server.serve_forever()

    def shutdown(self) -> None:
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None

    @staticmethod
    def _make_handler(mounter: Mounter):
        class Handler(BaseHTTPRequestHandler):
            def _send_json(self, status: int, payload: dict) -> None:
                body = json.dumps(payload).encode("utf-8")
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            def _read_json(self) -> dict:
                length = int(self.headers.get("Content-Length", "0"))
                if length <= 0:
                    return {}
                data = self.rfile.read(length)
                try:
                    payload = json.loads(data.decode("utf-8"))
                except json.JSONDecodeError:
                    return {}
                return payload if isinstance(payload, dict) else {}

            def _send_negotiation_error(self, exc: NegotiationError) -> None:
                self._send_json(400, {"error": str(exc), "keys": list(exc.keys)})

            def log_message(self, format: str, *args) -> None:
                return

            def do_POST(self) -> None:  # noqa: N802
                if self.path == "/v1/mount":
                    payload = self._read_json()
                    share = payload.get("share")
                    target = payload.get("target")
                    opts = payload.get("opts", {})
                    valid = (
                        isinstance(share, str) and share
                        and isinstance(target, str) and target
                        and isinstance(opts, dict)
                    )
                    if not valid:
                        self._send_json(400, {"error": "invalid request"})
                        return
                    try:
                        mounter.mount(share, target, opts)
                    except NegotiationError as exc:
                        self._send_negotiation_error(exc)
                        return
                    except InvocationError as exc:
                        logger.error("mount failed target=%s: %s", target, exc)
                        self._send_json(500, {"error": str(exc)})
                        return
                    self._send_json(200, {"status": "mounted"})
                    return

                if self.path == "/v1/unmount":
                    payload = self._read_json()
                    target = payload.get("target")
                    if not isinstance(target, str) or not target:
                        self._send_json(400, {"error": "invalid request"})
                        return
                    try:
                        mounter.unmount(target)
                    except InvocationError as exc:
                        logger.error("unmount failed target=%s: %s", target, exc)
                        self._send_json(500, {"error": str(exc)})
                        return
                    self._send_json(200, {"status": "unmounted"})
                    return

                if self.path == "/v1/render":
                    payload = self._read_json()
                    share = payload.get("share")
                    opts = payload.get("opts", {})
                    if not isinstance(share, str) or not share or not isinstance(opts, dict):
                        self._send_json(400, {"error": "invalid request"})
                        return
                    try:
                        rendered_share, mount_args = mounter.render(share, opts)
                    except NegotiationError as exc:
                        self._send_negotiation_error(exc)
                        return
                    self._send_json(200, {"share": rendered_share, "mount_args": mount_args})
                    return

                self._send_json(404, {"error": "not found"})

            def do_GET(self) -> None:  # noqa: N802
                parsed = urlparse(self.path)
                if parsed.path == "/v1/check":
                    params = parse_qs(parsed.query)
                    mount_point = params.get("mount_point", [None])[0]
                    if not mount_point:
                        self._send_json(400, {"error": "invalid request"})
                        return
                    name = params.get("name", [mount_point])[0]
                    self._send_json(200, {"mounted": mounter.check(name, mount_point)})
                    return
                self._send_json(404, {"error": "not found"})

        return Handler
