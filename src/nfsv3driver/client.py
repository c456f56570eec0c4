"""HTTP client for the NFSv3 mount driver."""

from __future__ import annotations

import json
import http.client
from dataclasses import dataclass
from urllib.parse import urlencode


@dataclass(frozen=True)
class DriverEndpoint:
    host: str
    port: int


class MountClient:
    def __init__(self, endpoint: DriverEndpoint, timeout_seconds: float | None = None) -> None:
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds

    def _request(self, method: str, path: str, payload: dict | None = None) -> dict:
        body = None
        headers = {"Accept": "application/json"}
        if payload is not None:
            body = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
            headers["Content-Length"] = str(len(body))
        conn = http.client.HTTPConnection(
            self.endpoint.host, self.endpoint.port, timeout=self.timeout_seconds
        )
        conn.request(method, path, body=body, headers=headers)
        resp = conn.getresponse()
        data = resp.read()
        conn.close()
        try:
            payload = json.loads(data.decode("utf-8")) if data else {}
        except json.JSONDecodeError:
            payload = {}
        if resp.status >= 400:
            error = payload.get("error") or payload.get("status") or "request failed"
            raise RuntimeError(f"driver error {resp.status}: {error}")
        return payload

    def mount(self, share: str, target: str, opts: dict | None = None) -> dict:
        payload = {"share": share, "target": target, "opts": opts or {}}
        return self._request("POST", "/v1/mount", payload)

    def unmount(self, target: str) -> dict:
        return self._request("POST", "/v1/unmount", {"target": target})

    def render(self, share: str, opts: dict | None = None) -> dict:
        return self._request("POST", "/v1/render", {"share": share, "opts": opts or {}})

    def check(self, mount_point: str, name: str | None = None) -> bool:
        query = {"mount_point": mount_point}
        if name is not None:
            query["name"] = name
        payload = self._request("GET", f"/v1/check?{urlencode(query)}")
        return bool(payload.get("mounted"))
