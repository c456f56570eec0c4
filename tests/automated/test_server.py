import http.client
import json
import socket
import threading
import time
import unittest

from nfsv3driver.client import DriverEndpoint, MountClient
from nfsv3driver.config import DriverConfig
from nfsv3driver.errors import InvocationError
from nfsv3driver.server import MountServer, build_mounter


def get_free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class RecordingInvoker:
    def __init__(self):
        self.calls = []
        self.fail_commands = set()
        self._lock = threading.Lock()

    def invoke(self, command, args, timeout=None):
        with self._lock:
            self.calls.append((command, list(args)))
        if command in self.fail_commands:
            raise InvocationError(command, args, 32, b"helper failed")
        return b""


class TestMountServer(unittest.TestCase):
    def setUp(self):
        self.port = get_free_port()
        self.config = DriverConfig(
            host="127.0.0.1",
            port=self.port,
            allowed_in_source="uid,gid",
            default_in_source="",
            allowed_in_mount="uid,gid,multithread",
            default_in_mount="default_permissions:true",
            mandatory_in_source="",
            mandatory_in_mount="",
        )
        self.invoker = RecordingInvoker()
        self.server = MountServer(self.config, build_mounter(self.config, self.invoker))
        self.server_thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.server_thread.start()
        time.sleep(0.5)

        self.endpoint = DriverEndpoint(host="127.0.0.1", port=self.port)
        self.client = MountClient(self.endpoint, timeout_seconds=10)

    def tearDown(self):
        self.server.shutdown()

    def _raw(self, method, path, body=None):
        conn = http.client.HTTPConnection("127.0.0.1", self.port, timeout=10)
        headers = {}
        if body is not None:
            headers["Content-Type"] = "application/json"
        conn.request(method, path, body=body, headers=headers)
        resp = conn.getresponse()
        payload = json.loads(resp.read().decode("utf-8"))
        conn.close()
        return resp.status, payload

    def test_mount(self):
        res = self.client.mount("nfs://host/export", "/mnt/vol", {"uid": 1000, "multithread": True})
        self.assertEqual(res["status"], "mounted")
        self.assertEqual(
            self.invoker.calls,
            [(
                "fuse-nfs",
                ["-n", "nfs://host/export?uid=1000", "-m", "/mnt/vol", "--uid=1000", "--multithread", "--default_permissions"],
            )],
        )

    def test_render(self):
        res = self.client.render("nfs://host/export?gid=50", {"uid": 1000})
        self.assertEqual(res["share"], "nfs://host/export?uid=1000&gid=50")
        self.assertEqual(res["mount_args"], ["--uid=1000", "--default_permissions"])
        self.assertEqual(self.invoker.calls, [])

    def test_unsupported_options(self):
        with self.assertRaises(RuntimeError) as ctx:
            self.client.mount("nfs://host/export", "/mnt/vol", {"bogus": "x"})
        self.assertIn("driver error 400: Not allowed options : bogus", str(ctx.exception))
        self.assertEqual(self.invoker.calls, [])

        status, payload = self._raw(
            "POST",
            "/v1/render",
            json.dumps({"share": "nfs://h/e", "opts": {"zz": 1, "aa": 2}}),
        )
        self.assertEqual(status, 400)
        self.assertEqual(payload["keys"], ["zz", "aa"])

    def test_sloppy_mount_request(self):
        res = self.client.render("nfs://h/e", {"sloppy_mount": True, "bogus": "x", "gid": 7})
        self.assertEqual(res["mount_args"], ["--gid=7", "--default_permissions"])

    def test_invalid_requests(self):
        status, payload = self._raw("POST", "/v1/mount", json.dumps({"share": "nfs://h/e"}))
        self.assertEqual(status, 400)
        self.assertEqual(payload["error"], "invalid request")

        status, _ = self._raw("POST", "/v1/mount", json.dumps({"share": "s", "target": "t", "opts": [1]}))
        self.assertEqual(status, 400)

        status, _ = self._raw("POST", "/v1/render", "not json")
        self.assertEqual(status, 400)

        status, _ = self._raw("POST", "/v1/volumes", json.dumps({}))
        self.assertEqual(status, 404)

        status, _ = self._raw("GET", "/v1/check")
        self.assertEqual(status, 400)

    def test_non_string_fields_rejected(self):
        bodies = [
            ("/v1/mount", {"share": 5, "target": "/mnt", "opts": {}}),
            ("/v1/mount", {"share": "nfs://h/e", "target": ["/mnt"], "opts": {}}),
            ("/v1/render", {"share": {"host": "h"}, "opts": {}}),
            ("/v1/unmount", {"target": 7}),
        ]
        for path, body in bodies:
            status, payload = self._raw("POST", path, json.dumps(body))
            self.assertEqual(status, 400, path)
            self.assertEqual(payload["error"], "invalid request")
        self.assertEqual(self.invoker.calls, [])

    def test_helper_failure(self):
        self.invoker.fail_commands.add("fuse-nfs")
        with self.assertRaises(RuntimeError) as ctx:
            self.client.mount("nfs://host/export", "/mnt/vol")
        self.assertIn("driver error 500", str(ctx.exception))
        self.assertIn("exited with status 32", str(ctx.exception))

    def test_unmount(self):
        res = self.client.unmount("/mnt/vol")
        self.assertEqual(res["status"], "unmounted")
        self.assertEqual(self.invoker.calls, [("fusermount", ["-u", "/mnt/vol"])])

        self.invoker.fail_commands.add("fusermount")
        with self.assertRaises(RuntimeError):
            self.client.unmount("/mnt/vol")

    def test_check(self):
        self.assertTrue(self.client.check("/mnt/vol", name="vol"))
        self.invoker.fail_commands.add("mountpoint")
        self.assertFalse(self.client.check("/mnt/vol"))
        self.assertEqual(self.invoker.calls[-1], ("mountpoint", ["-q", "/mnt/vol"]))

    def test_concurrent_mounts_do_not_share_options(self):
        """Parallel requests with different options each get their own arguments."""
        results = {}

        def run(index):
            res = self.client.render("nfs://h/e", {"uid": 1000 + index, "gid": 2000 + index})
            results[index] = res["mount_args"]

        threads = [threading.Thread(target=run, args=(i,)) for i in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for index in range(10):
            self.assertEqual(
                results[index],
                ["--uid=%d" % (1000 + index), "--gid=%d" % (2000 + index), "--default_permissions"],
            )


if __name__ == "__main__":
    unittest.main()
