import json
import unittest
from datetime import date

import httpx

from meetingdiff.dijon import DijonClient


class DijonClientTests(unittest.TestCase):
    def setUp(self):
        self.requests = []

    def _client(self, handler, token=None):
        def record(request):
            self.requests.append(request)
            return handler(request)

        return DijonClient("https://dijon.test", token=token, transport=httpx.MockTransport(record))

    def test_meeting_changes_query(self):
        client = self._client(lambda r: httpx.Response(200, json={"events": []}))
        out = client.list_meeting_changes(4, date(2023, 1, 1), date(2023, 3, 1), [12], exclude_world_id_updates=True)
        self.assertEqual(out, {"events": []})
        request = self.requests[0]
        self.assertEqual(request.url.path, "/rootservers/4/meetings/changes")
        self.assertEqual(request.url.params["start_date"], "2023-01-01")
        self.assertEqual(request.url.params["end_date"], "2023-03-01")
        self.assertEqual(request.url.params["service_body_bmlt_ids"], "12")
        self.assertEqual(request.url.params["exclude_world_id_updates"], "true")

    def test_snapshot_paths(self):
        client = self._client(lambda r: httpx.Response(200, json=[]))
        client.list_snapshot_meetings(4, date(2023, 3, 1))
        client.list_service_bodies(4, date(2023, 3, 1))
        self.assertEqual(self.requests[0].url.path, "/rootservers/4/snapshots/2023-03-01/meetings")
        self.assertNotIn("service_body_bmlt_ids", self.requests[0].url.params)
        self.assertEqual(self.requests[1].url.path, "/rootservers/4/snapshots/2023-03-01/servicebodies")

    def test_error_status_raises(self):
        client = self._client(lambda r: httpx.Response(404, json={"detail": "not found"}))
        with self.assertRaises(httpx.HTTPStatusError) as ctx:
            client.list_root_servers()
        self.assertEqual(ctx.exception.response.status_code, 404)

    def test_token_and_batch_update(self):
        def handler(request):
            if request.url.path == "/token":
                return httpx.Response(200, json={"access_token": "abc", "token_type": "bearer"})
            return httpx.Response(200, json=[])

        client = self._client(handler)
        self.assertFalse(client.is_logged_in)
        client.create_token("user", "secret")
        self.assertTrue(client.is_logged_in)
        self.assertIn(b"grant_type=password", self.requests[0].content)

        client.batch_update_meeting_naws_codes(4, [{"bmlt_id": 1, "code": "G1"}])
        patch = self.requests[1]
        self.assertEqual(patch.method, "PATCH")
        self.assertEqual(patch.headers["Authorization"], "Bearer abc")
        self.assertEqual(json.loads(patch.content), [{"bmlt_id": 1, "code": "G1"}])


if __name__ == "__main__":
    unittest.main()
