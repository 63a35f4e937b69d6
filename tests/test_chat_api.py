import unittest
from datetime import datetime

from pydantic import TypeAdapter

from api_support import ApiTestMixin

_datetime = TypeAdapter(datetime)


class ChatApiTests(ApiTestMixin, unittest.TestCase):
    def _save(self, token, **payload):
        response = self.client.post("/api/chat", json=payload, headers=self.auth(token))
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["session"]

    def test_appending_to_session_preserves_order(self):
        token = self.register()
        first = self._save(
            token,
            title="Interview prep",
            messages=[{"role": "user", "content": "How is my resume?"}],
            atsScore=36,
        )
        second = self._save(
            token,
            sessionId=first["_id"],
            messages=[
                {"role": "assistant", "content": "Add more metrics."},
                {"role": "user", "content": "Thanks!"},
            ],
        )

        self.assertEqual(second["_id"], first["_id"])
        self.assertEqual(
            [message["content"] for message in second["messages"]],
            ["How is my resume?", "Add more metrics.", "Thanks!"],
        )
        self.assertEqual(second["atsScore"], 36)
        self.assertGreater(_datetime.validate_python(second["updatedAt"]), _datetime.validate_python(first["updatedAt"]))

    def test_history_lists_summaries_newest_first(self):
        token = self.register()
        older = self._save(token, title="First", messages=[{"role": "user", "content": "one"}])
        newer = self._save(token, title="Second", messages=[{"role": "user", "content": "two"}])
        self._save(token, sessionId=older["_id"], messages=[{"role": "user", "content": "again"}])

        sessions = self.client.get("/api/chat/history", headers=self.auth(token)).json()["sessions"]
        self.assertEqual([session["_id"] for session in sessions], [older["_id"], newer["_id"]])
        self.assertNotIn("messages", sessions[0])

    def test_default_title(self):
        token = self.register()
        session = self._save(token, messages=[{"role": "user", "content": "hello"}])
        self.assertTrue(session["title"].startswith("Chat "))

    def test_invalid_payload_is_rejected(self):
        token = self.register()
        response = self.client.post(
            "/api/chat",
            json={"messages": [{"role": "system", "content": "x"}], "atsScore": 140},
            headers=self.auth(token),
        )
        self.assertEqual(response.status_code, 400)
        fields = {error["field"] for error in response.json()["errors"]}
        self.assertIn("atsScore", fields)
        self.assertIn("messages.0.role", fields)

    def test_sessions_are_owner_scoped(self):
        owner = self.register()
        intruder = self.register(email="eve@example.com", name="Eve")
        session = self._save(owner, messages=[{"role": "user", "content": "private"}])

        read = self.client.get(f"/api/chat/{session['_id']}", headers=self.auth(intruder))
        self.assertEqual(read.status_code, 404)
        self.assertEqual(read.json()["error"], "Chat session not found")

        append = self.client.post(
            "/api/chat",
            json={"sessionId": session["_id"], "messages": [{"role": "user", "content": "hi"}]},
            headers=self.auth(intruder),
        )
        self.assertEqual(append.status_code, 404)

    def test_delete_session(self):
        token = self.register()
        session = self._save(token, messages=[{"role": "user", "content": "bye"}])
        deleted = self.client.delete(f"/api/chat/{session['_id']}", headers=self.auth(token))
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(self.client.get(f"/api/chat/{session['_id']}", headers=self.auth(token)).status_code, 404)


if __name__ == "__main__":
    unittest.main()
