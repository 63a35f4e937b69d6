import os
import tempfile
import threading
import unittest

from app.core.errors import NotFoundError, ValidationError
from app.schemas.analysis import AnalysisResult
from app.schemas.chat import ChatMessage, ChatSessionRequest
from app.storage import analyses, chat_sessions
from app.storage.documents import DocumentStore, is_document_id


def _result(score: int) -> AnalysisResult:
    return AnalysisResult(
        ats_score=score,
        matched_keywords=[],
        missing_keywords=[],
        suggestions=[],
        readability_score=50,
        model_confidence=75.0,
        improvement_potential=max(0, 100 - score),
        keyword_match_ratio=0.5,
        skill_match_ratio=0.6,
        action_verb_count=2,
    )


class StorageTestCase(unittest.TestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.store = DocumentStore(os.path.join(tmp.name, "store.db"))
        self.store.init()
        self.addCleanup(self.store.close)
        self.owner = "a" * 24
        self.other = "b" * 24

    def _create(self, score: int, owner: str | None = None, file_name: str = "resume.pdf"):
        return analyses.create_analysis(
            self.store,
            owner_id=owner or self.owner,
            resume_text="resume body",
            job_description="job body",
            file_name=file_name,
            file_type="pdf",
            result=_result(score),
            analysis_source="heuristic",
        )


class AnalysisStorageTests(StorageTestCase):
    def test_create_assigns_document_id(self):
        record = self._create(40)
        self.assertTrue(is_document_id(record.id))
        self.assertEqual(analyses.get_analysis(self.store, record.id, owner_id=self.owner).ats_score, 40)

    def test_validation_lists_every_field(self):
        with self.assertRaises(ValidationError) as ctx:
            analyses.validate_analysis_input(resume_text=" ", job_description="", file_name="", file_type="exe")
        fields = [error["field"] for error in ctx.exception.errors]
        self.assertEqual(fields, ["resumeText", "jobDescription", "fileName", "fileType"])

    def test_other_owner_cannot_read_or_delete(self):
        record = self._create(40)
        with self.assertRaises(NotFoundError):
            analyses.get_analysis(self.store, record.id, owner_id=self.other)
        with self.assertRaises(NotFoundError):
            analyses.delete_analysis(self.store, record.id, owner_id=self.other)
        analyses.delete_analysis(self.store, record.id, owner_id=self.owner)
        with self.assertRaises(NotFoundError):
            analyses.delete_analysis(self.store, record.id, owner_id=self.owner)

    def test_pagination(self):
        for index in range(12):
            self._create(index, file_name=f"resume-{index}.pdf")
        records, pagination = analyses.list_analyses_page(self.store, owner_id=self.owner, page=2, limit=5)
        self.assertEqual(len(records), 5)
        self.assertEqual(records[0].file_name, "resume-6.pdf")
        self.assertEqual(pagination.pages, 3)
        self.assertEqual(pagination.total, 12)
        self.assertTrue(pagination.has_next)
        self.assertTrue(pagination.has_prev)

        _, clamped = analyses.list_analyses_page(self.store, owner_id=self.owner, page=1, limit=1000)
        self.assertEqual(clamped.pages, 1)
        self.assertFalse(clamped.has_next)

        records, far = analyses.list_analyses_page(self.store, owner_id=self.owner, page=10**20, limit=5)
        self.assertEqual(records, [])
        self.assertEqual(far.current, analyses.MAX_PAGE)

    def test_stats_buckets_and_average(self):
        for score in (10, 30, 30, 80, 100):
            self._create(score)
        self._create(90, owner=self.other)

        stats = analyses.analysis_stats(self.store, owner_id=self.owner).to_json()
        self.assertEqual(stats["totalAnalyses"], 5)
        self.assertEqual(stats["averageScore"], 50)
        self.assertEqual(
            stats["scoreDistribution"],
            [
                {"_id": 0, "count": 1},
                {"_id": 25, "count": 2},
                {"_id": 75, "count": 1},
                {"_id": "Other", "count": 1},
            ],
        )
        self.assertEqual(len(stats["recentAnalyses"]), 5)
        self.assertEqual(set(stats["recentAnalyses"][0]), {"_id", "atsScore", "createdAt", "fileName"})

    def test_stats_for_empty_history(self):
        stats = analyses.analysis_stats(self.store, owner_id=self.owner)
        self.assertEqual(stats.total_analyses, 0)
        self.assertEqual(stats.average_score, 0)
        self.assertEqual(stats.score_distribution, [])


class ChatSessionStorageTests(StorageTestCase):
    def _request(self, *contents, **extra):
        messages = [ChatMessage(role="user", content=content) for content in contents]
        return ChatSessionRequest(messages=messages, **extra)

    def test_default_title_uses_resume_file_name(self):
        session = chat_sessions.save_session(
            self.store,
            owner_id=self.owner,
            payload=self._request("hi", resume_file_name="cv.pdf"),
        )
        self.assertEqual(session.title, "cv.pdf")

    def test_concurrent_appends_are_not_lost(self):
        session = chat_sessions.create_session(self.store, owner_id=self.owner, payload=self._request("start"))

        def append(index: int) -> None:
            chat_sessions.append_messages(
                self.store,
                session.id,
                owner_id=self.owner,
                payload=self._request(f"message {index}"),
            )

        threads = [threading.Thread(target=append, args=(index,)) for index in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stored = chat_sessions.get_session(self.store, session.id, owner_id=self.owner)
        self.assertEqual(len(stored.messages), 11)
        self.assertEqual(stored.messages[0].content, "start")
        self.assertGreater(stored.updated_at, session.updated_at)

    def test_append_to_foreign_session_is_not_found(self):
        session = chat_sessions.create_session(self.store, owner_id=self.owner, payload=self._request("start"))
        with self.assertRaises(NotFoundError):
            chat_sessions.append_messages(
                self.store,
                session.id,
                owner_id=self.other,
                payload=self._request("intrusion"),
            )


if __name__ == "__main__":
    unittest.main()
