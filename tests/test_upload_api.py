import os
import unittest
from io import BytesIO
from zipfile import ZipFile

from docx import Document
from pypdf import PdfWriter

from api_support import ApiTestMixin

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _docx(*paragraphs: str) -> bytes:
    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _bare_word_xml(text: str) -> bytes:
    document_xml = (
        '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
        f"<w:body><w:p><w:r><w:t>{text}</w:t></w:r></w:p></w:body></w:document>"
    )
    buffer = BytesIO()
    with ZipFile(buffer, "w") as archive:
        archive.writestr("word/document.xml", document_xml)
    return buffer.getvalue()


class UploadApiTests(ApiTestMixin, unittest.TestCase):
    def setUp(self):
        super().setUp()
        self.token = self.register()

    def _upload(self, name, content, content_type, field="resume", path="/api/upload", headers=None):
        return self.client.post(
            path,
            files={field: (name, content, content_type)},
            headers=self.auth(self.token) if headers is None else headers,
        )

    def _leftover_files(self):
        if not os.path.isdir(self.settings.upload_dir):
            return []
        return os.listdir(self.settings.upload_dir)

    def test_requires_authentication(self):
        response = self._upload("resume.txt", b"Python developer", "text/plain", headers={})
        self.assertEqual(response.status_code, 401)

    def test_text_upload(self):
        response = self._upload("resume.txt", b"Senior Python developer. Built APIs.", "text/plain")
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["text"], "Senior Python developer. Built APIs.")
        self.assertEqual(body["fileName"], "resume.txt")
        self.assertEqual(body["fileType"], "txt")
        self.assertEqual(body["fileSize"], 36)
        self.assertEqual(body["warnings"], [])
        self.assertEqual(self._leftover_files(), [])

    def test_docx_upload_on_resume_route(self):
        response = self._upload(
            "resume.docx",
            _docx("Experience", "Designed data pipelines"),
            DOCX_TYPE,
            path="/api/upload/resume",
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["fileType"], "docx")
        self.assertIn("Designed data pipelines", response.json()["text"])

    def test_raw_xml_fallback_is_reported(self):
        response = self._upload("resume.docx", _bare_word_xml("Shipped billing APIs"), DOCX_TYPE)
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["text"], "Shipped billing APIs")
        self.assertEqual(len(body["warnings"]), 1)
        self.assertIn("raw XML", body["warnings"][0])

    def test_job_description_field(self):
        response = self._upload(
            "jd.txt",
            b"Looking for a Go engineer.",
            "text/plain",
            field="jobDescription",
            path="/api/upload/job-description",
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["message"], "Job description processed successfully")

    def test_oversized_file_is_rejected_and_cleaned_up(self):
        content = b"a" * (6 * 1024 * 1024)
        response = self._upload("huge.txt", content, "text/plain")
        self.assertEqual(response.status_code, 400)
        self.assertIn("File too large", response.json()["error"])
        self.assertEqual(self._leftover_files(), [])

        listing = self.client.get("/api/analyze", headers=self.auth(self.token))
        self.assertEqual(listing.json()["analyses"], [])

    def test_scanned_pdf_is_a_parse_error(self):
        response = self._upload("scan.pdf", _blank_pdf(), "application/pdf")
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertIn("No text content", body["error"])
        self.assertIn("scanned", body["hint"])
        self.assertEqual(self._leftover_files(), [])

    def test_unsupported_type(self):
        response = self._upload("photo.png", b"\x89PNG\r\n\x1a\n", "image/png")
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid file type", response.json()["error"])

    def test_signature_mismatch(self):
        response = self._upload("resume.pdf", b"just some text pretending", "application/pdf")
        self.assertEqual(response.status_code, 400)
        self.assertIn("signature", response.json()["error"])
        self.assertEqual(self._leftover_files(), [])

    def test_missing_file_field(self):
        response = self.client.post("/api/upload", headers=self.auth(self.token))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "No file uploaded")


if __name__ == "__main__":
    unittest.main()
