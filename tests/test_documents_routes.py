"""Tests for the document vault, PDF access checks and text extraction."""

import pytest
from sqlalchemy import select

from zephvault.app.routes.documents import diagnostics_router, router as documents_router
from zephvault.domain.models import Document
from zephvault.infra.storage import BucketInfo, UrlCheck
from zephvault.services.document_service import storage_path_for_upload, summary_length_bucket


class TestHelpers:

    @pytest.mark.parametrize("summary,bucket", [
        (None, "none"),
        ("", "none"),
        ("x" * 499, "short"),
        ("x" * 500, "medium"),
        ("x" * 1999, "medium"),
        ("x" * 2000, "long"),
    ])
    def test_summary_length(self, summary, bucket):
        assert summary_length_bucket(summary) == bucket

    def test_upload_path(self):
        assert storage_path_for_upload("Lease Agreement.PDF", "lease", now_ms=1700000000000) == (
            "lease/1700000000000.pdf"
        )
        assert storage_path_for_upload("README", "general", now_ms=5) == "general/5"


class TestVault:

    async def test_list_is_newest_first_with_filter(self, app_client, make_document):
        await make_document(file_name="a.pdf", category="lease")
        await make_document(file_name="b.docx", category="corporate", ai_summary="x" * 600)

        async with app_client(documents_router) as client:
            everything = await client.get("/api/documents")
            corporate = await client.get("/api/documents", params={"category": "corporate"})

        assert len(everything.json()["documents"]) == 2
        [row] = corporate.json()["documents"]
        assert row["file_name"] == "b.docx"
        assert row["file_extension"] == "docx"
        assert row["summary_length"] == "medium"

    async def test_get_missing_is_404(self, app_client):
        async with app_client(documents_router) as client:
            resp = await client.get("/api/documents/missing")
        assert resp.status_code == 404

    async def test_upload_stores_object_and_row(self, app_client, db_session, fake_storage):
        async with app_client(documents_router) as client:
            resp = await client.post(
                "/api/documents",
                files={"file": ("notes.txt", b"hello", "text/plain")},
                data={"category": "general"},
            )

        assert resp.status_code == 201
        body = resp.json()
        assert body["file_name"] == "notes.txt"
        [path] = fake_storage.files
        assert path.startswith("general/") and path.endswith(".txt")
        assert body["file_url"].endswith(path)

        doc = (await db_session.execute(select(Document))).scalar_one()
        assert doc.category == "general"

    async def test_upload_rejects_unknown_category(self, app_client):
        async with app_client(documents_router) as client:
            resp = await client.post(
                "/api/documents",
                files={"file": ("a.pdf", b"%PDF", "application/pdf")},
                data={"category": "recipes"},
            )
        assert resp.status_code == 400

    async def test_download_returns_bytes(self, app_client, fake_storage, make_document):
        doc = await make_document(file_name="notes.txt", path="general/notes.txt")
        fake_storage.files["general/notes.txt"] = b"plain text"

        async with app_client(documents_router) as client:
            resp = await client.get(f"/api/documents/{doc.id}/download")

        assert resp.status_code == 200
        assert resp.content == b"plain text"
        assert "notes.txt" in resp.headers["content-disposition"]

    async def test_download_with_non_latin_name(self, app_client, fake_storage, make_document):
        doc = await make_document(file_name="“Lease” 文件.pdf", path="lease/2.pdf")
        fake_storage.files["lease/2.pdf"] = b"%PDF"

        async with app_client(documents_router) as client:
            resp = await client.get(f"/api/documents/{doc.id}/download")

        assert resp.status_code == 200
        assert resp.headers["content-disposition"] == (
            'attachment; filename="_Lease_ __.pdf"; '
            "filename*=UTF-8''%E2%80%9CLease%E2%80%9D%20%E6%96%87%E4%BB%B6.pdf"
        )

    async def test_delete_removes_object_then_row(self, app_client, db_session, fake_storage, make_document):
        doc = await make_document(path="lease/1.pdf")
        fake_storage.files["lease/1.pdf"] = b"%PDF"

        async with app_client(documents_router) as client:
            resp = await client.delete(f"/api/documents/{doc.id}")

        assert resp.status_code == 200
        assert fake_storage.removed == ["lease/1.pdf"]
        assert (await db_session.execute(select(Document))).scalars().all() == []


class TestCheckPdfAccess:

    async def test_all_checks_pass(self, app_client, fake_storage, make_document):
        doc = await make_document(path="lease/1.pdf")
        fake_storage.files["lease/1.pdf"] = b"%PDF"

        async with app_client(diagnostics_router) as client:
            resp = await client.post(
                "/api/check-pdf-access", json={"documentId": doc.id, "fileUrl": doc.file_url}
            )

        body = resp.json()
        assert body["success"] is True
        assert body["document"]["fileName"] == "lease.pdf"
        assert body["checks"]["publicUrl"]["accessible"] is True
        assert body["checks"]["storage"]["accessible"] is True
        assert body["checks"]["bucket"] == {"exists": True, "isPublic": True, "error": ""}
        assert len(body["recommendations"]) == 3

    async def test_private_bucket_and_broken_url(self, app_client, fake_storage, make_document):
        doc = await make_document(path="lease/1.pdf")
        fake_storage.public_check = UrlCheck(accessible=False, status=403, error="HTTP 403: Forbidden")
        fake_storage.buckets = [BucketInfo(name="documents", public=False)]

        async with app_client(diagnostics_router) as client:
            resp = await client.post(
                "/api/check-pdf-access", json={"documentId": doc.id, "fileUrl": doc.file_url}
            )

        body = resp.json()
        assert body["checks"]["publicUrl"]["status"] == 403
        assert body["checks"]["storage"]["accessible"] is False
        assert "Public URL failed: HTTP 403: Forbidden" in body["recommendations"]
        assert "Bucket may need to be public for iframe access" in body["recommendations"]

    async def test_missing_document_is_404(self, app_client):
        async with app_client(diagnostics_router) as client:
            resp = await client.post(
                "/api/check-pdf-access", json={"documentId": "missing", "fileUrl": "https://x/y"}
            )
        assert resp.status_code == 404


class TestExtractPdfText:

    async def _extract(self, app_client, file_name, file_url):
        async with app_client(diagnostics_router) as client:
            resp = await client.post(
                "/api/extract-pdf-text",
                json={"document": {"id": "d1", "file_name": file_name, "file_url": file_url}},
            )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        return body["text"]

    async def test_pdf_gets_instructions(self, app_client, fake_storage):
        fake_storage.files["lease/1.pdf"] = b"%PDF" * 512
        text = await self._extract(
            app_client, "lease.pdf", "https://p.supabase.co/storage/v1/object/public/documents/lease/1.pdf"
        )
        assert 'PDF file "lease.pdf" successfully downloaded' in text
        assert "File size: 2 KB" in text

    async def test_text_file_returns_content(self, app_client, fake_storage):
        fake_storage.files["general/n.md"] = b"# Heading"
        text = await self._extract(
            app_client, "n.md", "https://p.supabase.co/storage/v1/object/public/documents/general/n.md"
        )
        assert text == "# Heading"

    async def test_unsupported_type(self, app_client, fake_storage):
        fake_storage.files["corporate/c.docx"] = b"PK"
        text = await self._extract(
            app_client, "c.docx", "https://p.supabase.co/storage/v1/object/public/documents/corporate/c.docx"
        )
        assert "text extraction is not supported" in text

    async def test_storage_failure_falls_back_to_public_url(self, app_client, fake_storage):
        fake_storage.fail_downloads = True
        text = await self._extract(
            app_client, "lease.pdf", "https://p.supabase.co/storage/v1/object/public/documents/lease/1.pdf"
        )
        assert "successfully accessed via public URL" in text

    async def test_unreachable_file_gets_troubleshooting(self, app_client, fake_storage):
        fake_storage.fail_downloads = True
        fake_storage.public_check = UrlCheck(accessible=False, status=0, error="Network error")
        text = await self._extract(
            app_client, "lease.pdf", "https://p.supabase.co/storage/v1/object/public/documents/lease/1.pdf"
        )
        assert 'Could not access file "lease.pdf"' in text
        assert "Troubleshooting steps" in text

    async def test_url_without_bucket(self, app_client):
        text = await self._extract(app_client, "lease.pdf", "https://example.com/lease.pdf")
        assert "cannot find documents bucket path" in text
