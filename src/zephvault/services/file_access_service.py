"""Diagnostics and text extraction for stored document files.

Backs the PDF viewer: ``check_file_access`` explains why a file might not
render and ``extract_text`` returns raw text for ``.txt``/``.md`` files or
instructions for a manual excerpt otherwise.
"""

import logging
from typing import Any

from zephvault.infra.storage import StorageError, StorageGateway
from zephvault.services.document_content import file_extension, is_text_file

logger = logging.getLogger(__name__)


PDF_INSTRUCTIONS = """PDF file "{file_name}" successfully downloaded from storage.

File size: {size_kb} KB

The PDF is ready for viewing and text extraction. To analyze the document content:

1. View the PDF in the panel on the right
2. Select and copy relevant text sections
3. Paste into the analysis text area
4. Click "Analyze PDF Content" for detailed AI analysis

Focus on copying sections with:
- Party names and contact information
- Important dates and deadlines
- Financial terms and amounts
- Key clauses and conditions
- Obligations and responsibilities

Manual text selection ensures the most accurate analysis results."""

PUBLIC_URL_INSTRUCTIONS = """PDF file "{file_name}" successfully accessed via public URL.

File size: {size_kb} KB

The PDF is accessible and ready for viewing. To extract text content for analysis:

1. Open the PDF in the viewer panel
2. Select and copy the text you want to analyze
3. Paste it in the "PDF Content Analysis" text area
4. Click "Analyze PDF Content"

This manual method ensures the AI gets accurate, complete information for detailed document analysis."""

UNSUPPORTED_TYPE_TEXT = """File "{file_name}" downloaded successfully but text extraction is not supported for this file type.

Supported formats for automatic text extraction:
- .txt files
- .md files

For PDF files, please use the manual copy-paste method for best results."""

TROUBLESHOOTING_TEXT = """Could not access file "{file_name}" from storage.

Error details: {error}

Troubleshooting steps:
1. Verify the file exists in storage
2. Check storage bucket permissions
3. Ensure the file URL is correct: {file_url}
4. Try refreshing the page

Alternative: Use manual text extraction by copying content directly from the PDF viewer and pasting it into the analysis text area."""


def _size_kb(size: Any) -> str:
    if size is None:
        return "Unknown"
    return str(round(int(size) / 1024))


async def extract_text(storage: StorageGateway, file_name: str, file_url: str) -> str:
    """Text for the analysis panel. Never raises; errors become guidance text."""
    try:
        path = storage.path_for(file_url)
        if path is None:
            raise StorageError("Invalid document URL format - cannot find documents bucket path")

        try:
            content = await storage.download(path)
        except StorageError as exc:
            logger.warning("Storage download of %s failed, trying public URL: %s", path, exc)
            check = await storage.check_public_url(file_url)
            if not check.accessible:
                raise StorageError(
                    f"Cannot access file via storage API or public URL. "
                    f"Storage error: {exc}, URL error: {check.error}"
                ) from exc
            return PUBLIC_URL_INSTRUCTIONS.format(
                file_name=file_name, size_kb=_size_kb(check.content_length)
            )

        if file_extension(file_name) == ".pdf":
            return PDF_INSTRUCTIONS.format(file_name=file_name, size_kb=_size_kb(len(content)))
        if is_text_file(file_name):
            text = content.decode("utf-8", errors="replace")
            logger.info("Extracted %d chars from %s", len(text), file_name)
            return text
        return UNSUPPORTED_TYPE_TEXT.format(file_name=file_name)
    except StorageError as exc:
        logger.error("Error accessing file %s: %s", file_name, exc)
        return TROUBLESHOOTING_TEXT.format(file_name=file_name, error=exc, file_url=file_url)


async def check_file_access(storage: StorageGateway, file_url: str) -> dict:
    """Probe the public URL, the storage API and the bucket settings."""
    url_check = await storage.check_public_url(file_url)
    public_url = {
        "accessible": url_check.accessible,
        "status": url_check.status,
        "error": url_check.error,
    }

    storage_check = {"accessible": False, "error": ""}
    path = storage.path_for(file_url)
    if path is None:
        storage_check["error"] = "Invalid file URL format - cannot extract path"
    else:
        try:
            await storage.download(path)
            storage_check["accessible"] = True
        except StorageError as exc:
            storage_check["error"] = str(exc)

    bucket = {"exists": False, "isPublic": False, "error": ""}
    try:
        buckets = await storage.list_buckets()
        match = next((b for b in buckets if b.name == storage.bucket), None)
        bucket["exists"] = match is not None
        bucket["isPublic"] = bool(match and match.public)
        if match is None:
            bucket["error"] = f"Bucket '{storage.bucket}' not found"
    except StorageError as exc:
        bucket["error"] = str(exc)

    checks = {"publicUrl": public_url, "storage": storage_check, "bucket": bucket}
    return {"checks": checks, "recommendations": recommendations_for(checks)}


def recommendations_for(checks: dict) -> list[str]:
    public_url, storage_check, bucket = checks["publicUrl"], checks["storage"], checks["bucket"]
    recs = [
        "Public URL is accessible"
        if public_url["accessible"]
        else f"Public URL failed: {public_url['error']}",
        "Storage API works"
        if storage_check["accessible"]
        else f"Storage API failed: {storage_check['error']}",
        f"Documents bucket exists (Public: {str(bucket['isPublic']).lower()})"
        if bucket["exists"]
        else f"Documents bucket issue: {bucket['error']}",
    ]
    if bucket["exists"] and not bucket["isPublic"]:
        recs.append("Bucket may need to be public for iframe access")
    return recs
