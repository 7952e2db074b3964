"""Pydantic v2 schemas for API request/response validation.

The dashboard speaks camelCase for request envelopes (``documentExcerpt``,
``conversationHistory``, ``tenantId``...) and snake_case for row fields, so
envelope fields carry aliases and accept either spelling.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from zephvault.domain.enums import ChatRole


class _EnvelopeModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str


# ---------------------------------------------------------------------------
# AI document endpoints
# ---------------------------------------------------------------------------


class DocumentRef(BaseModel):
    """Document as the dashboard sends it alongside AI requests."""

    id: str
    file_name: str
    category: str = "general"
    ai_summary: str | None = None
    file_url: str | None = None


class ChatMessage(BaseModel):
    """One turn of client-held chat history."""

    role: ChatRole
    content: str


class AnalyzeDocumentRequest(_EnvelopeModel):
    document: DocumentRef
    document_excerpt: str | None = Field(default=None, alias="documentExcerpt")


class ChatRequest(_EnvelopeModel):
    message: str = ""
    documents: list[DocumentRef] = Field(default_factory=list)
    conversation_history: list[ChatMessage] = Field(default_factory=list, alias="conversationHistory")
    is_initial: bool = Field(default=False, alias="isInitial")


class DocumentChatRequest(_EnvelopeModel):
    message: str
    document: DocumentRef
    conversation_history: list[ChatMessage] = Field(default_factory=list, alias="conversationHistory")


class SummarizeDocumentRequest(_EnvelopeModel):
    document_id: str | None = Field(default=None, alias="documentId")


class CheckPdfAccessRequest(_EnvelopeModel):
    document_id: str = Field(alias="documentId")
    file_url: str = Field(alias="fileUrl")


class ExtractTextDocument(BaseModel):
    id: str
    file_name: str
    file_url: str


class ExtractPdfTextRequest(BaseModel):
    document: ExtractTextDocument


# ---------------------------------------------------------------------------
# Rent notices
# ---------------------------------------------------------------------------


class SendRentNoticeRequest(_EnvelopeModel):
    """Both fields are optional here so the route can answer 400, not 422."""

    tenant_id: str | None = Field(default=None, alias="tenantId")
    notice_type: str | None = Field(default=None, alias="noticeType")


# ---------------------------------------------------------------------------
# Portfolio
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    name: str
    address: str | None = None


class PropertyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: str | None = None
    created_at: datetime | None = None


class TenantCreate(BaseModel):
    property_id: str
    full_name: str
    email: str
    phone_number: str | None = None
    rent_due_date: date
    yearly_rent_amount: Decimal | None = None
    reminder_status: str = "active"


class TenantUpdate(BaseModel):
    full_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    rent_due_date: date | None = None
    yearly_rent_amount: Decimal | None = None
    reminder_status: str | None = None
