"""Pydantic models for the Microsoft Graph sendMail request shape (subset we emit)."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

FILE_ATTACHMENT_ODATA_TYPE = "#microsoft.graph.fileAttachment"


class EmailAddress(BaseModel):
    """Graph emailAddress."""

    name: str = ""
    address: str


class Recipient(BaseModel):
    """Graph recipient (from, sender, toRecipients, etc.)."""

    emailAddress: EmailAddress


class ItemBody(BaseModel):
    """Graph itemBody (message body)."""

    contentType: Literal["text", "html"] = "text"
    content: str = ""


class FileAttachment(BaseModel):
    """Graph fileAttachment, content carried inline as base64."""

    odata_type: str = Field(FILE_ATTACHMENT_ODATA_TYPE, alias="@odata.type")
    contentBytes: str
    contentType: str
    size: int  # raw byte count, before base64
    name: Optional[str] = None
    isInline: Optional[bool] = None
    contentId: Optional[str] = None

    model_config = {"populate_by_name": True}


class GraphMessage(BaseModel):
    """Microsoft Graph message resource as sent by /sendMail. Unset fields are omitted."""

    body: Optional[ItemBody] = None
    attachments: Optional[list[FileAttachment]] = None
    from_: Optional[Recipient] = Field(None, alias="from")
    sender: Optional[Recipient] = None
    createdDateTime: Optional[str] = None  # UTC, e.g. 2014-01-01T00:00:00Z
    toRecipients: Optional[list[Recipient]] = None
    ccRecipients: Optional[list[Recipient]] = None
    bccRecipients: Optional[list[Recipient]] = None
    replyTo: Optional[list[Recipient]] = None
    subject: Optional[str] = None

    model_config = {"populate_by_name": True}

    def to_payload(self) -> dict:
        """JSON-ready dict with Graph field names and no absent keys."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SendMailRequest(BaseModel):
    """Body of POST /me/sendMail."""

    message: GraphMessage
    saveToSentItems: bool = False

    def to_payload(self) -> dict:
        return {
            "message": self.message.to_payload(),
            "saveToSentItems": self.saveToSentItems,
        }
