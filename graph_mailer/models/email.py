"""Email, address and MIME tree models (already-parsed outbound mail)."""

import codecs
from datetime import datetime
from email.utils import parseaddr
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class Address(BaseModel):
    """Mailbox address with optional display name."""

    address: str
    name: str = ""

    model_config = {"frozen": True}

    @classmethod
    def parse(cls, value: str) -> "Address":
        """Build from a header-style string such as 'Jane Doe <jane@example.com>'."""
        name, address = parseaddr(value)
        return cls(address=address or value.strip(), name=name)


class TextNode(BaseModel):
    """Leaf MIME part. Text bodies and file attachments alike."""

    kind: Literal["leaf"] = "leaf"
    media_type: str = "text"
    media_subtype: str = "plain"
    content: bytes = b""
    charset: str = "utf-8"
    name: Optional[str] = None  # filename / display name
    disposition: Optional[Literal["inline", "attachment"]] = None
    content_id: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def content_type(self) -> str:
        return f"{self.media_type}/{self.media_subtype}".lower()

    @property
    def is_text(self) -> bool:
        return self.media_type.lower() == "text"

    @property
    def codec(self) -> str:
        """Charset usable for decoding; unknown or missing names fall back to utf-8."""
        try:
            codecs.lookup(self.charset)
        except (LookupError, TypeError):
            return "utf-8"
        return self.charset

    def text(self) -> str:
        """Decoded body text."""
        return self.content.decode(self.codec, errors="replace")


class MultipartNode(BaseModel):
    """Container MIME part (multipart/alternative, multipart/mixed, ...)."""

    kind: Literal["multipart"] = "multipart"
    subtype: str = "mixed"
    children: tuple["MimeNode", ...] = ()

    model_config = {"frozen": True}

    @property
    def content_type(self) -> str:
        return f"multipart/{self.subtype}".lower()


MimeNode = Annotated[Union[TextNode, MultipartNode], Field(discriminator="kind")]

MultipartNode.model_rebuild()


class Email(BaseModel):
    """Outbound email: headers plus a single MIME body tree."""

    from_: tuple[Address, ...] = Field(default=(), alias="from")
    sender: Optional[Address] = None
    to: tuple[Address, ...] = ()
    cc: tuple[Address, ...] = ()
    bcc: tuple[Address, ...] = ()
    reply_to: tuple[Address, ...] = ()
    subject: Optional[str] = None
    date: Optional[datetime] = None
    body: MimeNode

    model_config = {"frozen": True, "populate_by_name": True}
