"""Map an outbound Email (MIME tree + headers) to a Microsoft Graph message.

Body selection rules:

- a single text part becomes the message body;
- ``multipart/alternative``: the first child whose subtype matches the preferred
  text subtype wins, otherwise the first text child;
- ``multipart/mixed``: the first child is the message (text, or an alternative
  resolved as above) and every later child is a file attachment, in order.

Other multipart forms (related, report, ...) and non-text leaves in body position
are rejected with NoTextPartFound; a non-text top-level body raises UnsupportedBodyType.
Translation is pure: no I/O and no shared state.
"""

import base64
from datetime import datetime, timezone
from email import encoders, message_from_bytes, policy
from email.mime.base import MIMEBase
from email.mime.message import MIMEMessage
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from graph_mailer.errors import AttachmentTooLarge, NoTextPartFound, UnsupportedBodyType
from graph_mailer.mail_provider.graph_models import (
    EmailAddress,
    FileAttachment,
    GraphMessage,
    ItemBody,
    Recipient,
)
from graph_mailer.models.email import Address, Email, MimeNode, MultipartNode, TextNode

# sendMail rejects requests with inline attachments beyond ~3MB; larger ones need an upload session
MAX_ATTACHMENT_BYTES = 3 * 1024 * 1024


def graph_recipient(addr: Address) -> Recipient:
    """Build a Graph recipient from an address."""
    return Recipient(emailAddress=EmailAddress(name=addr.name or "", address=addr.address))


def graph_datetime_offset(dt: datetime) -> str:
    """Format as a UTC DateTimeOffset, e.g. '2014-01-01T00:00:00Z'. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def graph_item_body(node: TextNode) -> ItemBody:
    content_type = "html" if node.media_subtype.lower() == "html" else "text"
    return ItemBody(contentType=content_type, content=node.text())


def select_alternative(part: MultipartNode, text_subtype: str) -> TextNode:
    """Pick the preferred rendering from a multipart/alternative part."""
    fallback: Optional[TextNode] = None
    wanted = text_subtype.lower()
    for child in part.children:
        if not isinstance(child, TextNode) or not child.is_text:
            continue
        if child.media_subtype.lower() == wanted:
            return child
        if fallback is None:
            fallback = child
    if fallback is None:
        raise NoTextPartFound(f"no text part in multipart/{part.subtype}")
    return fallback


def select_main_part(part: MultipartNode, text_subtype: str) -> TextNode:
    """Resolve the text part representing the message body of a multipart tree."""
    subtype = part.subtype.lower()
    if subtype == "alternative":
        return select_alternative(part, text_subtype)
    if subtype == "mixed":
        if not part.children:
            raise NoTextPartFound("empty multipart/mixed")
        first = part.children[0]
        if isinstance(first, TextNode) and first.is_text:
            return first
        if isinstance(first, MultipartNode) and first.subtype.lower() == "alternative":
            return select_alternative(first, text_subtype)
        raise NoTextPartFound(
            f"unsupported first part of multipart/mixed: {first.content_type}"
        )
    # TODO: multipart/related (inline images referenced by cid:) and multipart/report
    raise NoTextPartFound(f"unsupported multipart subtype: {part.subtype}")


def mime_part(node: MimeNode):
    """Build a stdlib MIME object for a node, used to serialize nested parts."""
    if isinstance(node, MultipartNode):
        mime = MIMEMultipart(node.subtype.lower())
        for child in node.children:
            mime.attach(mime_part(child))
        return mime
    if node.is_text:
        mime = MIMEText(node.text(), node.media_subtype.lower(), node.codec)
    elif node.media_type.lower() == "message":
        mime = MIMEMessage(message_from_bytes(node.content, policy=policy.default), node.media_subtype.lower())
    else:
        mime = MIMEBase(node.media_type.lower(), node.media_subtype.lower())
        mime.set_payload(node.content)
        encoders.encode_base64(mime)
    if node.disposition or node.name:
        params = {"filename": node.name} if node.name else {}
        mime.add_header("Content-Disposition", node.disposition or "attachment", **params)
    if node.content_id:
        mime.add_header("Content-ID", f"<{node.content_id}>")
    return mime


def graph_attachment(node: MimeNode) -> FileAttachment:
    """Render a MIME part as a Graph file attachment."""
    if isinstance(node, TextNode):
        raw = node.content
        name = node.name
        is_inline = node.disposition == "inline"
        content_id = node.content_id
    else:
        raw = mime_part(node).as_bytes()
        name = None
        is_inline = None
        content_id = None

    encoded = base64.b64encode(raw).decode("ascii")
    if len(encoded) > MAX_ATTACHMENT_BYTES:
        raise AttachmentTooLarge(name, len(encoded), MAX_ATTACHMENT_BYTES)
    return FileAttachment(
        contentBytes=encoded,
        contentType=node.content_type,
        size=len(raw),
        name=name,
        isInline=is_inline,
        contentId=content_id,
    )


def email_to_graph_message(email: Email, text_subtype: str = "html") -> GraphMessage:
    """Build a Graph message model from an email."""
    body = email.body
    item_body: ItemBody
    attachments: Optional[list[FileAttachment]] = None
    if isinstance(body, TextNode):
        if not body.is_text:
            raise UnsupportedBodyType(f"unsupported email media type: {body.content_type}")
        item_body = graph_item_body(body)
    elif isinstance(body, MultipartNode):
        item_body = graph_item_body(select_main_part(body, text_subtype))
        if body.subtype.lower() == "mixed" and len(body.children) > 1:
            attachments = [graph_attachment(child) for child in body.children[1:]]
    else:
        raise UnsupportedBodyType(f"unsupported email body type: {type(body).__name__}")

    def recipients(addrs: tuple[Address, ...]) -> Optional[list[Recipient]]:
        return [graph_recipient(a) for a in addrs] if addrs else None

    return GraphMessage(
        body=item_body,
        attachments=attachments,
        from_=graph_recipient(email.from_[0]) if email.from_ else None,
        sender=graph_recipient(email.sender) if email.sender else None,
        createdDateTime=graph_datetime_offset(email.date) if email.date else None,
        toRecipients=recipients(email.to),
        ccRecipients=recipients(email.cc),
        bccRecipients=recipients(email.bcc),
        replyTo=recipients(email.reply_to),
        subject=email.subject if isinstance(email.subject, str) else None,
    )


def translate_email(email: Email, text_subtype: str = "html") -> dict:
    """Translate an email into the JSON message object for POST /me/sendMail."""
    return email_to_graph_message(email, text_subtype).to_payload()
