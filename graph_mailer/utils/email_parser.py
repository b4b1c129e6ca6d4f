"""Parse RFC 822 messages (.eml) into the outbound Email model."""

import email
import email.policy
import email.utils
from email.message import Message
from pathlib import Path

from graph_mailer.models.email import Address, Email, MimeNode, MultipartNode, TextNode


def _addresses(msg: Message, header: str) -> tuple[Address, ...]:
    values = msg.get_all(header) or []
    return tuple(
        Address(address=addr, name=name)
        for name, addr in email.utils.getaddresses([str(v) for v in values])
        if addr
    )


def _disposition(part: Message):
    disposition = part.get_content_disposition()
    return disposition if disposition in ("inline", "attachment") else None


def _message_node(part: Message) -> TextNode:
    # message/* parts carry whole messages (headers included); keep them as one opaque leaf
    payload = part.get_payload()
    if isinstance(payload, list):
        content = b"".join(inner.as_bytes() for inner in payload)
    else:
        content = part.get_payload(decode=True) or b""
    return TextNode(
        media_type="message",
        media_subtype=part.get_content_subtype(),
        content=content,
        name=part.get_filename(),
        disposition=_disposition(part),
    )


def mime_node(part: Message) -> MimeNode:
    """Convert a stdlib MIME part (and its sub-parts) into a MimeNode."""
    if part.get_content_maintype() == "message":
        return _message_node(part)
    if part.is_multipart():
        return MultipartNode(
            subtype=part.get_content_subtype(),
            children=tuple(mime_node(child) for child in part.get_payload()),
        )
    content_id = part.get("Content-ID")
    return TextNode(
        media_type=part.get_content_maintype(),
        media_subtype=part.get_content_subtype(),
        content=part.get_payload(decode=True) or b"",
        charset=part.get_content_charset() or "utf-8",
        name=part.get_filename(),
        disposition=_disposition(part),
        content_id=str(content_id).strip().strip("<>") if content_id else None,
    )


def email_from_message(msg: Message) -> Email:
    """Build an Email from a parsed stdlib message."""
    sender = _addresses(msg, "Sender")
    date = None
    if msg.get("Date"):
        try:
            date = email.utils.parsedate_to_datetime(str(msg["Date"]))
        except (TypeError, ValueError):
            date = None
    subject = msg.get("Subject")
    return Email(
        from_=_addresses(msg, "From"),
        sender=sender[0] if sender else None,
        to=_addresses(msg, "To"),
        cc=_addresses(msg, "Cc"),
        bcc=_addresses(msg, "Bcc"),
        reply_to=_addresses(msg, "Reply-To"),
        subject=str(subject) if subject is not None else None,
        date=date,
        body=mime_node(msg),
    )


def parse_eml_bytes(raw: bytes) -> Email:
    """Parse raw RFC 822 bytes into an Email."""
    return email_from_message(email.message_from_bytes(raw, policy=email.policy.default))


def parse_eml_file(path: Path) -> Email:
    return parse_eml_bytes(Path(path).read_bytes())
