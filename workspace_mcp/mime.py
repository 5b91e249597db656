"""RFC 5322 message composition for sending mail and drafts through Gmail.

Handles reply threading (``In-Reply-To``/``References`` and a single
``Re:`` subject prefix) and produces the unpadded base64url payload that
Gmail expects in ``{"raw": ...}``.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field
from email.header import Header
from email.message import EmailMessage
from email.policy import SMTP
from email.utils import formataddr, formatdate, make_msgid
from pathlib import Path

# Headroom under Gmail's 25 MB outgoing limit for MIME framing overhead.
MAX_MESSAGE_BYTES = 24 * 1024 * 1024
DEFAULT_MIME_TYPE = "application/octet-stream"

_CRLF = "\r\n"
_FOLD_WIDTH = 78
_LINE_BREAKS = re.compile(r"[\r\n]+")
_UNSUPPORTED_ATTACHMENT_TYPES = frozenset({"multipart", "message"})


class MimeError(Exception):
    """Base class for message composition failures."""


class MimeBuildError(MimeError):
    """The message or one of its parts could not be built."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"mime: {detail}")


class AttachmentTooLargeError(MimeError):
    """An attachment or the whole message exceeds the size limit."""

    def __init__(self) -> None:
        super().__init__("attachment exceeds size limit (24 MB)")


class NoRecipientsError(MimeError):
    """None of to, cc or bcc has an address."""

    def __init__(self) -> None:
        super().__init__("recipients are required (at least one of to/cc/bcc)")


@dataclass(frozen=True)
class Recipient:
    email: str
    name: str | None = None


@dataclass(frozen=True)
class AttachmentInput:
    """An attachment as supplied by a caller: inline base64 data or a file path."""

    filename: str
    mime_type: str | None = None
    data_base64: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class ReplyContext:
    """Threading information for a reply.

    ``message_id`` is the RFC 5322 ``Message-Id`` header of the original
    message, not Gmail's opaque message identifier.
    """

    message_id: str
    references: list[str] = field(default_factory=list)
    subject: str = ""


@dataclass(frozen=True)
class ResolvedAttachment:
    filename: str
    mime_type: str
    data: bytes

    @classmethod
    def from_input(cls, att: AttachmentInput) -> ResolvedAttachment:
        """Load the attachment bytes from inline base64 data or a file."""
        mime_type = att.mime_type if att.mime_type is not None else DEFAULT_MIME_TYPE
        if att.data_base64 is not None and att.path is not None:
            raise MimeBuildError(
                "attachment.data_base64 and attachment.path are mutually exclusive"
            )
        if att.data_base64 is not None:
            data = _decode_base64(att.data_base64)
        elif att.path is not None:
            try:
                data = Path(att.path).read_bytes()
            except OSError as exc:
                raise MimeBuildError(
                    f"could not read attachment file {att.path}: {exc}"
                ) from exc
        else:
            raise MimeBuildError("attachment requires data_base64 or path")
        if len(data) > MAX_MESSAGE_BYTES:
            raise AttachmentTooLargeError()
        return cls(filename=att.filename, mime_type=mime_type, data=data)


@dataclass(frozen=True)
class Compose:
    sender: Recipient
    to: list[Recipient] = field(default_factory=list)
    cc: list[Recipient] = field(default_factory=list)
    bcc: list[Recipient] = field(default_factory=list)
    subject: str = ""
    body_text: str | None = None
    body_html: str | None = None
    attachments: list[ResolvedAttachment] = field(default_factory=list)
    reply: ReplyContext | None = None


def _decode_base64(text: str) -> bytes:
    """Decode standard or url-safe base64, with or without padding."""
    unpadded = text.strip().rstrip("=")
    padded = unpadded + "=" * (-len(unpadded) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MimeBuildError(f"base64 decode: {exc}") from exc


def strip_brackets(value: str) -> str:
    """Remove surrounding whitespace and a leading ``<`` / trailing ``>``."""
    return value.strip().removeprefix("<").removesuffix(">")


def has_re_prefix(subject: str) -> bool:
    """Whether the subject already starts with ``Re:`` in any letter case."""
    return subject.lstrip()[:3].lower() == "re:"


def rewrite_subject(reply: ReplyContext | None, supplied: str) -> str:
    """Return the subject to send, adding a single ``Re:`` prefix for replies."""
    if reply is None:
        return supplied
    base = supplied or reply.subject
    return base if has_re_prefix(base) else f"Re: {base}"


def _one_line(value: str) -> str:
    return _LINE_BREAKS.sub(" ", value)


def _format_address(recipient: Recipient) -> str:
    email = _one_line(recipient.email).strip()
    if recipient.name:
        return formataddr((_one_line(recipient.name), email), charset="utf-8")
    return f"<{email}>"


def _fold(name: str, tokens: list[str]) -> str:
    """Join tokens into one header, folding lines at token boundaries."""
    lines: list[str] = []
    current = f"{name}:"
    for token in tokens:
        if len(current) + 1 + len(token) > _FOLD_WIDTH and current != f"{name}:":
            lines.append(current)
            current = f" {token}"
        else:
            current = f"{current} {token}"
    lines.append(current)
    return _CRLF.join(lines)


def _address_header(name: str, recipients: list[Recipient]) -> str:
    formatted = [_format_address(r) for r in recipients]
    tokens = [f"{address}," for address in formatted[:-1]] + formatted[-1:]
    return _fold(name, tokens)


def _split_mime_type(mime_type: str) -> tuple[str, str]:
    maintype, _, subtype = mime_type.strip().lower().partition("/")
    if (
        not maintype
        or not subtype
        or "/" in subtype
        or any(ch.isspace() for ch in maintype + subtype)
        or maintype in _UNSUPPORTED_ATTACHMENT_TYPES
    ):
        maintype, _, subtype = DEFAULT_MIME_TYPE.partition("/")
    return maintype, subtype


def _body_bytes(req: Compose) -> bytes:
    """Serialize the content part of the message (its own headers included)."""
    msg = EmailMessage(policy=SMTP)
    if req.body_text is not None:
        msg.set_content(req.body_text, subtype="plain", cte="quoted-printable")
        if req.body_html is not None:
            msg.add_alternative(req.body_html, subtype="html", cte="quoted-printable")
    elif req.body_html is not None:
        msg.set_content(req.body_html, subtype="html", cte="quoted-printable")
    else:
        msg.set_content("", subtype="plain", cte="quoted-printable")
    for att in req.attachments:
        maintype, subtype = _split_mime_type(att.mime_type)
        msg.add_attachment(
            att.data, maintype=maintype, subtype=subtype, filename=att.filename
        )
    return msg.as_bytes()


def _envelope_headers(req: Compose) -> list[str]:
    headers = [_address_header("From", [req.sender])]
    for name, recipients in (("To", req.to), ("Cc", req.cc), ("Bcc", req.bcc)):
        if recipients:
            headers.append(_address_header(name, recipients))

    subject = _one_line(rewrite_subject(req.reply, req.subject))
    encoded_subject = Header(subject, header_name="Subject").encode(linesep=_CRLF)
    headers.append(f"Subject: {encoded_subject}")
    headers.append(f"Date: {formatdate(localtime=True)}")
    domain = req.sender.email.rpartition("@")[2].strip() or "localhost"
    headers.append(f"Message-ID: {make_msgid(domain=domain)}")

    if req.reply is not None:
        # Ids are stored bare and wrapped exactly once on output.
        canonical = strip_brackets(_one_line(req.reply.message_id))
        chain = [strip_brackets(_one_line(ref)) for ref in req.reply.references]
        if canonical not in chain:
            chain.append(canonical)
        headers.append(f"In-Reply-To: <{canonical}>")
        headers.append(_fold("References", [f"<{ref}>" for ref in chain]))
    return headers


def compose(req: Compose) -> bytes:
    """Compose the message and return its raw RFC 5322 bytes."""
    if not (req.to or req.cc or req.bcc):
        raise NoRecipientsError()
    try:
        head = _CRLF.join(_envelope_headers(req)) + _CRLF
        raw = head.encode("utf-8") + _body_bytes(req)
    except (ValueError, TypeError) as exc:
        raise MimeBuildError(f"serialize: {exc}") from exc
    if len(raw) > MAX_MESSAGE_BYTES:
        raise AttachmentTooLargeError()
    return raw


def compose_for_gmail(req: Compose) -> str:
    """Compose the message and encode it as unpadded base64url."""
    return base64.urlsafe_b64encode(compose(req)).rstrip(b"=").decode("ascii")