from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import uuid

from app.salesdesk.core.config import settings
from app.salesdesk.core.logging import log_json

logger = logging.getLogger(__name__)

_EXTENSION_TO_CONTENT_TYPES = {
    "jpg": {"image/jpeg", "image/jpg"},
    "jpeg": {"image/jpeg", "image/jpg"},
    "png": {"image/png"},
    "pdf": {"application/pdf"},
}
_GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}


@dataclass(frozen=True)
class AttachmentUpload:
    content: bytes
    filename: str | None
    content_type: str | None

    @property
    def is_empty(self) -> bool:
        return not self.content


class AttachmentRejected(Exception):
    """Upload refused by the allow-list or the size limit."""


class AttachmentStoreError(Exception):
    """The blob could not be written."""


class LocalAttachmentStore:
    """Writes attachments into a directory that the app serves statically.

    References are opaque generated filenames; the caller's filename only
    contributes its extension.
    """

    def __init__(
        self,
        root: str | Path | None = None,
        *,
        url_prefix: str | None = None,
        max_bytes: int | None = None,
        allowed_extensions: list[str] | None = None,
    ) -> None:
        self.root = Path(root or settings.ATTACHMENTS_STORAGE_PATH)
        self.url_prefix = (url_prefix or settings.ATTACHMENTS_URL_PREFIX).rstrip("/")
        self.max_bytes = max_bytes if max_bytes is not None else settings.ATTACHMENT_MAX_BYTES
        extensions = allowed_extensions or settings.ATTACHMENT_ALLOWED_EXTENSIONS
        self.allowed_extensions = {ext.lower().lstrip(".") for ext in extensions}

    def validate(self, upload: AttachmentUpload) -> str:
        if upload.is_empty:
            raise AttachmentRejected("file is empty")
        if len(upload.content) > self.max_bytes:
            raise AttachmentRejected(f"file exceeds max size of {self.max_bytes} bytes")
        extension = Path(upload.filename or "").suffix.lower().lstrip(".")
        if extension not in self.allowed_extensions or extension not in _EXTENSION_TO_CONTENT_TYPES:
            raise AttachmentRejected("only jpeg, jpg, png and pdf files are allowed")
        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        if content_type not in _GENERIC_CONTENT_TYPES and content_type not in _EXTENSION_TO_CONTENT_TYPES[extension]:
            raise AttachmentRejected("declared content type does not match the file extension")
        return extension

    def put(self, upload: AttachmentUpload, *, label: str = "attachment", trace_id: str | None = None) -> str:
        extension = self.validate(upload)
        reference = f"{label}-{uuid.uuid4().hex}.{extension}"
        target = self.root / reference
        tmp_path = target.with_name(f".{reference}.tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "wb") as handle:
                handle.write(upload.content)
            os.replace(tmp_path, target)
        except OSError as exc:
            log_json(
                logger,
                {
                    "event": "attachment.write_failed",
                    "reference": reference,
                    "exception_type": type(exc).__name__,
                    "exception_message": str(exc),
                    "trace_id": trace_id,
                },
                level=logging.ERROR,
            )
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                pass
            raise AttachmentStoreError(f"attachment write failed: {exc}") from exc
        log_json(
            logger,
            {
                "event": "attachment.stored",
                "reference": reference,
                "bytes": len(upload.content),
                "trace_id": trace_id,
            },
        )
        return reference

    def url_for(self, reference: str | None) -> str | None:
        if not reference:
            return None
        return f"{self.url_prefix}/{reference}"


def get_default_store() -> LocalAttachmentStore:
    return LocalAttachmentStore()
