"""
Contact submission service

Validates a submission, stores it and attempts an email notification. The
result is one of three outcomes, each carrying the HTTP status and body the
endpoint should send.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pymongo.errors import PyMongoError

from config import Settings
from database import MongoStore
from notifications import SmtpNotifier, notify_best_effort
from schemas import (
    ContactCreated,
    ContactMessage,
    ContactMessageRecord,
    FieldError,
    MessageMeta,
    ServerError,
    ValidationFailed,
)
from validation import validate_contact

logger = logging.getLogger(__name__)

COLLECTION = ContactMessage.__name__.lower()


class ContactAccepted:
    status_code = 201

    def __init__(self, record: ContactMessageRecord):
        self.record = record

    def body(self) -> Dict[str, Any]:
        created = ContactCreated(
            id=self.record.id,
            name=self.record.name,
            email=self.record.email,
            created_at=self.record.created_at,
        )
        return created.model_dump(mode="json", by_alias=True)


class ContactRejected:
    status_code = 400

    def __init__(self, errors: List[FieldError]):
        self.errors = errors

    def body(self) -> Dict[str, Any]:
        return ValidationFailed(errors=self.errors).model_dump(mode="json")


class ContactFailed:
    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail

    def body(self) -> Dict[str, Any]:
        return ServerError(message=self.message, error=self.detail).model_dump(mode="json", exclude_none=True)


ContactOutcome = Union[ContactAccepted, ContactRejected, ContactFailed]


def request_meta(headers) -> MessageMeta:
    """Pull submitter metadata out of a request's headers."""
    referer = headers.get("referer") or headers.get("referrer")
    return MessageMeta(user_agent=headers.get("user-agent", ""), referer=referer or None)


class ContactService:
    def __init__(self, store: MongoStore, notifier: SmtpNotifier, settings: Settings):
        self.store = store
        self.notifier = notifier
        self.settings = settings

    def submit(self, name: str, email: str, message: str, meta: MessageMeta) -> ContactOutcome:
        errors = validate_contact(name, email, message)
        if errors:
            logger.info("Rejected contact submission: %s", ", ".join(errors))
            return ContactRejected([FieldError(field=f, message=m) for f, m in errors.items()])

        candidate = ContactMessage(name=name.strip(), email=email.strip(), message=message.strip(), meta=meta)
        try:
            document = self.store.create_document(COLLECTION, candidate)
        except PyMongoError as exc:
            logger.error("Failed to store contact message: %s", exc)
            detail = None if self.settings.is_production else str(exc)
            return ContactFailed("Failed to save your message. Please try again later.", detail)

        record = ContactMessageRecord(
            id=str(document["_id"]),
            created_at=document["created_at"],
            **candidate.model_dump(),
        )
        logger.info("Stored contact message %s from %s", record.id, record.email)

        result = notify_best_effort(self.notifier, record)
        logger.debug("Notification for %s: %s", record.id, result.status)

        return ContactAccepted(record)
