"""
Database and API Schemas for the Portfolio backend

Each persisted Pydantic model maps to a MongoDB collection with the lowercase
name of the class (e.g., ContactMessage -> "contactmessage"). The remaining
models describe the JSON bodies of the contact endpoint, one per outcome.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MessageMeta(BaseModel):
    """Request metadata captured alongside a contact message"""
    model_config = ConfigDict(populate_by_name=True)

    user_agent: str = Field("", alias="userAgent", description="User-Agent header of the submitter")
    referer: Optional[str] = Field(None, description="Referer header, null when absent")


class ContactMessage(BaseModel):
    """
    Messages submitted from the portfolio contact form
    Collection name: "contactmessage"
    """
    name: str = Field(..., description="Name of the sender", min_length=2, max_length=100)
    email: str = Field(..., description="Reply-to email address", max_length=100)
    message: str = Field(..., description="Message body", min_length=10, max_length=500)
    meta: MessageMeta = Field(default_factory=MessageMeta)


class ContactMessageRecord(ContactMessage):
    """A ContactMessage as stored, with its id and creation time"""
    id: str
    created_at: datetime


# Request / response bodies for POST /api/contact

class ContactSubmission(BaseModel):
    """Incoming JSON body. Content rules live in validation.validate_contact."""
    name: str = ""
    email: str = ""
    message: str = ""


class FieldError(BaseModel):
    field: str
    message: str


class ContactCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Message received. Thank you for reaching out!"
    id: str
    name: str
    email: str
    created_at: datetime = Field(..., alias="createdAt")


class ValidationFailed(BaseModel):
    message: str = "Validation failed"
    errors: List[FieldError]


class ServerError(BaseModel):
    message: str
    error: Optional[str] = Field(None, description="Error detail, omitted in production")
