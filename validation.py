"""
Contact form validation rules

Shared by the form controller and the submission service so that both sides
accept and reject exactly the same input.
"""

import re
from typing import Dict

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 100
MIN_MESSAGE_LENGTH = 10
MAX_MESSAGE_LENGTH = 500

# Basic local@domain.tld shape, not a full RFC 5322 check
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

FIELD_ORDER = ("name", "email", "message")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def validate_contact(name: str, email: str, message: str) -> Dict[str, str]:
    """Return a mapping of field name to error message for the trimmed values.

    An empty mapping means the submission is valid. Keys follow FIELD_ORDER.
    """
    name = (name or "").strip()
    email = (email or "").strip()
    message = (message or "").strip()
    errors: Dict[str, str] = {}

    if not name:
        errors["name"] = "Name is required"
    elif len(name) < MIN_NAME_LENGTH:
        errors["name"] = f"Name must be at least {MIN_NAME_LENGTH} characters"
    elif len(name) > MAX_NAME_LENGTH:
        errors["name"] = f"Name must not exceed {MAX_NAME_LENGTH} characters"

    if not email:
        errors["email"] = "Email is required"
    elif len(email) > MAX_EMAIL_LENGTH:
        errors["email"] = f"Email must not exceed {MAX_EMAIL_LENGTH} characters"
    elif not is_valid_email(email):
        errors["email"] = "Please enter a valid email address"

    if not message:
        errors["message"] = "Message is required"
    elif len(message) < MIN_MESSAGE_LENGTH:
        errors["message"] = f"Message must be at least {MIN_MESSAGE_LENGTH} characters"
    elif len(message) > MAX_MESSAGE_LENGTH:
        errors["message"] = f"Message must not exceed {MAX_MESSAGE_LENGTH} characters"

    return errors
