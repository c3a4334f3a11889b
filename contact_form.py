"""
Contact form controller

Holds the state of the portfolio contact form (field values, field errors,
submission status) and submits it to POST /api/contact. Applies the same
validation rules as the server, a honeypot check and a local rate limit
before anything goes over the network.

Usage:
    form = ContactFormController("https://api.example.com")
    form.update_field("name", "Jo")
    ...
    form.submit()
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional

import requests
from pydantic import BaseModel

from config import Settings
from validation import FIELD_ORDER, MAX_EMAIL_LENGTH, MAX_MESSAGE_LENGTH, MAX_NAME_LENGTH, validate_contact

logger = logging.getLogger(__name__)

RATE_LIMIT_MS = 5000
SUCCESS_RESET_MS = 8000

FIELDS = FIELD_ORDER + ("honeypot",)
MULTILINE_FIELDS = frozenset({"message"})

# Hard input caps; message may run 50 past MAX_MESSAGE_LENGTH
FIELD_MAX_LENGTHS = {
    "name": MAX_NAME_LENGTH,
    "email": MAX_EMAIL_LENGTH,
    "message": MAX_MESSAGE_LENGTH + 50,
}

RATE_LIMIT_ERROR = "Please wait a few seconds before submitting again"
SEND_FAILED_ERROR = "Failed to send message"
GENERIC_ERROR = "Something went wrong. Please try again."


class FormStatus(BaseModel):
    loading: bool = False
    error: str = ""
    success: bool = False


def _now_ms() -> int:
    return int(time.time() * 1000)


class ContactFormController:

    def __init__(
        self,
        api_url: str,
        session: Optional[requests.Session] = None,
        clock: Optional[Callable[[], int]] = None,
        timer_factory: Optional[Callable[..., threading.Timer]] = None,
        timeout: float = 15,
    ):
        self.api_url = api_url.rstrip("/")
        self.session = session or requests.Session()
        self.clock = clock or _now_ms
        self.timer_factory = timer_factory or threading.Timer
        self.timeout = timeout

        self.fields: Dict[str, str] = dict.fromkeys(FIELDS, "")
        self.errors: Dict[str, str] = {}
        self.status = FormStatus()
        self.last_submit_time = 0
        self.focused_field: Optional[str] = None
        self._success_timer = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "ContactFormController":
        return cls(settings.api_url, **kwargs)

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/api/contact"

    @property
    def message_length(self) -> int:
        return len(self.fields["message"])

    @property
    def message_hint(self) -> str:
        """Counter state for the message field: ok, warning or over."""
        if self.message_length > MAX_MESSAGE_LENGTH:
            return "over"
        if self.message_length > MAX_MESSAGE_LENGTH * 0.9:
            return "warning"
        return "ok"

    @property
    def can_submit(self) -> bool:
        return not self.status.loading and self.message_length <= MAX_MESSAGE_LENGTH

    def trimmed(self) -> Dict[str, str]:
        return {field: self.fields[field].strip() for field in FIELD_ORDER}

    def update_field(self, name: str, value: str) -> None:
        if name not in self.fields:
            raise KeyError(name)
        limit = FIELD_MAX_LENGTHS.get(name)
        self.fields[name] = value[:limit] if limit else value
        if self.errors.get(name):
            self.errors[name] = ""
        if self.status.error:
            self.status.error = ""

    def validate(self) -> bool:
        self.errors = validate_contact(**self.trimmed())
        return not self.errors

    def handle_key(self, field: str, key: str) -> bool:
        """Submit on Enter outside multi-line fields. Returns True when the key was consumed."""
        if key == "Enter" and field not in MULTILINE_FIELDS:
            self.submit()
            return True
        return False

    def submit(self) -> bool:
        """Run one submission attempt. Returns True when the server accepted it."""
        if self.fields["honeypot"]:
            logger.info("Spam detected; dropping contact form submission")
            return False

        now = self.clock()
        if now - self.last_submit_time < RATE_LIMIT_MS:
            self.status = FormStatus(error=RATE_LIMIT_ERROR)
            return False

        if not self.validate():
            self.focused_field = next(iter(self.errors))
            return False

        self.status = FormStatus(loading=True)
        self.last_submit_time = now
        self._cancel_success_timer()

        try:
            response = self.session.post(self.endpoint, json=self.trimmed(), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Contact form request failed: %s", exc)
            self.status = FormStatus(error=GENERIC_ERROR)
            return False

        try:
            data = response.json()
        except ValueError:
            data = None

        if not 200 <= response.status_code < 300:
            if isinstance(data, dict):
                self._apply_failure(data)
            else:
                logger.warning("Unreadable %d response from contact endpoint", response.status_code)
                self.status = FormStatus(error=GENERIC_ERROR)
            return False

        self.fields = dict.fromkeys(FIELDS, "")
        self.errors = {}
        self.status = FormStatus(success=True)
        self._start_success_timer()
        return True

    def _apply_failure(self, data: dict) -> None:
        self.status = FormStatus(error=data.get("message") or SEND_FAILED_ERROR)
        server_errors = {}
        for item in data.get("errors") or []:
            field = item.get("field") if isinstance(item, dict) else None
            if field in self.fields and field not in server_errors:
                server_errors[field] = item.get("message", "")
        if server_errors:
            self.errors = server_errors
            self.focused_field = next(iter(server_errors))

    def _start_success_timer(self) -> None:
        def clear():
            self._clear_success(timer)

        timer = self.timer_factory(SUCCESS_RESET_MS / 1000, clear)
        timer.daemon = True
        self._success_timer = timer
        timer.start()

    def _cancel_success_timer(self) -> None:
        if self._success_timer is not None:
            self._success_timer.cancel()
            self._success_timer = None

    def _clear_success(self, timer) -> None:
        # a superseded timer that fires late must not touch the newer state
        if self._success_timer is not timer:
            return
        self.status.success = False
        self._success_timer = None
