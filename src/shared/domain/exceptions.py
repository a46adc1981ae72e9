"""Base exception for business-rule violations.

Every bounded context derives its own errors from ``DomainError`` so the
API layer can render them in one envelope::

    {"type": "<Kind>", "errors": [{"code": "<code>", "detail": "<msg>"}]}

``kind`` is the class name; ``code`` is its snake_case form unless the
subclass overrides it.
"""

from __future__ import annotations

import re
from typing import List, Optional

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class DomainError(Exception):
    """A caller-visible failure with a kind and one or more messages."""

    code: str = ""

    def __init__(self, message: str = "", messages: Optional[List[str]] = None) -> None:
        if not message and messages:
            message = "; ".join(messages)
        super().__init__(message)
        self.message = message
        if messages:
            self.messages = list(messages)
        else:
            self.messages = [message] if message else []

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def error_code(self) -> str:
        return self.code or _CAMEL_BOUNDARY.sub("_", self.kind).lower()

    def as_errors(self) -> List[dict]:
        return [{"code": self.error_code, "detail": msg} for msg in self.messages]


class ValidationFailed(DomainError):
    """Input or stored data failed field validation."""

    @classmethod
    def from_pydantic(cls, exc) -> ValidationFailed:
        """Build from a ``pydantic.ValidationError`` keeping one message per field."""
        messages = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ()))
            cause = error.get("ctx", {}).get("error")
            detail = str(cause) if cause is not None else error["msg"]
            messages.append(f"{field}: {detail}" if field else detail)
        return cls(messages=messages)

    @classmethod
    def from_django(cls, exc) -> ValidationFailed:
        """Build from a ``django.core.exceptions.ValidationError``."""
        if hasattr(exc, "error_dict"):
            messages = [
                f"{field}: {message}"
                for field, field_messages in exc.message_dict.items()
                for message in field_messages
            ]
        else:
            messages = list(exc.messages)
        return cls(messages=messages)
