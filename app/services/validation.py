"""
Contact form validation.

Rules run in a fixed order and stop at the first failure, so the submitter
always sees a single message naming one field.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import ValidationError
from app.schemas.contact import ContactSubmission

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

NAME_MIN, NAME_MAX = 2, 100
EMAIL_MAX = 254
SUBJECT_MIN, SUBJECT_MAX = 3, 200
MESSAGE_MIN, MESSAGE_MAX = 10, 5000
COMPANY_MAX = 200


@dataclass(frozen=True)
class NormalizedSubmission:
    """A submission that passed every rule, with all fields trimmed."""

    name: str
    email: str
    subject: str
    message: str
    company: Optional[str] = None


def _trimmed(value: Optional[str]) -> str:
    return (value or "").strip()


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.fullmatch(value))


def validate_submission(payload: ContactSubmission) -> Optional[NormalizedSubmission]:
    """
    Validate a raw contact form body.

    Returns the normalized submission, or ``None`` when the honeypot field is
    filled in: the caller should report success and skip delivery so bots get
    no signal. Raises ``ValidationError`` on the first failing rule.
    """
    if payload.honeypot:
        logger.info("Honeypot field filled in, dropping submission")
        return None

    name = _trimmed(payload.name)
    if len(name) < NAME_MIN:
        raise ValidationError("Name is required.")
    if len(name) > NAME_MAX:
        raise ValidationError("Name is too long.")

    email = payload.email or ""
    if not is_valid_email(email):
        raise ValidationError("Valid email required.")
    if len(email) > EMAIL_MAX:
        raise ValidationError("Email is too long.")

    subject = _trimmed(payload.subject)
    if len(subject) < SUBJECT_MIN:
        raise ValidationError("Subject too short.")
    if len(subject) > SUBJECT_MAX:
        raise ValidationError("Subject is too long.")

    message = _trimmed(payload.message)
    if len(message) < MESSAGE_MIN:
        raise ValidationError("Message must be at least 10 characters.")
    if len(message) > MESSAGE_MAX:
        raise ValidationError("Message is too long.")

    company = _trimmed(payload.company)
    if len(company) > COMPANY_MAX:
        raise ValidationError("Company is too long.")

    return NormalizedSubmission(
        name=name,
        email=email,
        subject=subject,
        message=message,
        company=company or None,
    )
