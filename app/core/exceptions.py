"""
CONTACT ERRORS

Every error raised on the contact path carries the HTTP status and the
message that is safe to show the submitter. Server-side detail travels on
the exception chain and in the logs only.
"""


class ContactError(Exception):
    status_code = 500
    public_message = "Internal server error. Please try again later."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        if message is not None:
            self.public_message = message


#User-correctable submission problem, message names the failing field
class ValidationError(ContactError):
    status_code = 400


class RateLimited(ContactError):
    status_code = 429
    public_message = "Too many messages from this IP. Please try again later."


#Base class for delivery failures raised by a mail transport
class TransportError(ContactError):
    status_code = 500
    public_message = "Internal server error. Please try again later."

    def __init__(self, detail: str, *, code: str | None = None):
        super().__init__()
        self.detail = detail
        self.code = code

    def __str__(self) -> str:
        return self.detail


#Connection could not be established in time; eligible for the port fallback
class TransportTimeout(TransportError):
    status_code = 504
    public_message = (
        "Email service timeout connecting to SMTP server. "
        "Please try again later."
    )
