import html
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from time import monotonic
from typing import Optional, Protocol

from app.core.config import MailTransportConfig, SUBMISSION_PORT, IMPLICIT_TLS_PORT
from app.core.exceptions import TransportError, TransportTimeout
from app.services.validation import NormalizedSubmission

logger = logging.getLogger(__name__)


CONNECT_TIMEOUT = 15.0
GREETING_TIMEOUT = 10.0
SOCKET_TIMEOUT = 15.0


# -------------------------------------------------------------------
# Delivery targets
# -------------------------------------------------------------------
@dataclass(frozen=True)
class TransportCandidate:
    host: str
    port: int
    implicit_tls: bool


def delivery_candidates(config: MailTransportConfig) -> list[TransportCandidate]:
    """
    Ordered list of relay endpoints to try for one submission.

    The configured endpoint always comes first. A submission-port (587)
    relay gets a second entry on the implicit-TLS port (465) of the same
    host, used when the first one cannot be reached in time.
    """
    candidates = [
        TransportCandidate(config.host, config.port, config.use_implicit_tls),
    ]
    if config.port == SUBMISSION_PORT:
        candidates.append(
            TransportCandidate(config.host, IMPLICIT_TLS_PORT, True)
        )
    return candidates


# -------------------------------------------------------------------
# Message rendering
# -------------------------------------------------------------------
def _header(value: str) -> str:
    return " ".join(value.split())


def render_text_body(submission: NormalizedSubmission) -> str:
    lines = [
        f"Name: {submission.name}",
        f"Email: {submission.email}",
    ]
    if submission.company:
        lines.append(f"Company: {submission.company}")
    lines += [
        f"Subject: {submission.subject}",
        "Message:",
        submission.message,
    ]
    return "\n".join(lines)


def render_html_body(submission: NormalizedSubmission) -> str:
    esc = html.escape
    company = (
        f"<p><strong>Company:</strong> {esc(submission.company)}</p>\n"
        if submission.company
        else ""
    )
    return (
        "<h2>New Portfolio Contact Message</h2>\n"
        f"<p><strong>Name:</strong> {esc(submission.name)}</p>\n"
        f"<p><strong>Email:</strong> {esc(submission.email)}</p>\n"
        f"{company}"
        f"<p><strong>Subject:</strong> {esc(submission.subject)}</p>\n"
        "<p><strong>Message:</strong></p>\n"
        f'<p style="white-space: pre-line;">{esc(submission.message)}</p>\n'
        "<hr />\n"
        "<p>Sent via portfolio contact form.</p>\n"
    )


def compose_contact_message(
    submission: NormalizedSubmission,
    config: MailTransportConfig,
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = formataddr((config.sender_name, config.username))
    msg["To"] = config.recipient
    msg["Reply-To"] = _header(submission.email)
    msg["Subject"] = _header(f"{config.subject_tag} {submission.subject}")
    msg.set_content(render_text_body(submission))
    msg.add_alternative(render_html_body(submission), subtype="html")
    return msg


# -------------------------------------------------------------------
# SMTP transport (ONLY place that talks to the relay)
# -------------------------------------------------------------------
class MailTransport(Protocol):
    def send(
        self,
        candidate: TransportCandidate,
        config: MailTransportConfig,
        message: EmailMessage,
    ) -> None: ...

    def verify(
        self,
        candidate: TransportCandidate,
        config: MailTransportConfig,
    ) -> None: ...


class _TimedConnect:
    """
    Splits smtplib's single timeout: the TCP connect and the server greeting
    get their own budgets, the rest of the session uses ``timeout``.
    """

    connect_timeout = CONNECT_TIMEOUT
    greeting_timeout = GREETING_TIMEOUT

    # _get_socket(host, port, timeout) is smtplib's private connect hook;
    # SMTP and SMTP_SSL share this signature on CPython 3.10 through 3.13.
    def _get_socket(self, host, port, timeout):
        sock = super()._get_socket(host, port, self.connect_timeout)
        sock.settimeout(self.greeting_timeout)
        return sock


class _SMTP(_TimedConnect, smtplib.SMTP):
    pass


class _SMTP_SSL(_TimedConnect, smtplib.SMTP_SSL):
    pass


class SmtpTransport:
    def __init__(
        self,
        *,
        connect_timeout: float = CONNECT_TIMEOUT,
        greeting_timeout: float = GREETING_TIMEOUT,
        socket_timeout: float = SOCKET_TIMEOUT,
    ):
        self.connect_timeout = connect_timeout
        self.greeting_timeout = greeting_timeout
        self.socket_timeout = socket_timeout

    def _connect(self, candidate: TransportCandidate, context) -> smtplib.SMTP:
        if candidate.implicit_tls:
            smtp = _SMTP_SSL(timeout=self.socket_timeout, context=context)
        else:
            smtp = _SMTP(timeout=self.socket_timeout)
        smtp.connect_timeout = self.connect_timeout
        smtp.greeting_timeout = self.greeting_timeout

        try:
            code, _ = smtp.connect(candidate.host, candidate.port)
        except OSError as e:
            # refused, unreachable, or no greeting in time
            smtp.close()
            raise TransportTimeout(
                f"Could not connect to {candidate.host}:{candidate.port}: {e}",
                code="ETIMEDOUT" if _timed_out(e) else "ECONNECTION",
            ) from e

        if code != 220:
            smtp.close()
            raise TransportError(
                f"{candidate.host}:{candidate.port} refused the session: {code}",
                code="EPROTOCOL",
            )

        if smtp.sock is not None:
            smtp.sock.settimeout(self.socket_timeout)
        return smtp

    def _session(self, candidate, config, message: Optional[EmailMessage]) -> None:
        context = ssl.create_default_context()
        smtp = self._connect(candidate, context)
        done = False
        try:
            with smtp:
                if not candidate.implicit_tls:
                    smtp.ehlo()
                    if smtp.has_extn("starttls"):
                        smtp.starttls(context=context)
                        smtp.ehlo()
                if config.username:
                    smtp.login(config.username, config.password)
                if message is not None:
                    smtp.send_message(message)
                done = True
        except smtplib.SMTPAuthenticationError as e:
            raise TransportError(
                f"SMTP authentication rejected by {candidate.host}: {e.smtp_code}",
                code="EAUTH",
            ) from e
        except (smtplib.SMTPException, OSError) as e:
            if done:
                # the relay already accepted the message, only QUIT failed
                logger.warning(
                    "SMTP QUIT on %s:%s failed: %s", candidate.host, candidate.port, e
                )
                return
            if _timed_out(e):
                raise TransportTimeout(
                    f"SMTP session with {candidate.host}:{candidate.port} timed out",
                    code="ETIMEDOUT",
                ) from e
            raise TransportError(
                f"SMTP session with {candidate.host}:{candidate.port} failed: {e}",
                code="EMESSAGE",
            ) from e

    def send(self, candidate, config, message) -> None:
        self._session(candidate, config, message)

    def verify(self, candidate, config) -> None:
        self._session(candidate, config, None)


def _timed_out(error: BaseException) -> bool:
    # smtplib reports read timeouts as SMTPServerDisconnected
    return isinstance(error, TimeoutError) or isinstance(
        error.__context__, TimeoutError
    )


# -------------------------------------------------------------------
# Public API
# -------------------------------------------------------------------
@dataclass(frozen=True)
class DeliveryOutcome:
    dry_run: bool
    attempts: int = 0
    candidate: Optional[TransportCandidate] = None
    env_presence: Optional[dict[str, bool]] = None


def dispatch(
    submission: NormalizedSubmission,
    config: MailTransportConfig,
    transport: MailTransport,
    *,
    debug: bool = False,
) -> DeliveryOutcome:
    """
    Deliver a validated submission, or skip delivery when mail settings are
    incomplete (dry run).

    Candidates are tried in order: stop at the first success, move on only
    after a timeout-class failure. When nothing succeeds the first attempt's
    error is raised, whatever the later attempts reported.
    """
    if not config.is_complete:
        logger.info("Mail settings incomplete, dry run: %s", config.presence())
        return DeliveryOutcome(
            dry_run=True,
            env_presence=config.presence() if debug else None,
        )

    message = compose_contact_message(submission, config)

    first_error: Optional[TransportError] = None
    for attempt, candidate in enumerate(delivery_candidates(config), start=1):
        try:
            transport.send(candidate, config, message)
        except TransportError as e:
            if first_error is None:
                first_error = e
                logger.warning(
                    "SMTP %s:%s failed: %s", candidate.host, candidate.port, e
                )
            else:
                logger.error("Fallback SMTP (%s) failed: %s", candidate.port, e)
            if isinstance(e, TransportTimeout):
                continue
            break
        else:
            logger.info(
                "Contact message delivered via %s:%s (attempt %d)",
                candidate.host,
                candidate.port,
                attempt,
            )
            return DeliveryOutcome(
                dry_run=False, attempts=attempt, candidate=candidate
            )

    raise first_error


@dataclass(frozen=True)
class VerifyResult:
    success: bool
    elapsed_ms: int
    port: int
    error: Optional[TransportError] = None


def verify_transport(
    config: MailTransportConfig,
    transport: MailTransport,
) -> VerifyResult:
    """Connect and authenticate against the configured relay without sending."""
    candidate = delivery_candidates(config)[0]
    start = monotonic()
    try:
        transport.verify(candidate, config)
    except TransportError as e:
        logger.exception("SMTP verify against %s:%s failed", candidate.host, candidate.port)
        return VerifyResult(
            success=False,
            elapsed_ms=int((monotonic() - start) * 1000),
            port=candidate.port,
            error=e,
        )
    return VerifyResult(
        success=True,
        elapsed_ms=int((monotonic() - start) * 1000),
        port=candidate.port,
    )
