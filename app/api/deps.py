from functools import lru_cache
from fastapi import Depends, Request

from app.core.config import settings, Settings, MailTransportConfig, RATE_LIMITS
from app.core.exceptions import RateLimited
from app.core.rate_limit import rate_limit, make_key
from app.services.email import SmtpTransport, MailTransport


def get_settings() -> Settings:
    return settings


# =========================
# ✉️ Mail relay wiring (built once, injected per request)
# =========================
@lru_cache
def _mail_config() -> MailTransportConfig:
    return MailTransportConfig.from_settings(settings)


def get_mail_config() -> MailTransportConfig:
    return _mail_config()


def get_mail_transport(
    settings: Settings = Depends(get_settings),
) -> MailTransport:
    return SmtpTransport(
        connect_timeout=settings.SMTP_CONNECT_TIMEOUT,
        greeting_timeout=settings.SMTP_GREETING_TIMEOUT,
        socket_timeout=settings.SMTP_SOCKET_TIMEOUT,
    )


def debug_requested(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> bool:
    return settings.CONTACT_DEBUG or request.query_params.get("debug") == "1"


# =========================
# 🧱 Per-IP contact throttle
# =========================
def contact_rate_limit(request: Request) -> None:
    max_requests, window_seconds = RATE_LIMITS["contact"]
    key = make_key(request, "contact")
    if not rate_limit(key, max_requests=max_requests, window_seconds=window_seconds):
        raise RateLimited()
