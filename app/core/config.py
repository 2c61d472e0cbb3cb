from dataclasses import dataclass
from pydantic_settings import BaseSettings

"""
API CONFIGURATION
"""


#Class to load and read backend .env
class Settings(BaseSettings):

    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASS: str | None = None
    CONTACT_TO: str | None = None

    MAIL_SENDER_NAME: str = "Portfolio Contact"
    MAIL_SUBJECT_TAG: str = "[Portfolio]"

    SMTP_CONNECT_TIMEOUT: float = 15.0
    SMTP_GREETING_TIMEOUT: float = 10.0
    SMTP_SOCKET_TIMEOUT: float = 15.0

    CORS_ORIGIN: str = "*"

    HOST: str = "0.0.0.0"
    PORT: int = 4000

    CONTACT_DEBUG: bool = False
    CONTACT_VERIFY_ENABLED: bool = False

    STATIC_DIR: str | None = None

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins(self) -> list[str]:
        origins = [o.strip() for o in self.CORS_ORIGIN.split(",") if o.strip()]
        return origins or ["*"]


settings = Settings()


SUBMISSION_PORT = 587
IMPLICIT_TLS_PORT = 465


#Public route rate limits (max requests, window seconds)
RATE_LIMITS = {
    "contact": (10, 15 * 60),
}


def _clean(value: str | None) -> str:
    return (value or "").strip()


#Mail relay settings resolved once at startup and handed to the dispatcher
@dataclass(frozen=True)
class MailTransportConfig:
    host: str = ""
    port: int = SUBMISSION_PORT
    username: str = ""
    password: str = ""
    recipient: str = ""
    sender_name: str = "Portfolio Contact"
    subject_tag: str = "[Portfolio]"

    @property
    def use_implicit_tls(self) -> bool:
        return self.port == IMPLICIT_TLS_PORT

    @property
    def is_complete(self) -> bool:
        return all((self.host, self.username, self.password.strip(), self.recipient))

    def presence(self) -> dict[str, bool]:
        """
        Which mail settings are populated. Only booleans, never the values.
        """
        return {
            "SMTP_HOST": bool(self.host),
            "SMTP_USER": bool(self.username),
            "SMTP_PASS": bool(self.password.strip()),
            "CONTACT_TO": bool(self.recipient),
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "MailTransportConfig":
        username = _clean(settings.SMTP_USER)
        return cls(
            host=_clean(settings.SMTP_HOST),
            port=settings.SMTP_PORT,
            username=username,
            password=settings.SMTP_PASS or "",
            recipient=_clean(settings.CONTACT_TO) or username,
            sender_name=settings.MAIL_SENDER_NAME,
            subject_tag=settings.MAIL_SUBJECT_TAG,
        )
