
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file.

    Built once by :func:`internhub.main.create_app` and handed to services
    through ``app.state.settings``. Nothing below the routers reads the
    environment directly.
    """

    app_name: str = "InternHub API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (SQLite for local dev; in-memory URLs are pinned to one connection)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./internhub_dev.db",
        alias="DATABASE_URL",
    )

    # Offer lifecycle
    offer_expiry_hours: int = Field(default=24, alias="OFFER_EXPIRY_HOURS")
    offer_send_expiry_hours: int = Field(default=48, alias="OFFER_SEND_EXPIRY_HOURS")
    allow_resend_accepted: bool = Field(default=False, alias="ALLOW_RESEND_ACCEPTED")

    # Offer email defaults (template parameters)
    offer_position: str = Field(default="Intern", alias="OFFER_POSITION")
    offer_department: str = Field(default="Engineering", alias="OFFER_DEPARTMENT")
    offer_mode: str = Field(default="Remote", alias="OFFER_MODE")
    offer_duration: str = Field(default="3 months", alias="OFFER_DURATION")

    # Admin session
    admin_password: str | None = Field(default=None, alias="ADMIN_PASSWORD")
    session_secret: str | None = Field(default=None, alias="ADMIN_SESSION_SECRET")
    session_cookie: str = "admin_session"
    session_max_age_seconds: int = Field(
        default=60 * 60 * 24 * 7, alias="SESSION_MAX_AGE_SECONDS",
    )
    session_cookie_secure: bool = Field(default=True, alias="SESSION_COOKIE_SECURE")

    # Audit
    default_performed_by: str = Field(
        default="admin@internhub.local", alias="DEFAULT_PERFORMED_BY",
    )

    # Google Sheets
    google_sheets_api_key: str | None = Field(default=None, alias="GOOGLE_SHEETS_API_KEY")
    sheets_base_url: str = "https://sheets.googleapis.com/v4/spreadsheets"
    candidates_spreadsheet_id: str | None = Field(
        default=None, alias="CANDIDATES_SPREADSHEET_ID",
    )
    candidates_range: str = Field(default="Form Responses 1!A1:P", alias="CANDIDATES_RANGE")
    domain_preferences_spreadsheet_id: str | None = Field(
        default=None, alias="DOMAIN_PREFERENCES_SPREADSHEET_ID",
    )
    domain_preferences_range: str = Field(
        default="Form Responses 1!A1:Z1000", alias="DOMAIN_PREFERENCES_RANGE",
    )
    sheets_timeout: int = Field(default=30, alias="SHEETS_TIMEOUT")

    # EmailJS
    emailjs_base_url: str = "https://api.emailjs.com/api/v1.0/email/send"
    emailjs_service_id: str | None = Field(default=None, alias="EMAILJS_SERVICE_ID")
    emailjs_template_id: str | None = Field(default=None, alias="EMAILJS_TEMPLATE_ID")
    emailjs_public_key: str | None = Field(default=None, alias="EMAILJS_PUBLIC_KEY")
    emailjs_private_key: str | None = Field(default=None, alias="EMAILJS_PRIVATE_KEY")
    email_timeout: int = Field(default=20, alias="EMAIL_TIMEOUT")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def email_enabled(self) -> bool:
        """Offer emails go out only when EmailJS is fully configured."""
        return bool(
            self.emailjs_service_id and self.emailjs_template_id and self.emailjs_public_key
        )

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"
