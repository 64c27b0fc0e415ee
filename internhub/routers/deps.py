"""Shared FastAPI dependencies for the v1 routers."""

from __future__ import annotations

from fastapi import Request

from internhub.core.config import Settings
from internhub.integrations.mailer import OfferMailer
from internhub.integrations.sheets import SheetsClient
from internhub.services.audit import RequestMeta


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mailer(request: Request) -> OfferMailer:
    return OfferMailer(get_settings(request), transport=getattr(request.app.state, "mail_transport", None))


def get_sheets_client(request: Request) -> SheetsClient:
    return SheetsClient(get_settings(request), transport=getattr(request.app.state, "sheets_transport", None))


def client_ip(request: Request) -> str | None:
    """First hop of ``x-forwarded-for``, then ``x-real-ip``, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else None


def get_request_meta(request: Request) -> RequestMeta:
    """Who is performing the mutation, for the audit trail."""
    return RequestMeta(
        performed_by=request.headers.get("x-user-email") or get_settings(request).default_performed_by,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
