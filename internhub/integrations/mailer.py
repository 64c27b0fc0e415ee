"""Offer email sender backed by the EmailJS REST API.

The email template receives the candidate name, the offer details and two
links of the form ``{frontend_url}/respond/{token}?action=accept|decline``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from internhub.core.config import Settings
from internhub.core.exceptions import UpstreamError
from internhub.schemas.offer import OfferDetails

logger = logging.getLogger(__name__)


class OfferMailer:
    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self._settings = settings
        self._transport = transport

    def response_link(self, token: str, action: str) -> str:
        base = self._settings.frontend_url.rstrip("/")
        return f"{base}/respond/{token}?action={action}"

    def template_params(
        self,
        email: str,
        full_name: str,
        token: str,
        details: OfferDetails | None = None,
    ) -> dict[str, Any]:
        details = details or OfferDetails()
        s = self._settings
        return {
            "email": email,
            "full_name": full_name,
            "position": details.position or s.offer_position,
            "department": details.department or s.offer_department,
            "mode": details.mode or s.offer_mode,
            "duration": details.duration or s.offer_duration,
            "accept_link": self.response_link(token, "accept"),
            "decline_link": self.response_link(token, "decline"),
        }

    async def send_offer(
        self,
        email: str,
        full_name: str,
        token: str,
        details: OfferDetails | None = None,
    ) -> bool:
        """Send the offer email. Returns False when EmailJS is not configured.

        Raises :class:`UpstreamError` when the provider rejects the request.
        """
        s = self._settings
        if not s.email_enabled:
            logger.warning("EmailJS not configured; offer email to %s not sent", email)
            return False

        payload: dict[str, Any] = {
            "service_id": s.emailjs_service_id,
            "template_id": s.emailjs_template_id,
            "user_id": s.emailjs_public_key,
            "template_params": self.template_params(email, full_name, token, details),
        }
        if s.emailjs_private_key:
            payload["accessToken"] = s.emailjs_private_key

        try:
            async with httpx.AsyncClient(
                timeout=s.email_timeout, transport=self._transport
            ) as client:
                response = await client.post(s.emailjs_base_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "EmailJS rejected offer email to %s: %s %s",
                email, exc.response.status_code, exc.response.text,
            )
            raise UpstreamError(
                f"Email provider returned {exc.response.status_code} for {email}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("EmailJS request failed for %s: %s", email, exc)
            raise UpstreamError(f"Email provider unreachable: {exc}") from exc

        logger.info("Offer email sent to %s", email)
        return True
