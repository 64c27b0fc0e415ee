"""Public offer response endpoints — reached from the links in the offer email.

``POST /respond`` reports the precise failure (not found, already responded,
expired) so the caller can act on it. The preview endpoint backs the public
page and answers every failure with the same generic 404.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.config import Settings
from internhub.core.exceptions import AppException
from internhub.core.response import DataResponse
from internhub.db.base import get_db
from internhub.domain.offer import OfferStatus
from internhub.routers.deps import get_settings
from internhub.schemas.offer import OfferPreview, OfferRespond, OfferResponseOut
from internhub.services.offers import OfferService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/respond", tags=["Public"])

INVALID_LINK = "This link is invalid or has expired"


def _invalid_link() -> AppException:
    return AppException(INVALID_LINK, status_code=404, code="INVALID_LINK")


@router.post("", response_model=DataResponse[OfferResponseOut])
async def respond(
    body: OfferRespond,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Accept or decline an offer by its link token."""
    offer = await OfferService(session, settings).respond_to_offer(body.token, body.action)
    return {"data": OfferResponseOut(status=offer.status)}


@router.get("/{token}", response_model=DataResponse[OfferPreview])
async def preview(
    token: str,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        offer, candidate = await OfferService(session, settings).preview(token)
    except AppException as exc:
        logger.info("Offer preview refused: %s", exc.message)
        raise _invalid_link() from exc

    if offer.status != OfferStatus.PENDING.value:
        # Keep a lazily applied expiry even though the response is an error
        await session.commit()
        raise _invalid_link()

    return {
        "data": OfferPreview(
            full_name=candidate.full_name if candidate else None,
            status=offer.status,
            expires_at=offer.expires_at,
        )
    }
