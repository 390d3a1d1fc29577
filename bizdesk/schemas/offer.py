"""
Pydantic schemas for Offer endpoints.

Accepting an offer returns both the decided offer and the subscription it
opened, so the client doesn't need a second request to find it.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel

from bizdesk.schemas.subscription import SubscriptionResponse


class OfferCreateRequest(BaseModel):
    """Request body for POST /offers."""
    user_id: uuid.UUID
    product_price_id: uuid.UUID


class OfferResponse(BaseModel):
    """Public representation of an offer."""
    id: uuid.UUID
    user_id: uuid.UUID
    product_price_id: uuid.UUID
    created_by_id: uuid.UUID
    offer_number: str
    status: str
    accepted_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class OfferAcceptResponse(BaseModel):
    """Response body for POST /offers/{id}/accept."""
    offer: OfferResponse
    subscription: SubscriptionResponse
