"""
Client (tenant) profile, subscription and API-key endpoints.

Every route sits behind the token gate, which already rejects clients whose
subscription is not active (402).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.api.v1.deps import get_db, require_role
from bizdesk.core.exceptions import ValidationError
from bizdesk.core.permissions import AuthContext
from bizdesk.models.client import Client
from bizdesk.schemas.client import ApiKeyRead, ClientProfileUpdate, ClientRead, SubscriptionRead
from bizdesk.schemas.common import ApiResponse
from bizdesk.services.accounts import apply_updates

router = APIRouter(prefix="/client", tags=["client"])
logger = logging.getLogger(__name__)

require_client = require_role("client")

CONTACT_COLUMNS = {
    "first_name": "contact_first_name",
    "last_name": "contact_last_name",
    "phone_number": "contact_phone_number",
    "position": "contact_position",
}


@router.get("/profile", response_model=ApiResponse[ClientRead])
async def read_profile(ctx: AuthContext = Depends(require_client)) -> ApiResponse[ClientRead]:
    return ApiResponse[ClientRead](data=ClientRead.model_validate(ctx.principal))


@router.put("/profile", response_model=ApiResponse[ClientRead])
async def update_profile(
    body: ClientProfileUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_client),
) -> ApiResponse[ClientRead]:
    client: Client = ctx.principal
    if body.company_name is not None:
        client.company_name = body.company_name
    if body.contact_person is not None:
        contact = body.contact_person.model_dump(exclude_unset=True)
        apply_updates(
            client,
            {CONTACT_COLUMNS[field]: value for field, value in contact.items()},
            tuple(CONTACT_COLUMNS.values()),
        )
    if body.address is not None:
        client.address = body.address.model_dump(by_alias=True)
    if body.business_info is not None:
        client.business_info = body.business_info.model_dump(by_alias=True)
    if body.settings is not None:
        # merge so a partial update keeps the other keys
        client.settings = {**(client.settings or {}), **body.settings}
    await db.commit()
    await db.refresh(client)
    return ApiResponse[ClientRead](
        message="Profile updated successfully",
        data=ClientRead.model_validate(client),
    )


@router.get("/subscription", response_model=ApiResponse[SubscriptionRead])
async def read_subscription(
    ctx: AuthContext = Depends(require_client),
) -> ApiResponse[SubscriptionRead]:
    return ApiResponse[SubscriptionRead](
        data=SubscriptionRead.model_validate(ctx.principal.subscription)
    )


@router.get("/api-key", response_model=ApiResponse[ApiKeyRead])
async def read_api_key(ctx: AuthContext = Depends(require_client)) -> ApiResponse[ApiKeyRead]:
    client: Client = ctx.principal
    if not client.api_key or client.is_api_key_expired:
        raise ValidationError("API key has expired. Please regenerate it.")
    return ApiResponse[ApiKeyRead](
        data=ApiKeyRead(api_key=client.api_key, expires_at=client.api_key_expires)
    )


@router.post("/regenerate-api-key", response_model=ApiResponse[ApiKeyRead])
async def regenerate_api_key(
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_client),
) -> ApiResponse[ApiKeyRead]:
    client: Client = ctx.principal
    client.regenerate_api_key()
    await db.commit()
    await db.refresh(client)
    logger.info("API key regenerated for client %s", client.id)
    return ApiResponse[ApiKeyRead](
        message="API key regenerated successfully",
        data=ApiKeyRead(api_key=client.api_key, expires_at=client.api_key_expires),
    )
