"""
Principal lifecycle hooks called by the identity provider.

These endpoints are not for end users. The identity provider authenticates
with a shared secret and reports principal creation and deletion, which the
core reacts to by provisioning or cascading the principal's rows.
"""

import hmac
from typing import Optional
from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.orm import Session

from eventquiz_backend.api.exceptions import UnauthorizedException
from eventquiz_backend.database import get_db
from eventquiz_backend.interface.identity import PrincipalCreatedEvent, PrincipalGet
from eventquiz_backend.services.identity import IdentityService
from eventquiz_backend.settings import settings

identity_router = APIRouter()


def verify_identity_provider(x_identity_secret: Optional[str] = Header(None)):
    expected = settings.IDENTITY_WEBHOOK_SECRET
    if not expected or x_identity_secret is None or not hmac.compare_digest(x_identity_secret, expected):
        raise UnauthorizedException("Invalid identity provider credentials")


@identity_router.post("/principals", response_model=PrincipalGet, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_identity_provider)])
async def principal_created(event: PrincipalCreatedEvent, db: Session = Depends(get_db)):
    user = IdentityService(db).create_principal(event.email, event.user_metadata, event.id)
    return PrincipalGet.model_validate(user)


@identity_router.delete("/principals/{user_id}", dependencies=[Depends(verify_identity_provider)])
async def principal_deleted(user_id: str, db: Session = Depends(get_db)):
    return IdentityService(db).delete_principal(user_id)
