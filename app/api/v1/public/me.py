from typing import Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_optional_user
from app.models.user import User
from app.schemas.user import MeResponse, TenantSummary, UserSummary

router = APIRouter(prefix="/me", tags=["Me"])


@router.get("/", response_model=MeResponse)
def get_me(user: Optional[User] = Depends(get_optional_user)):
    """
    Who the caller is. Authenticated callers without an account get
    `has_account: false` so the client can offer tenant registration.
    """
    if user is None:
        return MeResponse(has_account=False)
    return MeResponse(
        has_account=True,
        user=UserSummary.model_validate(user),
        tenant=TenantSummary.model_validate(user.tenant) if user.tenant else None,
    )
