# backend/routes/admin.py
from fastapi import APIRouter, Depends

from routes.users import get_account_service
from schemas.user import AccessResponse, AccessUpdate, CallerIdentity
from services.accounts import AccountService
from utils.tokenJWT import get_caller_identity

router = APIRouter(prefix="/api/user", tags=["Admin"])


# Update another user's role or admin flag (Admin only)
@router.patch("/{user_id}/access", response_model=AccessResponse)
def update_user_access(
    user_id: str,
    payload: AccessUpdate,
    service: AccountService = Depends(get_account_service),
    identity: CallerIdentity = Depends(get_caller_identity),
):
    return service.update_access(identity, user_id, payload)
