# api/routes/users.py

from typing import List
from fastapi import APIRouter, Depends, Query, status

from api.deps import ERROR_RESPONSES, get_account_service, get_current_user_id
from api.schemas.user import ProfileSchema, ProfileWithRoles, ProfileUpdate, UserRegister, RoleGrant
from core.sa.models import AppRole
from core.services import AccountService

router = APIRouter(prefix="/users", tags=["users"], responses=ERROR_RESPONSES)

@router.post("", response_model=ProfileWithRoles, status_code=status.HTTP_201_CREATED)
def register_user(payload: UserRegister, service: AccountService = Depends(get_account_service)):
    """
    Sign-up hook called by the identity provider when an account is created.
    Creates the profile and grants the default student role.
    """
    return service.register(payload.id, payload.email, payload.full_name)

@router.get("", response_model=List[ProfileWithRoles])
def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(50, ge=1, le=100, description="Items per page"),
    user_id: str = Depends(get_current_user_id),
    service: AccountService = Depends(get_account_service)
):
    """Profiles with their roles, for role administration."""
    return service.list_users(user_id, limit=size, offset=(page - 1) * size)

@router.get("/me", response_model=ProfileWithRoles)
def get_me(user_id: str = Depends(get_current_user_id), service: AccountService = Depends(get_account_service)):
    return service.get_profile(user_id, user_id)

@router.patch("/me", response_model=ProfileSchema)
def update_me(
    payload: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    service: AccountService = Depends(get_account_service)
):
    return service.update_profile(user_id, user_id, payload.model_dump(exclude_unset=True))

@router.get("/{target_id}/roles", response_model=List[str])
def get_roles(
    target_id: str,
    user_id: str = Depends(get_current_user_id),
    service: AccountService = Depends(get_account_service)
):
    return service.list_roles(user_id, target_id)

@router.post("/{target_id}/roles", response_model=List[str], status_code=status.HTTP_201_CREATED)
def grant_role(
    target_id: str,
    payload: RoleGrant,
    user_id: str = Depends(get_current_user_id),
    service: AccountService = Depends(get_account_service)
):
    service.grant_role(user_id, target_id, payload.role.value)
    return service.list_roles(user_id, target_id)

@router.delete("/{target_id}/roles/{role}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_role(
    target_id: str,
    role: AppRole,
    user_id: str = Depends(get_current_user_id),
    service: AccountService = Depends(get_account_service)
):
    service.revoke_role(user_id, target_id, role.value)
