from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eventquiz_backend.database import get_db
from eventquiz_backend.interface.user_roles import PrincipalRoles, UserRoleCreate, UserRoleGet, UserRoleList, UserRoleQuery, user_role_search
from eventquiz_backend.model.role import AppRole, UserRole
from eventquiz_backend.permissions.auth import get_current_principal
from eventquiz_backend.permissions.core import check_admin, check_permissions
from eventquiz_backend.permissions.oracle import RoleOracle
from eventquiz_backend.permissions.handlers import Action
from eventquiz_backend.permissions.principal import Principal
from eventquiz_backend.services.roles import RoleService

user_roles_router = APIRouter()

@user_roles_router.get("", response_model=list[UserRoleList])
async def list_user_roles(
    principal: Annotated[Principal, Depends(get_current_principal)],
    response: Response,
    db: Session = Depends(get_db),
    params: UserRoleQuery = Depends()
):
    """List role grants. Only admins see any."""
    query = user_role_search(db, check_permissions(principal, UserRole, Action.read, db), params)
    response.headers["X-Total-Count"] = str(query.order_by(None).count())

    if params.limit != None:
        query = query.limit(params.limit)
    if params.skip != None:
        query = query.offset(params.skip)

    return [UserRoleList.model_validate(grant) for grant in query.all()]

@user_roles_router.post("", response_model=UserRoleGet, status_code=status.HTTP_201_CREATED)
async def grant_user_role(principal: Annotated[Principal, Depends(get_current_principal)], entity: UserRoleCreate, db: Session = Depends(get_db)):
    """Grant a role. Granting a role the principal already holds returns the existing grant."""
    grant = RoleService(db).grant_role(principal, entity.user_id, entity.role)
    return UserRoleGet.model_validate(grant)

@user_roles_router.delete("/users/{user_id}/roles/{role}")
async def revoke_user_role(principal: Annotated[Principal, Depends(get_current_principal)], user_id: str, role: AppRole, db: Session = Depends(get_db)):
    return RoleService(db).revoke_role(principal, user_id, role)

@user_roles_router.get("/me", response_model=PrincipalRoles)
async def get_own_roles(principal: Annotated[Principal, Depends(get_current_principal)], db: Session = Depends(get_db)):
    """Roles held by the caller. Anonymous callers hold none."""
    return PrincipalRoles(
        user_id=principal.user_id,
        roles=RoleOracle(db).roles_of(principal.user_id),
        is_admin=check_admin(principal, db),
    )
