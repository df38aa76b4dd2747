from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from sqlalchemy.orm import Session
from eventquiz_backend.model.role import AppRole, UserRole
from eventquiz_backend.interface.base import BaseEntityList, ListQuery

class UserRoleCreate(BaseModel):
    user_id: str
    role: AppRole

class UserRoleGet(BaseModel):
    id: str
    user_id: str
    role: AppRole
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class UserRoleList(BaseEntityList):
    id: str
    user_id: str
    role: AppRole

    model_config = ConfigDict(from_attributes=True)

class UserRoleQuery(ListQuery):
    user_id: Optional[str] = None
    role: Optional[AppRole] = None

def user_role_search(db: Session, query, params: Optional[UserRoleQuery]):
    if params.user_id != None:
        query = query.filter(UserRole.user_id == params.user_id)
    if params.role != None:
        query = query.filter(UserRole.role == params.role)
    return query.order_by(UserRole.created_at)

class PrincipalRoles(BaseModel):
    """Roles of the caller, as the UI needs them to choose admin views."""
    user_id: Optional[str] = None
    roles: List[AppRole] = []
    is_admin: bool = False
