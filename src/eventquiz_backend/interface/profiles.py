from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from sqlalchemy.orm import Session
from eventquiz_backend.interface.base import BaseEntityGet, BaseEntityList, EntityInterface, ListQuery, strip_required
from eventquiz_backend.model.auth import Profile

class ProfileGet(BaseEntityGet):
    id: str = Field(description="Profile unique identifier")
    user_id: str = Field(description="Associated principal ID")
    display_name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Contact email")

    model_config = ConfigDict(from_attributes=True)

class ProfileList(BaseEntityList):
    id: str = Field(description="Profile unique identifier")
    user_id: str = Field(description="Associated principal ID")
    display_name: Optional[str] = Field(None, description="Display name")

    model_config = ConfigDict(from_attributes=True)

class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, min_length=1, max_length=255, description="Display name")
    email: Optional[str] = Field(None, max_length=320, description="Contact email")

    @field_validator('display_name')
    @classmethod
    def validate_display_name(cls, v):
        return strip_required(v, "Display name")

class ProfileQuery(ListQuery):
    user_id: Optional[str] = Field(None, description="Filter by principal ID")
    display_name: Optional[str] = Field(None, description="Filter by display name")

def profile_search(db: Session, query, params: Optional[ProfileQuery]):
    if params.user_id is not None:
        query = query.filter(Profile.user_id == params.user_id)
    if params.display_name is not None:
        query = query.filter(Profile.display_name.ilike(f"%{params.display_name}%"))

    return query.order_by(Profile.created_at)

class ProfileInterface(EntityInterface):
    get = ProfileGet
    list = ProfileList
    update = ProfileUpdate
    query = ProfileQuery
    search = profile_search
    endpoint = "profiles"
    model = Profile
    # profiles are provisioned on principal creation, never posted by clients
    operations = ("get", "list", "update")
