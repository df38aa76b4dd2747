from abc import ABC
from datetime import datetime
from typing import Optional, Any
from pydantic import BaseModel, Field

ALL_OPERATIONS = ("create", "get", "list", "update", "delete")

class ListQuery(BaseModel):
    skip: Optional[int] = Field(0, ge=0)
    limit: Optional[int] = Field(100, ge=1, le=1000)

class EntityInterface(ABC):
    create: BaseModel = None
    get: BaseModel = None
    list: BaseModel = None
    update: BaseModel = None
    query: BaseModel = None
    search: Any = None
    endpoint: str = None
    model: Any = None

    # routes exposed over HTTP; policies still govern every one of them
    operations: tuple = ALL_OPERATIONS

    # pre_create(values, principal, db) fills server assigned columns
    pre_create: Any = None

class BaseEntityList(BaseModel):
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last modification timestamp")

class BaseEntityGet(BaseEntityList):
    pass

def strip_required(value: Optional[str], label: str) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError(f'{label} cannot be empty or only whitespace')
    return value

def reject_null(value: Any) -> Any:
    # omitted fields stay untouched, an explicit null would clear a NOT NULL column
    if value is None:
        raise ValueError('Field cannot be null')
    return value
