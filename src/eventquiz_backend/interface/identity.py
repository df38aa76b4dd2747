from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional

class PrincipalCreatedEvent(BaseModel):
    """Sent by the identity provider when it registers a principal."""
    id: Optional[str] = Field(None, description="Principal ID assigned by the identity provider")
    email: Optional[str] = Field(None, max_length=320, description="Contact email")
    user_metadata: Optional[Dict[str, Any]] = Field(None, description="Provider metadata, may carry display_name")

class PrincipalGet(BaseModel):
    id: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
