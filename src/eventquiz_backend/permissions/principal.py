from typing import Optional
from pydantic import BaseModel


class Principal(BaseModel):
    """Caller of an operation.

    Only the identity is carried. Role membership is never stored here; it
    is looked up through the role oracle each time a rule needs it, so a
    revoked grant stops applying on the very next decision.
    """

    user_id: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None


ANONYMOUS = Principal()
