"""
Predicate rules used by the policy set.

A rule states one predicate over (principal, row) three ways:

- ``clause``: SQL expression used to filter reads, so non-permitted rows never
  leave the database.
- ``allows``: evaluation against a single in-memory row, used before writes.
- ``sql``: PostgreSQL expression text used when rendering row level security
  policies. ``public.current_principal_id()`` stands for the caller there.

Rules are pure. They may read through the role oracle or the session, but
they never write, so the order in which a policy set evaluates them does
not matter.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Type
from sqlalchemy import exists, false, select, true
from sqlalchemy.orm import Session

from eventquiz_backend.model.role import AppRole
from eventquiz_backend.permissions.oracle import RoleOracle
from eventquiz_backend.permissions.principal import Principal

CURRENT_PRINCIPAL_SQL = "public.current_principal_id()"


class PolicyContext:
    """Everything a rule may consult for one decision."""

    def __init__(self, principal: Principal, db: Session, oracle: Optional[RoleOracle] = None):
        self.principal = principal
        self.db = db
        self.oracle = oracle or RoleOracle(db)

    @property
    def user_id(self) -> Optional[str]:
        return self.principal.user_id


class Rule(ABC):

    @abstractmethod
    def clause(self, entity: Type[Any], ctx: PolicyContext):
        pass

    @abstractmethod
    def allows(self, row: Any, ctx: PolicyContext) -> bool:
        pass

    @abstractmethod
    def sql(self) -> str:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.sql()})"


class AlwaysRule(Rule):

    def clause(self, entity, ctx):
        return true()

    def allows(self, row, ctx) -> bool:
        return True

    def sql(self) -> str:
        return "true"


class OwnRowRule(Rule):
    """The row belongs to the caller: ``row.<column> == principal``."""

    def __init__(self, column: str = "user_id"):
        self.column = column

    def clause(self, entity, ctx):
        if ctx.principal.is_anonymous:
            return false()
        return getattr(entity, self.column) == ctx.user_id

    def allows(self, row, ctx) -> bool:
        if ctx.principal.is_anonymous:
            return False
        return getattr(row, self.column, None) == ctx.user_id

    def sql(self) -> str:
        return f"{CURRENT_PRINCIPAL_SQL} = {self.column}"


class HoldsRoleRule(Rule):
    """The caller holds ``role``. Independent of the row."""

    def __init__(self, role: AppRole):
        self.role = AppRole(role)

    def clause(self, entity, ctx):
        return true() if self.allows(None, ctx) else false()

    def allows(self, row, ctx) -> bool:
        return ctx.oracle.holds_role(ctx.user_id, self.role)

    def sql(self) -> str:
        return f"public.has_role({CURRENT_PRINCIPAL_SQL}, '{self.role.value}')"


class ColumnIsTrueRule(Rule):

    def __init__(self, column: str):
        self.column = column

    def clause(self, entity, ctx):
        return getattr(entity, self.column).is_(True)

    def allows(self, row, ctx) -> bool:
        return getattr(row, self.column, None) is True

    def sql(self) -> str:
        return f"{self.column} = true"


class ParentFlagRule(Rule):
    """A parent row referenced by ``foreign_key`` exists and has ``flag`` set."""

    def __init__(self, parent: Type[Any], foreign_key: str, flag: str):
        self.parent = parent
        self.foreign_key = foreign_key
        self.flag = flag

    def _parent_exists(self, parent_id):
        return exists().where(
            self.parent.id == parent_id,
            getattr(self.parent, self.flag).is_(True)
        )

    def clause(self, entity, ctx):
        return self._parent_exists(getattr(entity, self.foreign_key))

    def allows(self, row, ctx) -> bool:
        parent_id = getattr(row, self.foreign_key, None)
        if parent_id is None:
            return False
        return bool(ctx.db.execute(select(self._parent_exists(parent_id))).scalar())

    def sql(self) -> str:
        table = self.parent.__tablename__
        return (
            f"EXISTS (SELECT 1 FROM public.{table} parent "
            f"WHERE parent.id = {self.foreign_key} AND parent.{self.flag} = true)"
        )
