import enum
from sqlalchemy import Column, Enum, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base, created_at_column, id_column


class AppRole(str, enum.Enum):
    admin = "admin"
    user = "user"


class UserRole(Base):
    __tablename__ = 'user_role'
    __table_args__ = (
        UniqueConstraint('user_id', 'role', name='user_role_user_id_role_key'),
        Index('idx_user_role_user_id', 'user_id'),
    )

    id = id_column()
    created_at = created_at_column()
    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    role = Column(Enum(AppRole, name='app_role', values_callable=lambda roles: [r.value for r in roles]), nullable=False)

    user = relationship('User', back_populates='user_roles')
