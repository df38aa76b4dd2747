from sqlalchemy import JSON, Column, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import Base, created_at_column, id_column, updated_at_column


class User(Base):
    """Principal as registered by the identity provider.

    Rows are created and removed by the identity provider only; the rest of
    the system reacts to them.
    """
    __tablename__ = 'user'

    id = id_column()
    created_at = created_at_column()
    email = Column(String(320), unique=True)
    user_metadata = Column(JSON)

    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    user_roles = relationship("UserRole", back_populates="user", uselist=True, cascade="all, delete-orphan", passive_deletes=True)
    quizzes = relationship("Quiz", back_populates="creator", uselist=True, cascade="all, delete-orphan", passive_deletes=True)


class Profile(Base):
    __tablename__ = 'profile'

    id = id_column()
    created_at = created_at_column()
    updated_at = updated_at_column()
    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, unique=True)
    display_name = Column(String(255))
    email = Column(String(320))

    user = relationship('User', back_populates='profile')
