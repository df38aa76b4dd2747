from uuid import uuid4
from sqlalchemy import Column, DateTime, MetaData, String, func
from sqlalchemy.orm import declarative_base

metadata = MetaData()

Base = declarative_base(metadata=metadata)


def new_uuid() -> str:
    return str(uuid4())


def id_column():
    return Column(String(36), primary_key=True, default=new_uuid)


def created_at_column():
    return Column(DateTime(True), nullable=False, server_default=func.now())


def updated_at_column():
    # ORM side of the updated_at trigger installed on postgresql
    return Column(DateTime(True), nullable=False, server_default=func.now(), onupdate=func.now())
