#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the auth models.

- Integer autoincrement primary key
- created_at / updated_at timestamps (server-side defaults)
- to_dict() that formats timestamps and strips SA internals

Persistence goes through DBStorage sessions handed to the services;
models never reach for a global storage object.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

TIME_FMT = "%Y-%m-%dT%H:%M:%S.%f"

# Declarative base for all models
Base = declarative_base()


class BaseModel:
    """Base mixin for all persistent models."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __init__(self, *args, **kwargs):
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)

    def __str__(self) -> str:
        return f"[{self.__class__.__name__}] ({self.id}) {self.to_dict()}"

    def to_dict(self) -> dict:
        """
        Return a dictionary of fields suitable for logs and debugging:
        - Adds __class__
        - Formats created_at / updated_at to TIME_FMT
        - Drops SQLAlchemy state and anything listed in __secret_fields__
        """
        hidden = set(getattr(self, "__secret_fields__", ()))
        d = {
            k: v for k, v in self.__dict__.items()
            if k != "_sa_instance_state" and k not in hidden
        }
        if isinstance(d.get("created_at"), datetime):
            d["created_at"] = d["created_at"].strftime(TIME_FMT)
        if isinstance(d.get("updated_at"), datetime):
            d["updated_at"] = d["updated_at"].strftime(TIME_FMT)
        d["__class__"] = self.__class__.__name__
        return d
