"""
Site-wide option store
"""

from typing import Any

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel


class Option(SQLModel, table=True):
    __tablename__ = "store_option"

    name: str = Field(primary_key=True)
    value: Any = Field(default=None, sa_column=Column(JSON))
