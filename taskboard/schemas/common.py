"""Shared schema base classes and the response envelope"""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class Envelope(BaseModel, Generic[DataT]):
    success: bool = True
    data: Optional[DataT] = None
    message: str = ""


class ErrorEnvelope(BaseModel):
    success: bool = False
    message: str
