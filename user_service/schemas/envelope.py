"""Uniform response envelope."""

from typing import Generic, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class SuccessEnvelope(BaseModel, Generic[DataT]):
    """Successful response wrapper."""

    success: bool = True
    data: DataT


class ErrorInfo(BaseModel):
    code: str
    message: str


class ErrorEnvelope(BaseModel):
    """Error response wrapper."""

    success: bool = False
    error: ErrorInfo
