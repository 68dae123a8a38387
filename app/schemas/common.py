# app/schemas/common.py
from pydantic import BaseModel
from typing import Generic, List, Literal, Optional, TypeVar

T = TypeVar("T")


class ErrorDetail(BaseModel):
    field: Optional[str] = None
    message: str


class ApiSuccess(BaseModel, Generic[T]):
    status: Literal["success"] = "success"
    message: Optional[str] = None
    data: T


class ApiError(BaseModel):
    status: Literal["error"] = "error"
    message: str
    errors: List[ErrorDetail] = []


class PlaceholderResponse(BaseModel):
    message: str
