# src/marketplace/schemas/common.py

from pydantic import BaseModel
from typing import Generic, TypeVar

T = TypeVar('T')


class JsonResponse(BaseModel, Generic[T]):
    data: T
    msg: str = "success"
    status: int = 200


class MsgResponse(BaseModel):
    msg: str = "success"
