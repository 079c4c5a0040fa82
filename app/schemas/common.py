# app/schemas/common.py
from pydantic import BaseModel


class PaginationOut(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool


class MessageOut(BaseModel):
    success: bool = True
    message: str
