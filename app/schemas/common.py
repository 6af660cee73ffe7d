"""
Shared response envelopes.
"""
from typing import Generic, List, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class PageMeta(BaseModel):
    current_page: int
    per_page: int
    total: int
    last_page: int


class Page(BaseModel, Generic[T]):
    """One page of a listing: items under ``data``, paging info under ``meta``."""
    data: List[T]
    meta: PageMeta


def build_page_meta(page: int, per_page: int, total: int) -> PageMeta:
    last_page = max(1, -(-total // per_page))
    return PageMeta(current_page=page, per_page=per_page, total=total, last_page=last_page)


class MessageResponse(BaseModel):
    message: str
