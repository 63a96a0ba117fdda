from dataclasses import dataclass

from fastapi import Query

from freshmarket.schemas.base import BaseSchema

# keeps offset = (page - 1) * limit inside a 64-bit store integer
MAX_PAGE = 1_000_000
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    page: int = Query(1, ge=1, le=MAX_PAGE, description="Page number starting from 1"),
    limit: int = Query(10, ge=1, le=MAX_LIMIT, description="Items per page"),
) -> PageParams:
    return PageParams(page=page, limit=limit)


class PageMeta(BaseSchema):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, params: PageParams, total: int) -> "PageMeta":
        total_pages = (total + params.limit - 1) // params.limit
        return cls(
            page=params.page,
            limit=params.limit,
            total=total,
            total_pages=total_pages,
            has_next=params.page < total_pages,
            has_prev=params.page > 1,
        )
