from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Literal, Optional, Tuple

Op = Literal["eq", "gt", "gte", "lt", "lte", "in"]
Dir = Literal["asc", "desc"]

class FilterClause(BaseModel):
    field: str
    op: Op = "eq"
    value: Any

class SortClause(BaseModel):
    field: str
    dir: Dir = "asc"

class PageLink(BaseModel):
    page: int
    limit: int

class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(alias="currentPage")
    limit: int
    total: int
    next: Optional[PageLink] = None
    prev: Optional[PageLink] = None

class ListQuery(BaseModel):
    filters: List[FilterClause] = []
    select: Optional[Tuple[str, ...]] = None
    sort: List[SortClause] = []
    page: int = 1
    limit: int = 25

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def paginate(self, total: int) -> Pagination:
        """Envelope for this window once the unpaginated total is known."""
        return Pagination(
            current_page=self.page,
            limit=self.limit,
            total=total,
            next=PageLink(page=self.page + 1, limit=self.limit) if self.page * self.limit < total else None,
            prev=PageLink(page=self.page - 1, limit=self.limit) if self.page > 1 else None,
        )
