from pydantic import BaseModel, Field
from ..utils.constants import AppConstants


class PaginationInfo(BaseModel):
    """Pagination information"""

    current_page: int
    page_size: int
    total_items: int
    total_pages: int
    has_next: bool
    has_previous: bool

    @classmethod
    def from_total(cls, total_items: int, params: "PaginationParams") -> "PaginationInfo":
        total_pages = (total_items + params.page_size - 1) // params.page_size
        return cls(
            current_page=params.page,
            page_size=params.page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next=params.page < total_pages,
            has_previous=params.page > 1,
        )


class PaginationParams(BaseModel):
    """Pagination query parameters with constants"""

    page: int = Field(default=AppConstants.DEFAULT_PAGE, ge=1)
    page_size: int = Field(
        default=AppConstants.DEFAULT_PAGE_SIZE, ge=1, le=AppConstants.MAX_PAGE_SIZE
    )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size
