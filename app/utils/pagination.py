import math

from schemas.common import PaginationMeta

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def page_offset(page: int, limit: int) -> int:
    return (max(1, page) - 1) * limit


def build_pagination(page: int, limit: int, total: int, returned: int) -> PaginationMeta:
    skip = page_offset(page, limit)
    return PaginationMeta(
        current_page=page,
        total_pages=math.ceil(total / limit) if limit else 0,
        total_items=total,
        has_more=skip + returned < total,
    )
