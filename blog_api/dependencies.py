from typing import Annotated

from fastapi import Path, Query, Request

# Largest value a 32-bit signed INTEGER column can hold.  Ids and page
# numbers beyond it cannot match any row.
MAX_INT = 2**31 - 1

# Path parameter for a row id: larger values fail validation (400)
# instead of overflowing the database driver.
ResourceId = Annotated[int, Path(le=MAX_INT)]


def _parse_positive_int(raw: str | None, limit: int | None = None) -> int | None:
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    if value < 1 or (limit is not None and value > limit):
        return None
    return value


class PaginationParams:
    """
    Reusable FastAPI dependency that parses pagination query parameters.

    Pagination never rejects a request: an unparseable, non-positive or
    out-of-range ``page`` becomes 1, an unparseable or non-positive ``page_size``
    becomes the resource default, and anything above
    ``settings.MAX_PAGE_SIZE`` is clamped to it.

    Subclasses pick the default page size by naming a settings field in
    ``default_size_setting``.

    Attributes
    ----------
    page:
        1-based page number.
    page_size:
        Number of items per page.
    """

    default_size_setting = "POST_PAGE_SIZE"

    def __init__(
        self,
        request: Request,
        page: str | None = Query(None, description="Page number (1-based)."),
        page_size: str | None = Query(None, description="Items per page (max 100)."),
    ) -> None:
        settings = request.app.state.settings
        default_size = getattr(settings, self.default_size_setting)

        self.page = _parse_positive_int(page, limit=MAX_INT) or 1
        size = _parse_positive_int(page_size) or default_size
        self.page_size = min(size, settings.MAX_PAGE_SIZE)


class PostPagination(PaginationParams):
    default_size_setting = "POST_PAGE_SIZE"


class CommentPagination(PaginationParams):
    default_size_setting = "COMMENT_PAGE_SIZE"
