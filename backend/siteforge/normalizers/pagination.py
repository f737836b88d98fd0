# siteforge/normalizers/pagination.py
from typing import Callable, Any, List, Dict, Union

from siteforge.utils.pagination import CursorMeta, OffsetMeta


def normalize_pagination(
    items: List[Any],
    normalize_fn: Callable[[Any], Dict[str, Any]],
    meta: Union[CursorMeta, OffsetMeta],
) -> Dict[str, Any]:
    """
    Normalize paginated API responses.

    Works for both strategies; `meta` is passed through as-is so the
    response shape follows whichever paginator produced it.
    """
    return {
        "success": True,
        "data": [normalize_fn(item) for item in items],
        "pagination": dict(meta),
    }
