from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

# Upper bound for page and limit; keeps (page - 1) * limit inside a signed 64-bit int
MAX_QUERY_INT = 2**31 - 1


# PUBLIC_INTERFACE
def parse_positive_int(value: Optional[str], default: int) -> int:
    """
    Parse a query-string integer that must be at least 1.

    Missing or non-numeric input yields `default`; zero and negatives are
    raised to 1 and anything above MAX_QUERY_INT is lowered to it.
    """
    if value is None:
        return default
    try:
        number = int(value.strip())
    except ValueError:
        return default
    return min(max(1, number), MAX_QUERY_INT)


# PUBLIC_INTERFACE
def pagination_envelope(
    items: Union[Sequence[Any], Iterable[Any]],
    total: int,
    page: int,
    limit: int,
) -> Dict[str, Any]:
    """
    Build a standard pagination envelope for list endpoints.

    Args:
        items: The list/iterable of items for the current page.
        total: Total number of items that match the query (ignoring pagination).
        page: The 1-based page number that was requested.
        limit: The page size used for pagination.

    Returns:
        Dict with keys: data, page, limit, total.
    """
    # Ensure items is materialized as a list (in case an iterator is passed)
    materialized: List[Any] = list(items) if not isinstance(items, list) else items
    return {
        "data": materialized,
        "page": int(page),
        "limit": int(limit),
        "total": int(total),
    }
