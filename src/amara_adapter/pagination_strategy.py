"""
PaginationStrategy module for Amara's offset/limit list envelopes
"""

from typing import Dict, Any, List, Optional, Protocol

from amara_adapter.errors import MalformedPageError


class PageFilter(Protocol):
    """
    Hook invoked on every page before its records are accumulated

    Receives the decoded page envelope and returns it (possibly with a
    filtered 'objects' list). Setting page['meta']['next'] to None stops
    the pagination loop after the current page.
    """

    def __call__(self, page: Dict[str, Any]) -> Dict[str, Any]:
        ...


def is_paged_response(method: str, payload: Any) -> bool:
    """True when a decoded GET payload is a list envelope worth walking"""
    return method.upper() == 'GET' and isinstance(payload, dict) and 'objects' in payload


def extract_objects(page: Any) -> List[Any]:
    """
    Return the page's records

    Raises:
        MalformedPageError: If the page is not an envelope with a list of objects
    """
    if not isinstance(page, dict):
        raise MalformedPageError(f"Page is not a JSON object: {type(page).__name__}")
    objects = page.get('objects')
    if not isinstance(objects, list):
        raise MalformedPageError("'objects' property is not an array")
    return objects


class OffsetLimitPagination:
    """Offset-based pagination over the {'objects': [...], 'meta': {...}} envelope"""

    def __init__(self, limit: int, offset: int = 0):
        if limit <= 0:
            raise ValueError(f"Page limit must be positive, got {limit}")
        self.limit = limit
        self.offset = offset

    def get_next_page_params(self, current_params: Dict[str, Any],
                             page: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Compute the query for the page after `page`

        Args:
            current_params: Query parameters used for the current page
            page: Decoded current page, after the page filter ran

        Returns:
            Updated query parameters, or None if there are no more pages
        """
        meta = page.get('meta') or {}
        if meta.get('next') is None:
            return None

        total_count = self.extract_total_results(page)
        page_offset = meta.get('offset')
        if page_offset is None:
            page_offset = self.offset
        if total_count is not None and int(page_offset) + self.limit >= total_count:
            return None

        self.offset += self.limit
        next_params = dict(current_params)
        next_params['offset'] = self.offset
        next_params['limit'] = self.limit
        return next_params

    def extract_total_results(self, page: Dict[str, Any]) -> Optional[int]:
        """Extract total_count from the page's meta block"""
        try:
            return int(page['meta']['total_count'])
        except (KeyError, ValueError, TypeError):
            return None
