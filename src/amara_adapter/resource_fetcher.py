"""
ResourceFetcher module: routes descriptors, sends requests and walks pagination
"""

import json
from typing import Dict, Any, List, Mapping, Optional, Union

from amara_adapter.credentials import Credentials
from amara_adapter.errors import InvalidCallbackError, UnknownResourceError
from amara_adapter.http_client import HTTPClient
from amara_adapter.logging_config import SupportsLeveledLogging, resolve_logger
from amara_adapter.pagination_strategy import (
    OffsetLimitPagination, PageFilter, extract_objects, is_paged_response
)
from amara_adapter.resource_router import ResourceDescriptor, get_resource_url


FetchResult = Union[List[Any], Dict[str, Any], str, None]


class ResourceFetcher:
    """
    Turns a resource descriptor into one or more HTTP round-trips

    Results:
    - a list of records for paginated GET responses (the envelope is dropped)
    - the decoded JSON for single objects and for non-GET calls
    - the raw body when it is not JSON (e.g. a subtitle file)
    - None when the transport gave up after its retries
    """

    def __init__(self, credentials: Credentials, http_client: HTTPClient,
                 limit: int = 100, logger: Optional[SupportsLeveledLogging] = None):
        self.credentials = credentials
        self.http_client = http_client
        self.limit = limit
        self.logger = logger if logger is not None else resolve_logger()

    def build_headers(self, content_type: Optional[str] = None) -> Dict[str, str]:
        """
        Generate the headers needed by Amara's API

        Args:
            content_type: 'json' to add JSON content negotiation headers

        Returns:
            Header mapping including any configured session cookies
        """
        headers = {
            'x-api-key': self.credentials.api_key,
            'X-API-FUTURE': self.credentials.api_version,
        }
        if content_type == 'json':
            headers['Content-Type'] = 'application/json'
            headers['Accept'] = 'application/json'
        for cookie in self.credentials.cookies:
            name, _, value = cookie.partition(':')
            headers[name.strip()] = value.strip()
        return headers

    def fetch(self, method: str, descriptor: ResourceDescriptor,
              query: Optional[Mapping[str, Any]] = None,
              body: Any = None,
              page_filter: Optional[PageFilter] = None) -> FetchResult:
        """
        Fetch all required data from a resource

        Args:
            method: HTTP method
            descriptor: Resource identifier, content type and path parameters
            query: Query parameters; None values are omitted from the URL
            body: Request payload, JSON-encoded when the descriptor is JSON
            page_filter: Called with each decoded page before its records are
                kept; it may set page['meta']['next'] to None to stop early

        Raises:
            UnknownResourceError: If the resource identifier is not routed
            InvalidCallbackError: If page_filter is not callable
            MalformedPageError: If a page's 'objects' field is not a list
        """
        if page_filter is not None and not callable(page_filter):
            raise InvalidCallbackError("The 'page_filter' argument is not a callable function.")

        params: Dict[str, Any] = dict(query or {})
        url = get_resource_url(self.credentials.host, descriptor, params)
        if url is None:
            raise UnknownResourceError(f"No such resource: {descriptor.resource}")

        headers = self.build_headers(descriptor.content_type)
        if body is not None and descriptor.is_json:
            body = json.dumps(body)

        pagination = OffsetLimitPagination(
            limit=int(params.get('limit') or self.limit),
            offset=int(params.get('offset') or 0)
        )
        results: List[Any] = []
        page_number = 0

        while True:
            response = self.http_client.send(method, headers, url, body)
            if response is None:
                self.logger.error(f"No response for {method} {descriptor.resource}; outcome unknown")
                return None

            try:
                page = json.loads(response.raw_body)
            except ValueError:
                # Not JSON, e.g. a subtitle track in SRT
                return response.raw_body

            if not is_paged_response(method, page):
                return page

            # validate before the filter sees the page
            extract_objects(page)
            page_number += 1
            if page_filter is not None:
                page = page_filter(page)
            results.extend(extract_objects(page))

            next_params = pagination.get_next_page_params(params, page)
            if next_params is None:
                break
            params = next_params
            url = get_resource_url(self.credentials.host, descriptor, params)

        self.logger.debug(f"Fetched {len(results)} {descriptor.resource} records over {page_number} pages")
        return results

    def get_resource(self, descriptor: ResourceDescriptor, query: Optional[Mapping[str, Any]] = None,
                     body: Any = None, page_filter: Optional[PageFilter] = None) -> FetchResult:
        return self.fetch('GET', descriptor, query, body, page_filter)

    def create_resource(self, descriptor: ResourceDescriptor, query: Optional[Mapping[str, Any]] = None,
                        body: Any = None) -> FetchResult:
        return self.fetch('POST', descriptor, query, body)

    def set_resource(self, descriptor: ResourceDescriptor, query: Optional[Mapping[str, Any]] = None,
                     body: Any = None) -> FetchResult:
        return self.fetch('PUT', descriptor, query, body)

    def delete_resource(self, descriptor: ResourceDescriptor, query: Optional[Mapping[str, Any]] = None,
                        body: Any = None) -> FetchResult:
        return self.fetch('DELETE', descriptor, query, body)
