"""
Test suite for ResourceFetcher component
Following TDD approach with AAA pattern and descriptive naming
"""

import json
import pytest
from unittest.mock import Mock
from urllib.parse import parse_qs, urlparse
from amara_adapter.credentials import Credentials
from amara_adapter.errors import InvalidCallbackError, MalformedPageError, UnknownResourceError
from amara_adapter.http_client import APIResponse, HTTPClient
from amara_adapter.resource_fetcher import ResourceFetcher
from amara_adapter.resource_router import ResourceDescriptor

API_KEY = '0123456789abcdef0123456789abcdef01234567'


def json_response(payload, status_code=200):
    return APIResponse(status_code=status_code, raw_body=json.dumps(payload))


class PagedBackend:
    """Serves records in offset/limit pages the way the API does"""

    def __init__(self, records, limit):
        self.records = records
        self.limit = limit
        self.requested_urls = []

    def send(self, method, headers, url, body=None):
        self.requested_urls.append(url)
        query = parse_qs(urlparse(url).query)
        offset = int(query.get('offset', ['0'])[0])
        chunk = self.records[offset:offset + self.limit]
        has_more = offset + self.limit < len(self.records)
        return json_response({
            'meta': {
                'offset': offset,
                'limit': self.limit,
                'total_count': len(self.records),
                'next': f'https://amara.org/api/videos/?offset={offset + self.limit}' if has_more else None,
                'previous': None,
            },
            'objects': chunk,
        })


@pytest.fixture
def credentials():
    return Credentials.create('https://amara.org/api/', 'alice', API_KEY, '20190619')


@pytest.fixture
def http_client():
    return Mock(spec=HTTPClient)


class TestResourceFetcher:
    """Test suite for ResourceFetcher request and pagination behaviour"""

    def test_fetch_with_three_pages_returns_all_records_in_order(self, credentials):
        """
        Test that a full fetch walks every page without duplicates
        """
        # Arrange
        records = [{'id': i} for i in range(6)]
        backend = PagedBackend(records, limit=2)
        fetcher = ResourceFetcher(credentials, backend, limit=2)

        # Act
        result = fetcher.fetch('GET', ResourceDescriptor('videos'), {'team': 't', 'limit': 2, 'offset': 0})

        # Assert
        assert result == records
        assert len(backend.requested_urls) == 3
        assert 'offset=4' in backend.requested_urls[2]

    def test_fetch_with_filter_clearing_next_returns_first_page_only(self, credentials):
        """
        Test that a page filter can stop pagination after the first page
        """
        # Arrange
        backend = PagedBackend([{'id': i} for i in range(6)], limit=2)
        fetcher = ResourceFetcher(credentials, backend, limit=2)

        def stop_after_first_page(page):
            page['meta']['next'] = None
            return page

        # Act
        result = fetcher.fetch('GET', ResourceDescriptor('videos'), {'limit': 2},
                               page_filter=stop_after_first_page)

        # Assert
        assert result == [{'id': 0}, {'id': 1}]
        assert len(backend.requested_urls) == 1

    def test_fetch_with_filter_narrowing_objects_keeps_filtered_records(self, credentials):
        """
        Test that the filter runs before records are accumulated
        """
        # Arrange
        backend = PagedBackend([{'id': i} for i in range(6)], limit=2)
        fetcher = ResourceFetcher(credentials, backend, limit=2)

        def even_only(page):
            page['objects'] = [obj for obj in page['objects'] if obj['id'] % 2 == 0]
            return page

        # Act
        result = fetcher.fetch('GET', ResourceDescriptor('videos'), {'limit': 2}, page_filter=even_only)

        # Assert
        assert result == [{'id': 0}, {'id': 2}, {'id': 4}]

    def test_fetch_with_non_callable_filter_raises_before_request(self, credentials, http_client):
        # Arrange
        fetcher = ResourceFetcher(credentials, http_client)

        # Act & Assert
        with pytest.raises(InvalidCallbackError):
            fetcher.fetch('GET', ResourceDescriptor('videos'), page_filter='not callable')

        http_client.send.assert_not_called()

    def test_fetch_with_scalar_objects_raises_malformed_page_error(self, credentials, http_client):
        """
        Test that a malformed page aborts the fetch rather than returning partial data
        """
        # Arrange
        http_client.send.side_effect = [
            json_response({'meta': {'offset': 0, 'total_count': 4, 'next': 'more'}, 'objects': [{'id': 0}, {'id': 1}]}),
            json_response({'meta': {'offset': 2, 'total_count': 4, 'next': None}, 'objects': 'oops'}),
        ]
        fetcher = ResourceFetcher(credentials, http_client, limit=2)

        # Act & Assert
        with pytest.raises(MalformedPageError):
            fetcher.fetch('GET', ResourceDescriptor('videos'), {'limit': 2})

    def test_fetch_with_plain_text_body_returns_it_unmodified(self, credentials, http_client):
        """
        Test that non-JSON payloads such as SRT files pass through
        """
        # Arrange
        srt = "1\n00:00:01,000 --> 00:00:02,000\nHello\n"
        http_client.send.return_value = APIResponse(status_code=200, raw_body=srt)
        fetcher = ResourceFetcher(credentials, http_client)
        descriptor = ResourceDescriptor('subtitles', {'video_id': 'AbCdEfGh1234', 'language': 'en'},
                                        content_type=None)

        # Act
        result = fetcher.fetch('GET', descriptor, {'format': 'srt'})

        # Assert
        assert result == srt

    def test_fetch_with_single_object_returns_decoded_json(self, credentials, http_client):
        # Arrange
        http_client.send.return_value = json_response({'id': 'AbCdEfGh1234', 'title': 'Talk'})
        fetcher = ResourceFetcher(credentials, http_client)

        # Act
        result = fetcher.fetch('GET', ResourceDescriptor('video', {'video_id': 'AbCdEfGh1234'}))

        # Assert
        assert result == {'id': 'AbCdEfGh1234', 'title': 'Talk'}

    def test_fetch_with_post_returns_envelope_without_paginating(self, credentials, http_client):
        """
        Test that non-GET calls never paginate, even when the body has objects
        """
        # Arrange
        envelope = {'meta': {'offset': 0, 'total_count': 10, 'next': 'more'}, 'objects': [1]}
        http_client.send.return_value = json_response(envelope)
        fetcher = ResourceFetcher(credentials, http_client)

        # Act
        result = fetcher.fetch('POST', ResourceDescriptor('videos'), body={'team': 't'})

        # Assert
        assert result == envelope
        assert http_client.send.call_count == 1

    def test_fetch_with_exhausted_transport_returns_none(self, credentials, http_client):
        # Arrange
        http_client.send.return_value = None
        fetcher = ResourceFetcher(credentials, http_client)

        # Act & Assert
        assert fetcher.fetch('GET', ResourceDescriptor('videos')) is None

    def test_fetch_with_exhaustion_mid_pagination_returns_none_not_partial(self, credentials, http_client):
        # Arrange
        http_client.send.side_effect = [
            json_response({'meta': {'offset': 0, 'total_count': 4, 'next': 'more'}, 'objects': [1, 2]}),
            None,
        ]
        fetcher = ResourceFetcher(credentials, http_client, limit=2)

        # Act & Assert
        assert fetcher.fetch('GET', ResourceDescriptor('videos'), {'limit': 2}) is None

    def test_fetch_with_unknown_resource_raises_without_request(self, credentials, http_client):
        # Arrange
        fetcher = ResourceFetcher(credentials, http_client)

        # Act & Assert
        with pytest.raises(UnknownResourceError):
            fetcher.fetch('GET', ResourceDescriptor('playlists'))

        http_client.send.assert_not_called()

    def test_fetch_with_json_descriptor_serialises_body(self, credentials, http_client):
        """
        Test that bodies are JSON-encoded for JSON resources and sent with JSON headers
        """
        # Arrange
        http_client.send.return_value = json_response({'id': 'new'})
        fetcher = ResourceFetcher(credentials, http_client)

        # Act
        fetcher.fetch('POST', ResourceDescriptor('videos'), body={'team': 't', 'video_url': 'u'})

        # Assert
        method, headers, url, body = http_client.send.call_args[0]
        assert method == 'POST'
        assert url == 'https://amara.org/api/videos/'
        assert json.loads(body) == {'team': 't', 'video_url': 'u'}
        assert headers['Content-Type'] == 'application/json'
        assert headers['Accept'] == 'application/json'

    def test_fetch_with_non_json_descriptor_passes_body_through(self, credentials, http_client):
        # Arrange
        http_client.send.return_value = APIResponse(status_code=200, raw_body='ok')
        fetcher = ResourceFetcher(credentials, http_client)
        descriptor = ResourceDescriptor('subtitles', {'video_id': 'AbCdEfGh1234', 'language': 'en'},
                                        content_type=None)

        # Act
        fetcher.fetch('PUT', descriptor, body='raw payload')

        # Assert
        assert http_client.send.call_args[0][3] == 'raw payload'

    def test_build_headers_includes_key_version_and_cookies(self):
        """
        Test that authentication, version and session cookie headers are sent
        """
        # Arrange
        credentials = Credentials.create('https://amara.org/api/', 'alice', API_KEY, '20190619',
                                         cookies=['Cookie: sessionid=abc'])
        fetcher = ResourceFetcher(credentials, Mock(spec=HTTPClient))

        # Act
        headers = fetcher.build_headers()

        # Assert
        assert headers == {
            'x-api-key': API_KEY,
            'X-API-FUTURE': '20190619',
            'Cookie': 'sessionid=abc',
        }

    def test_shorthand_methods_use_matching_http_verbs(self, credentials, http_client):
        # Arrange
        http_client.send.return_value = json_response({})
        fetcher = ResourceFetcher(credentials, http_client)
        descriptor = ResourceDescriptor('video', {'video_id': 'AbCdEfGh1234'})

        # Act
        fetcher.get_resource(descriptor)
        fetcher.create_resource(ResourceDescriptor('videos'))
        fetcher.set_resource(descriptor)
        fetcher.delete_resource(descriptor)

        # Assert
        methods = [call[0][0] for call in http_client.send.call_args_list]
        assert methods == ['GET', 'POST', 'PUT', 'DELETE']
