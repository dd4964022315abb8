"""
Static routing table mapping Amara resource identifiers to URL templates
"""

import string
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Any, Mapping, Optional
from urllib.parse import quote_plus, urlencode

from amara_adapter.errors import MissingParameterError


JSON_CONTENT = 'json'

# Templates are relative to the configured host, which ends with a slash
RESOURCE_TEMPLATES: Mapping[str, str] = MappingProxyType({
    'team_activities': 'teams/{team}/activity/',
    'video_activities': 'videos/{video_id}/activity/',
    'activity': 'activity/{activity_id}/',
    'videos': 'videos/',
    'video': 'videos/{video_id}/',
    'video_urls': 'videos/{video_id}/urls/',
    'video_url': 'videos/{video_id}/urls/{url_id}/',
    'languages': 'videos/{video_id}/languages/',
    'language': 'videos/{video_id}/languages/{language}/',
    'subtitles': 'videos/{video_id}/languages/{language}/subtitles/',
    'notes': 'videos/{video_id}/languages/{language}/subtitles/notes/',
    'tasks': 'teams/{team}/tasks/',
    'task': 'teams/{team}/tasks/{task_id}/',
    'members': 'teams/{team}/members/',
    'safe_members': 'teams/{team}/safe-members/',
    'member': 'teams/{team}/members/{user}/',
    'users': 'users/',
    'user': 'users/{user}/',
    'user_activities': 'users/{user}/activities/',
    'applications': 'teams/{team}/applications/',
    'projects': 'teams/{team}/projects/',
    'project': 'teams/{team}/projects/{project}/',
    'subtitle_requests': 'teams/{team}/subtitle-requests/',
    'subtitle_request': 'teams/{team}/subtitle-requests/{job_id}/',
    'pro_requests': 'teams/{team}/pro-requests/',
})


@dataclass(frozen=True)
class ResourceDescriptor:
    """Names one API endpoint shape plus the values for its path segments"""
    resource: str
    params: Dict[str, Any] = field(default_factory=dict)
    content_type: Optional[str] = JSON_CONTENT

    @property
    def is_json(self) -> bool:
        return self.content_type == JSON_CONTENT


def template_fields(template: str) -> list:
    """Path parameter names used by a URL template, in order"""
    return [name for _, name, _, _ in string.Formatter().parse(template) if name]


def encode_query(query: Optional[Mapping[str, Any]]) -> str:
    """
    Build a query string, dropping None values

    Booleans are sent as 1/0, which is what the API expects for flags.
    """
    if not query:
        return ''
    pairs = []
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = int(value)
        pairs.append((key, value))
    return urlencode(pairs)


def get_resource_url(host: str, descriptor: ResourceDescriptor,
                     query: Optional[Mapping[str, Any]] = None) -> Optional[str]:
    """
    Resolve a resource descriptor to a full request URL

    Args:
        host: API base URL, ending with a slash
        descriptor: Resource identifier and path parameters
        query: Optional query parameters; None values are omitted

    Returns:
        Full URL, or None if the resource identifier is unknown

    Raises:
        MissingParameterError: If a path parameter needed by the template is missing
    """
    template = RESOURCE_TEMPLATES.get(descriptor.resource)
    if template is None:
        return None

    segments = {}
    for name in template_fields(template):
        value = descriptor.params.get(name)
        if value is None:
            raise MissingParameterError(
                f"Resource '{descriptor.resource}' requires the '{name}' parameter"
            )
        segments[name] = quote_plus(str(value))

    url = host + template.format(**segments)
    query_string = encode_query(query)
    if query_string:
        url += '?' + query_string
    return url
