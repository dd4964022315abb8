"""
AmaraAPI: per-resource operations on top of the ResourceFetcher
"""

from dataclasses import replace
from typing import Dict, Any, List, Optional

from amara_adapter.config_loader import AdapterConfig, ConfigLoader
from amara_adapter.credentials import Credentials
from amara_adapter.errors import InvalidArgumentError, InvalidCallbackError
from amara_adapter.http_client import HTTPClient
from amara_adapter.logging_config import resolve_logger
from amara_adapter.pagination_strategy import PageFilter
from amara_adapter.resource_fetcher import FetchResult, ResourceFetcher
from amara_adapter.resource_router import ResourceDescriptor
from amara_adapter.validators import is_valid_task_name, is_valid_video_id, validate_api_version


def _json(resource: str, **params: Any) -> ResourceDescriptor:
    return ResourceDescriptor(resource=resource, params=params, content_type='json')


def _only_set(**values: Any) -> Dict[str, Any]:
    """Keep the keys whose value was given, so the API leaves the others untouched"""
    return {key: value for key, value in values.items() if value is not None}


def _is_language(record: Any) -> bool:
    """Error bodies decode to dicts as well, so check for a language-only field"""
    return isinstance(record, dict) and 'language_code' in record


def _is_user(record: Any) -> bool:
    return isinstance(record, dict) and 'username' in record


class AmaraAPI:
    """
    Client for Amara's REST API

    Every list operation walks the offset/limit pagination and returns the
    complete list of records. Operations that take a video id return None
    without any request when the id is not a 12 character alphanumeric string.
    A None result from any call after a network failure means the outcome is
    unknown (retry later), not that the resource does not exist.
    """

    def __init__(self, host: str, user: str, api_key: str, api_version: str = '',
                 logger: Any = None, limit: int = 100, max_retries: int = 10,
                 backoff_seconds: float = 30.0, verify_tls: bool = True,
                 timeout_seconds: Optional[float] = 60.0,
                 deadline_seconds: Optional[float] = None,
                 raise_on_exhausted: bool = False,
                 cookies: Optional[List[str]] = None,
                 http_client: Optional[HTTPClient] = None):
        self.logger = resolve_logger(logger)
        self.credentials = Credentials.create(host, user, api_key, api_version, cookies)
        self.http_client = http_client or HTTPClient(
            max_retries=max_retries,
            backoff_seconds=backoff_seconds,
            verify_tls=verify_tls,
            timeout_seconds=timeout_seconds,
            deadline_seconds=deadline_seconds,
            raise_on_exhausted=raise_on_exhausted
        )
        self.fetcher = ResourceFetcher(self.credentials, self.http_client, limit, self.logger)

    @classmethod
    def from_config(cls, config: AdapterConfig, logger: Any = None) -> 'AmaraAPI':
        """
        Build a client from a loaded TOML configuration

        Raises:
            EnvironmentVariableError: If the API key variable is not set
        """
        ConfigLoader.validate_environment_variables(config)
        return cls(
            host=config.host,
            user=config.user,
            api_key=ConfigLoader.get_environment_value(config.api_key_env),
            api_version=config.api_version,
            logger=logger,
            limit=config.limit,
            max_retries=config.max_retries,
            backoff_seconds=config.backoff_seconds,
            verify_tls=config.verify_tls,
            timeout_seconds=config.timeout_seconds,
            deadline_seconds=config.deadline_seconds,
            raise_on_exhausted=config.raise_on_exhausted,
            cookies=config.cookies
        )

    # Settings

    @property
    def limit(self) -> int:
        return self.fetcher.limit

    @limit.setter
    def limit(self, value: int) -> None:
        if value <= 0:
            raise InvalidArgumentError(f"Page limit must be positive, got {value}")
        self.fetcher.limit = value

    def set_account(self, host: str, user: str, api_key: str, api_version: str = '') -> None:
        """
        Change accounts

        Raises:
            InvalidAPIKeyError: If the new key is malformed
            InvalidAPISettingsError: If the change would reuse a key across accounts
        """
        self._set_credentials(self.credentials.change_account(host, user, api_key, api_version))

    def set_api_version(self, api_version: str) -> bool:
        """Set the X-API-FUTURE version tag; an empty tag is ignored"""
        if not api_version:
            return False
        validate_api_version(api_version)
        self._set_credentials(replace(self.credentials, api_version=api_version))
        return True

    def set_cookies(self, cookies: Optional[List[str]]) -> None:
        """Raw 'Name: value' header lines sent with every request, for session-bound endpoints"""
        self._set_credentials(replace(self.credentials, cookies=list(cookies or [])))

    def set_logger(self, logger: Any) -> None:
        self.logger = resolve_logger(logger)
        self.fetcher.logger = self.logger

    def close(self) -> None:
        self.http_client.close_connection()

    def __enter__(self) -> 'AmaraAPI':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _set_credentials(self, credentials: Credentials) -> None:
        self.credentials = credentials
        self.fetcher.credentials = credentials
        # server-set cookies belong to the previous account
        self.http_client.close_connection()

    def _page_query(self, limit: Optional[int], offset: Optional[int], **filters: Any) -> Dict[str, Any]:
        query = dict(filters)
        query['limit'] = limit if limit is not None else self.limit
        query['offset'] = offset if offset is not None else 0
        return query

    @staticmethod
    def _check_filter(page_filter: Optional[PageFilter]) -> None:
        if page_filter is not None and not callable(page_filter):
            raise InvalidCallbackError("The 'page_filter' argument is not a callable function.")

    # Subtitle languages

    def get_video_languages(self, video_id: str, limit: Optional[int] = None,
                            offset: Optional[int] = None) -> FetchResult:
        if not is_valid_video_id(video_id):
            return None
        return self.fetcher.get_resource(_json('languages', video_id=video_id),
                                         self._page_query(limit, offset))

    def get_video_language(self, video_id: str, language_code: str) -> FetchResult:
        """Get information about a subtitle track in the specified language"""
        if not is_valid_video_id(video_id):
            return None
        return self.fetcher.get_resource(_json('language', video_id=video_id, language=language_code))

    def create_video_language(self, video_id: str, language_code: str) -> FetchResult:
        """Enable a language on a video"""
        if not is_valid_video_id(video_id):
            return None
        return self.fetcher.create_resource(_json('languages', video_id=video_id),
                                            body={'language_code': language_code})

    @staticmethod
    def get_last_version(language_info: Any) -> Optional[int]:
        """
        Get the last version number for a language

        Versions are listed newest first, so versions[0] is the latest one.
        Versions can be deleted, so version_no is not an index into the list.

        Raises:
            InvalidArgumentError: If language_info is not a decoded language object
        """
        if not isinstance(language_info, dict):
            raise InvalidArgumentError(
                f"Language info must be a dict, {type(language_info).__name__} given."
            )
        versions = language_info.get('versions') or []
        if versions and isinstance(versions[0], dict):
            return versions[0].get('version_no')
        return None

    # Videos

    def get_videos(self, team: Optional[str] = None, project: Optional[str] = None,
                   order_by: Optional[str] = None, limit: Optional[int] = None,
                   offset: Optional[int] = None,
                   page_filter: Optional[PageFilter] = None) -> FetchResult:
        """
        Get information about all videos in a team/project

        This can take a long time on teams with many videos. Pass a
        page_filter that sets page['meta']['next'] to None to stop early, for
        example once a creation date has been reached.
        """
        self._check_filter(page_filter)
        query = self._page_query(limit, offset, team=team, project=project, order_by=order_by)
        return self.fetcher.get_resource(_json('videos'), query, page_filter=page_filter)

    def get_video_info(self, video_id: Optional[str] = None,
                       video_url: Optional[str] = None) -> FetchResult:
        """
        Retrieve metadata about a video, by video id or by one of its URLs

        Raises:
            InvalidArgumentError: If neither video_id nor video_url is given
        """
        if video_id is not None:
            if not is_valid_video_id(video_id):
                return None
            return self.fetcher.get_resource(_json('video', video_id=video_id))
        if video_url is not None:
            return self.fetcher.get_resource(_json('videos'), {'video_url': video_url})
        raise InvalidArgumentError("Either video_id or video_url is required")

    def create_video(self, team: str, video_url: str, title: Optional[str] = None,
                     description: Optional[str] = None, duration: Optional[int] = None,
                     primary_audio_language_code: Optional[str] = None,
                     metadata: Optional[Dict[str, Any]] = None,
                     project: Optional[str] = None) -> FetchResult:
        """
        Add a new video with a given URL

        A team is required so videos are not posted publicly by accident.
        """
        data = {'team': team, 'video_url': video_url}
        data.update(_only_set(
            title=title,
            description=description,
            duration=duration,
            primary_audio_language_code=primary_audio_language_code,
            metadata=metadata,
            project=project
        ))
        return self.fetcher.create_resource(_json('videos'), body=data)

    def update_video(self, video_id: str, team: Optional[str] = None,
                     project: Optional[str] = None, video_url: Optional[str] = None,
                     title: Optional[str] = None, description: Optional[str] = None,
                     duration: Optional[int] = None,
                     primary_audio_language_code: Optional[str] = None,
                     metadata: Optional[Dict[str, Any]] = None) -> FetchResult:
        """
        Update an existing video; moving it to a project also needs its team

        Raises:
            InvalidArgumentError: If project is given without team
        """
        if not is_valid_video_id(video_id):
            return None
        if project is not None and team is None:
            raise InvalidArgumentError("Can't specify project without specifying team")
        data = _only_set(
            team=team,
            project=project,
            video_url=video_url,
            title=title,
            description=description,
            duration=duration,
            primary_audio_language_code=primary_audio_language_code,
            metadata=metadata
        )
        return self.fetcher.set_resource(_json('video', video_id=video_id), body=data)

    def move_video(self, video_id: str, team: str, project: Optional[str] = None) -> FetchResult:
        """Move a video into a different team/project (shorthand for update_video)"""
        return self.update_video(video_id, team=team, project=project)

    def rename_video(self, video_id: str, title: Optional[str] = None,
                     description: Optional[str] = None) -> FetchResult:
        """Change the video's main title and/or description (shorthand for update_video)"""
        return self.update_video(video_id, title=title, description=description)

    def delete_video(self, video_id: str) -> FetchResult:
        if not is_valid_video_id(video_id):
            return None
        return self.fetcher.delete_resource(_json('video', video_id=video_id))

    # Video URLs

    def get_video_urls(self, video_id: str, limit: Optional[int] = None,
                       offset: Optional[int] = None) -> FetchResult:
        return self.fetcher.get_resource(_json('video_urls', video_id=video_id),
                                         self._page_query(limit, offset))

    def get_video_url(self, video_id: str, url_id: str) -> FetchResult:
        """Details about one video URL; url_id comes from get_video_urls' resource_uri"""
        return self.fetcher.get_resource(_json('video_url', video_id=video_id, url_id=url_id))

    def add_video_url(self, video_id: str, url: str, primary: bool = False,
                      original: bool = False) -> FetchResult:
        data = {'url': url, 'primary': primary, 'original': original}
        return self.fetcher.create_resource(_json('video_urls', video_id=video_id), body=data)

    def set_video_url(self, video_id: str, url_id: str, primary: bool) -> FetchResult:
        """Modify the primary flag for a given video URL"""
        return self.fetcher.set_resource(_json('video_url', video_id=video_id, url_id=url_id),
                                         body={'primary': primary})

    def delete_video_url(self, video_id: str, url_id: str) -> FetchResult:
        return self.fetcher.delete_resource(_json('video_url', video_id=video_id, url_id=url_id))

    # Projects

    def get_projects(self, team: str, limit: Optional[int] = None,
                     offset: Optional[int] = None) -> FetchResult:
        return self.fetcher.get_resource(_json('projects', team=team), self._page_query(limit, offset))

    def get_project(self, team: str, project: str) -> FetchResult:
        return self.fetcher.get_resource(_json('project', team=team, project=project))

    def create_project(self, team: str, name: str, slug: str,
                       description: Optional[str] = None,
                       guidelines: Optional[str] = None) -> FetchResult:
        data = {'name': name, 'slug': slug, 'description': description, 'guidelines': guidelines}
        return self.fetcher.create_resource(_json('projects', team=team), body=data)

    # Activity

    def get_team_activities(self, team: str, video_id: Optional[str] = None,
                            type: Optional[str] = None, language: Optional[str] = None,
                            before: Optional[str] = None, after: Optional[str] = None,
                            limit: Optional[int] = None, offset: Optional[int] = None,
                            page_filter: Optional[PageFilter] = None) -> FetchResult:
        """Activity records for a team, optionally narrowed by video, type, language and date bounds"""
        self._check_filter(page_filter)
        query = self._page_query(limit, offset, video=video_id, type=type, language=language,
                                 before=before, after=after)
        return self.fetcher.get_resource(_json('team_activities', team=team), query,
                                         page_filter=page_filter)

    def get_video_activities(self, video_id: str, type: Optional[str] = None,
                             language: Optional[str] = None, before: Optional[str] = None,
                             after: Optional[str] = None, limit: Optional[int] = None,
                             offset: Optional[int] = None,
                             page_filter: Optional[PageFilter] = None) -> FetchResult:
        self._check_filter(page_filter)
        query = self._page_query(limit, offset, type=type, language=language,
                                 before=before, after=after)
        return self.fetcher.get_resource(_json('video_activities', video_id=video_id), query,
                                         page_filter=page_filter)

    def get_activities(self, team: Optional[str] = None, video_id: Optional[str] = None,
                       **filters: Any) -> FetchResult:
        """Team activity when a team is given, otherwise the video's activity"""
        if team is not None:
            return self.get_team_activities(team, video_id=video_id, **filters)
        if video_id is None:
            raise InvalidArgumentError("Either team or video_id is required")
        return self.get_video_activities(video_id, **filters)

    def get_activity(self, activity_id: str) -> FetchResult:
        return self.fetcher.get_resource(_json('activity', activity_id=activity_id))

    # Tasks

    def get_tasks(self, team: str, video_id: Optional[str] = None, type: Optional[str] = None,
                  assignee: Optional[str] = None, priority: Optional[int] = None,
                  order_by: Optional[str] = None, completed: Optional[bool] = None,
                  completed_before: Optional[int] = None, open: Optional[bool] = None,
                  limit: Optional[int] = None, offset: Optional[int] = None) -> FetchResult:
        query = self._page_query(limit, offset, video_id=video_id, type=type, assignee=assignee,
                                 priority=priority, order_by=order_by, completed=completed,
                                 completed_before=completed_before, open=open)
        return self.fetcher.get_resource(_json('tasks', team=team), query)

    def get_task_info(self, team: str, task_id: str) -> FetchResult:
        return self.fetcher.get_resource(_json('task', team=team, task_id=task_id))

    def create_task(self, team: str, video_id: str, language_code: str, type: str,
                    assignee: Optional[str] = None, priority: Optional[int] = None,
                    completed: Optional[bool] = None, approved: Optional[bool] = None,
                    version_no: Optional[int] = None,
                    language_info: Optional[Dict[str, Any]] = None) -> FetchResult:
        """
        Create a new task

        Review and Approve tasks apply to a subtitle version; when version_no
        is not given the latest version is looked up, reusing language_info
        if the caller already fetched it.

        Raises:
            InvalidArgumentError: If type is not Subtitle, Translate, Review or Approve
        """
        if not is_valid_video_id(video_id):
            return None
        if not is_valid_task_name(type):
            raise InvalidArgumentError(f"Invalid task type: {type!r}")
        if version_no is None and type in ('Review', 'Approve'):
            if not _is_language(language_info):
                language_info = self.get_video_language(video_id, language_code)
            if _is_language(language_info):
                version_no = self.get_last_version(language_info)
        query = {
            'video_id': video_id,
            'language': language_code,
            'type': type,
            'assignee': assignee,
            'priority': priority,
            'completed': completed,
            'approved': approved,
            'version_no': version_no,
        }
        return self.fetcher.create_resource(_json('tasks', team=team), query)

    def update_task(self, team: str, task_id: str, send_back: Optional[bool] = None,
                    assignee: Optional[str] = None, priority: Optional[int] = None,
                    complete: Optional[bool] = None,
                    version_number: Optional[int] = None) -> FetchResult:
        data = _only_set(send_back=send_back, assignee=assignee, priority=priority,
                         complete=complete, version_number=version_number)
        return self.fetcher.set_resource(_json('task', team=team, task_id=task_id), body=data)

    def delete_task(self, team: str, task_id: str) -> FetchResult:
        return self.fetcher.delete_resource(_json('task', team=team, task_id=task_id))

    # Collaboration requests

    def get_requests(self, team: str, work_status: Optional[str] = None,
                     state: Optional[str] = None, status: Optional[str] = None,
                     video_id: Optional[str] = None, language_code: Optional[str] = None,
                     video_language: Optional[str] = None, project: Optional[str] = None,
                     assignee: Optional[str] = None, type: Optional[str] = None,
                     sort: Optional[str] = None, limit: Optional[int] = None,
                     offset: Optional[int] = None,
                     page_filter: Optional[PageFilter] = None) -> FetchResult:
        """
        List collaboration requests

        The language filter refers to the collaboration language, not the
        video's primary language. Set type='outgoing' to include requests with
        work on a different team. `state` is the older name of work_status.
        """
        self._check_filter(page_filter)
        if state is not None:
            work_status = state
        query = self._page_query(limit, offset, work_status=work_status, status=status,
                                 video=video_id, language=language_code,
                                 video_language=video_language, project=project,
                                 assignee=assignee, type=type, sort=sort)
        return self.fetcher.get_resource(_json('subtitle_requests', team=team), query,
                                         page_filter=page_filter)

    def get_request_info(self, team: str, job_id: str) -> FetchResult:
        return self.fetcher.get_resource(_json('subtitle_request', team=team, job_id=job_id))

    def create_request(self, team: str, video_id: str, language_code: str,
                       work_team: Optional[str] = None,
                       evaluation_teams: Optional[List[str]] = None) -> FetchResult:
        data = {'video': video_id, 'language': language_code}
        data.update(_only_set(team=work_team, evaluation_teams=evaluation_teams))
        return self.fetcher.create_resource(_json('subtitle_requests', team=team), body=data)

    def update_request(self, team: str, job_id: str, subtitler: Optional[str] = None,
                       reviewer: Optional[str] = None, approver: Optional[str] = None,
                       work_status: Optional[str] = None, state: Optional[str] = None,
                       work_team: Optional[str] = None,
                       evaluation_teams: Optional[List[str]] = None) -> FetchResult:
        """
        Update a collaboration request

        Only the fields given are sent; the API unassigns a role whose key is
        present with a null value.
        """
        if state is not None:
            work_status = state
        data = _only_set(subtitler=subtitler, reviewer=reviewer, approver=approver,
                         work_status=work_status, team=work_team,
                         evaluation_teams=evaluation_teams)
        return self.fetcher.set_resource(_json('subtitle_request', team=team, job_id=job_id), body=data)

    def delete_request(self, team: str, job_id: str) -> FetchResult:
        return self.fetcher.delete_resource(_json('subtitle_request', team=team, job_id=job_id))

    def create_pro_request(self, team: str, video_id: str, language_code: str,
                           quality: str, turnaround: str) -> FetchResult:
        """
        Post a professional service request (enterprise teams only)

        The API replies "Professional Service Request Invalid" for languages
        not offered by the service.
        """
        if not is_valid_video_id(video_id):
            return None
        data = {
            'video_id': video_id,
            'language_code': language_code,
            'quality_tier': quality,
            'turnaround_time': turnaround,
        }
        return self.fetcher.create_resource(_json('pro_requests', team=team), body=data)

    # Subtitles

    def get_subtitle(self, video_id: str, language_code: str, format: Optional[str] = None,
                     version_number: Optional[int] = None) -> FetchResult:
        """
        Fetch a subtitle track

        Without a format the API returns its internal JSON subtitle object;
        with one (srt, vtt, dfxp...) the raw file text is returned. A version
        number is needed to retrieve unpublished subtitles.
        """
        if not is_valid_video_id(video_id):
            return None
        descriptor = ResourceDescriptor('subtitles', {'video_id': video_id, 'language': language_code},
                                        content_type=None)
        return self.fetcher.get_resource(descriptor, {'format': format, 'version_number': version_number})

    def upload_subtitle(self, video_id: str, language_code: str, subtitles: str,
                        sub_format: Optional[str] = None, complete: Optional[bool] = None,
                        title: Optional[str] = None, description: Optional[str] = None,
                        action: Optional[str] = None,
                        language_info: Optional[Dict[str, Any]] = None) -> FetchResult:
        """
        Upload a subtitle track, enabling the language first if needed

        The API defaults sub_format to SRT. Fetch first if the current
        completion status should be preserved.
        """
        if not is_valid_video_id(video_id):
            return None
        if not _is_language(language_info):
            language_info = self.get_video_language(video_id, language_code)
        if not _is_language(language_info):
            self.create_video_language(video_id, language_code)
            self.logger.info(f"Enabled language {language_code} on video {video_id}")
        data = {
            'subtitles': subtitles,
            'sub_format': sub_format,
            'is_complete': complete,
        }
        data.update(_only_set(title=title, description=description, action=action))
        return self.fetcher.create_resource(
            _json('subtitles', video_id=video_id, language=language_code), body=data
        )

    def get_notes(self, video_id: str, language_code: str, limit: Optional[int] = None,
                  offset: Optional[int] = None) -> FetchResult:
        return self.fetcher.get_resource(_json('notes', video_id=video_id, language=language_code),
                                         self._page_query(limit, offset))

    def create_note(self, video_id: str, language_code: str, body: str) -> FetchResult:
        """Add a subtitles note to the given video and language"""
        return self.fetcher.create_resource(_json('notes', video_id=video_id, language=language_code),
                                            body={'body': body})

    # Team members

    def get_members(self, team: str, limit: Optional[int] = None,
                    offset: Optional[int] = None) -> FetchResult:
        return self.fetcher.get_resource(_json('members', team=team), self._page_query(limit, offset))

    def add_partner_member(self, team: str, user: str, role: str) -> FetchResult:
        """
        Move a user directly between partner teams without an invitation

        Only works when both teams are configured as partner teams.
        """
        return self.fetcher.create_resource(_json('members', team=team), body={'user': user, 'role': role})

    def add_member(self, team: str, user: str, role: str) -> FetchResult:
        """Invite a user to a team; the user can refuse"""
        return self.fetcher.create_resource(_json('safe_members', team=team),
                                            body={'user': user, 'role': role})

    def update_member(self, team: str, user: str, role: str) -> FetchResult:
        return self.fetcher.set_resource(_json('member', team=team, user=user), body={'role': role})

    def delete_member(self, team: str, user: str) -> FetchResult:
        return self.fetcher.delete_resource(_json('member', team=team, user=user))

    # Users

    def get_user(self, user: str) -> FetchResult:
        return self.fetcher.get_resource(_json('user', user=user))

    def get_users(self, users: List[str]) -> Optional[List[Dict[str, Any]]]:
        """User records for the given usernames, skipping those that can't be fetched"""
        if not users:
            return None
        result = []
        for user in users:
            record = self.get_user(user)
            if _is_user(record):
                result.append(record)
            else:
                self.logger.notice(f"Could not fetch user {user}")
        return result

    def get_user_activities(self, user: str, type: Optional[str] = None,
                            limit: Optional[int] = None,
                            offset: Optional[int] = None) -> FetchResult:
        return self.fetcher.get_resource(_json('user_activities', user=user),
                                         self._page_query(limit, offset, type=type))

    def create_user(self, username: str, email: str) -> FetchResult:
        data = {'username': username, 'email': email, 'create_login_token': True}
        return self.fetcher.create_resource(_json('users'), body=data)

    def is_valid_user(self, user: str) -> bool:
        return _is_user(self.get_user(user))

    # Team applications

    def get_applications(self, team: str, status: Optional[str] = None,
                         before: Optional[int] = None, after: Optional[int] = None,
                         user: Optional[str] = None, limit: Optional[int] = None,
                         offset: Optional[int] = None) -> FetchResult:
        query = self._page_query(limit, offset, status=status, before=before, after=after, user=user)
        return self.fetcher.get_resource(_json('applications', team=team), query)
