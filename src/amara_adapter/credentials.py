"""
Credentials module holding the account used to sign Amara API requests
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from amara_adapter.errors import InvalidAPISettingsError
from amara_adapter.validators import validate_api_key, validate_api_version


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    """Immutable account settings; build with Credentials.create()"""
    host: str
    user: str
    api_key: str = field(repr=False)
    api_version: str = ''
    cookies: List[str] = field(default_factory=list)

    @classmethod
    def create(cls, host: str, user: str, api_key: str, api_version: str = '',
               cookies: Optional[List[str]] = None) -> 'Credentials':
        """
        Validate and build a credential set

        Raises:
            InvalidAPIKeyError: If the key is not 40 lowercase hex characters
            InvalidAPISettingsError: If the API version tag is malformed
        """
        validate_api_key(api_key)
        if api_version:
            validate_api_version(api_version)
        if not host.endswith('/'):
            host += '/'
        return cls(host=host, user=user, api_key=api_key,
                   api_version=api_version, cookies=list(cookies or []))

    def change_account(self, host: str, user: str, api_key: str,
                       api_version: str = '') -> 'Credentials':
        """
        Return credentials for a different account, guarding against key reuse

        Reusing the same key is only accepted for a complete account switch
        (new host and new user). A new key must come with a new user.

        Raises:
            InvalidAPIKeyError: If the new key is malformed
            InvalidAPISettingsError: If the combination reuses credentials
        """
        updated = Credentials.create(host, user, api_key,
                                     api_version or self.api_version, self.cookies)
        check_account_change(self, updated)
        logger.info(f"Switched Amara account to {updated.user} at {updated.host}")
        return updated


def check_account_change(current: Optional[Credentials], proposed: Credentials) -> None:
    """
    Reject account changes that would reuse an API key across unrelated accounts

    Raises:
        InvalidAPISettingsError: On a disallowed combination
    """
    if current is None:
        return

    same_key = current.api_key == proposed.api_key
    same_host = current.host == proposed.host
    same_user = current.user == proposed.user

    if same_key and same_user and not same_host:
        raise InvalidAPISettingsError(
            "API key should be different when changing hosts for the same user"
        )
    if same_key and same_host and not same_user:
        raise InvalidAPISettingsError(
            "API key should be different when changing usernames on the same host"
        )
    if not same_key and same_user:
        raise InvalidAPISettingsError(
            "API key can only change together with the username"
        )
