"""
Validation helpers for Amara identifiers and credentials
"""

import re
from typing import Any

from amara_adapter.errors import InvalidAPIKeyError, InvalidAPISettingsError


API_KEY_LENGTH = 40
VIDEO_ID_LENGTH = 12

_API_KEY_PATTERN = re.compile(r'[0-9a-f]*')
_API_VERSION_PATTERN = re.compile(r'[A-Za-z0-9_-]+')
_VIDEO_ID_PATTERN = re.compile(r'[A-Za-z0-9]*')

VALID_ROLES = frozenset({'admin', 'manager', 'owner', 'contributor'})
VALID_TASK_TYPES = frozenset({'Subtitle', 'Translate', 'Review', 'Approve'})

LANGUAGE_CODES = frozenset({
    'aa', 'ab', 'ae', 'af', 'aka', 'amh', 'an', 'arc', 'ar', 'arq', 'ase', 'as', 'ast', 'av',
    'ay', 'az', 'bam', 'ba', 'be', 'ber', 'bg', 'bh', 'bi', 'bn', 'bnt', 'bo', 'br', 'bs',
    'bug', 'cak', 'ca', 'ceb', 'ce', 'ch', 'cho', 'cku', 'co', 'cr', 'cs', 'ctd', 'ctu', 'cu',
    'cv', 'cy', 'da', 'de', 'dv', 'dz', 'ee', 'efi', 'el', 'en-gb', 'en', 'eo', 'es-ar',
    'es-mx', 'es', 'es-ni', 'et', 'eu', 'fa', 'ff', 'fil', 'fi', 'fj', 'fo', 'fr-ca', 'fr',
    'fy', 'fy-nl', 'ga', 'gd', 'gl', 'gn', 'gu', 'gv', 'hai', 'hau', 'haw', 'haz', 'hus',
    'hb', 'hch', 'he', 'hi', 'ho', 'hr', 'ht', 'hu', 'hup', 'hy', 'hz', 'ia', 'ibo', 'id',
    'ie', 'ig', 'ii', 'ik', 'ilo', 'inh', 'io', 'iro', 'is', 'it', 'iu', 'ja', 'jv', 'ka',
    'kar', 'kau', 'kg', 'kik', 'ki', 'kin', 'kj', 'kk', 'kl', 'km', 'kn', 'ko', 'kon', 'kr',
    'ksh', 'ks', 'ku', 'kv', 'kw', 'ky', 'la', 'lb', 'lg', 'li', 'lin', 'lkt', 'lld', 'ln',
    'lo', 'lt', 'ltg', 'lu', 'lua', 'luo', 'luy', 'lv', 'mad', 'meta-audio', 'meta-geo',
    'meta-tw', 'meta-wiki', 'mg', 'mh', 'mi', 'mk', 'ml', 'mlg', 'mo', 'moh', 'mn', 'mni',
    'mnk', 'mos', 'mr', 'ms', 'mt', 'mus', 'my', 'na', 'nan', 'nb', 'nci', 'nd', 'ne', 'ng',
    'nl', 'nn', 'no', 'nr', 'nso', 'nv', 'ny', 'oc', 'oji', 'om', 'or', 'orm', 'os', 'pa',
    'pam', 'pan', 'pap', 'pi', 'pl', 'pnb', 'prs', 'ps', 'pt-br', 'pt', 'que', 'qvi', 'raj',
    'rm', 'rn', 'ro', 'ru', 'run', 'rup', 'ry', 'rw', 'sa', 'sc', 'sco', 'sd', 'se', 'sg',
    'sgn', 'sh', 'si', 'sk', 'skx', 'sl', 'sm', 'sna', 'sot', 'sq', 'sr-latn', 'sr', 'srp',
    'ss', 'st', 'su', 'sv', 'swa', 'szl', 'ta', 'tar', 'te', 'tet', 'tg', 'th', 'tir', 'tk',
    'tl', 'tlh', 'tn', 'to', 'toj', 'tr', 'ts', 'tsn', 'tsz', 'tt', 'tw', 'ty', 'tzh', 'tzo',
    'ug', 'uk', 'umb', 'ur', 'uz', 've', 'vi', 'vls', 'vo', 'wa', 'wbl', 'wol', 'xho', 'yaq',
    'yi', 'yor', 'yua', 'za', 'zam', 'zh-cn', 'zh-hk', 'zh', 'zh-sg', 'zh-tw', 'zul',
})


def validate_api_key(api_key: Any) -> bool:
    """
    Validate the API key format without touching the network

    Args:
        api_key: Candidate API key

    Returns:
        True if the key is 40 lowercase hexadecimal characters

    Raises:
        InvalidAPIKeyError: If the key has the wrong type, length or characters
    """
    if not isinstance(api_key, str):
        raise InvalidAPIKeyError(f"The API key must be a string, got {type(api_key).__name__}")
    if len(api_key) != API_KEY_LENGTH:
        raise InvalidAPIKeyError(f"The API key is not {API_KEY_LENGTH} characters long")
    if not _API_KEY_PATTERN.fullmatch(api_key):
        raise InvalidAPIKeyError("The API key should contain lowercase hexadecimal characters only")
    return True


def validate_api_version(api_version: str) -> bool:
    """
    Validate an API version tag sent in the X-API-FUTURE header

    Raises:
        InvalidAPISettingsError: If the tag has characters outside [A-Za-z0-9_-]
    """
    if not _API_VERSION_PATTERN.fullmatch(api_version):
        raise InvalidAPISettingsError(
            f"The API version string has unexpected characters: {api_version!r}"
        )
    return True


def is_valid_video_id(video_id: Any) -> bool:
    """Check if a value looks like an Amara video id (12 alphanumerics)"""
    if not isinstance(video_id, str) or len(video_id) != VIDEO_ID_LENGTH:
        return False
    return bool(_VIDEO_ID_PATTERN.fullmatch(video_id))


def is_valid_role(role: Any) -> bool:
    return isinstance(role, str) and role in VALID_ROLES


def is_valid_task_name(task_name: Any) -> bool:
    return isinstance(task_name, str) and task_name in VALID_TASK_TYPES


def is_valid_language_code(language_code: Any) -> bool:
    return isinstance(language_code, str) and language_code in LANGUAGE_CODES
