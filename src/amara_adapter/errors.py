"""
Exception hierarchy for the Amara API adapter
"""


class AmaraAPIError(Exception):
    """Base class for every error raised by the adapter"""
    pass


class ConfigurationError(AmaraAPIError):
    """Raised when configuration is invalid or incomplete"""
    pass


class EnvironmentVariableError(ConfigurationError):
    """Raised when required environment variables are missing"""
    pass


class InvalidAPIKeyError(ConfigurationError):
    """Raised when the API key is not a 40 character lowercase hex string"""
    pass


class InvalidAPISettingsError(ConfigurationError):
    """Raised on a malformed API version or a disallowed account change"""
    pass


class InvalidLoggerError(ConfigurationError):
    """Raised when a supplied logger lacks the leveled logging methods"""
    pass


class InvalidArgumentError(AmaraAPIError, ValueError):
    """Raised when a caller passes an argument of the wrong shape"""
    pass


class MissingParameterError(InvalidArgumentError):
    """Raised when a resource URL needs a path parameter that was not given"""
    pass


class InvalidCallbackError(InvalidArgumentError):
    """Raised when a page filter is not callable"""
    pass


class UnsupportedMethodError(InvalidArgumentError):
    """Raised for HTTP methods other than GET, POST, PUT and DELETE"""
    pass


class UnknownResourceError(AmaraAPIError, LookupError):
    """Raised when a resource identifier has no entry in the routing table"""
    pass


class MalformedPageError(AmaraAPIError):
    """Raised when a paginated response carries a non-list 'objects' field"""
    pass


class RetriesExhaustedError(AmaraAPIError):
    """Raised when a request still fails after all retries (opt-in)"""
    pass
