"""
Error taxonomy for the upload service.
Every failure surfaced to a client is exactly one of these categories.
"""


class StaticsError(Exception):
    """Base class for errors mapped to an HTTP response"""
    status_code = 500
    code = "unknown"

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)

    @property
    def default_message(self) -> str:
        return self.code.replace("_", " ").capitalize()


class NotFoundError(StaticsError):
    status_code = 404
    code = "not_found"


class ImageError(StaticsError):
    """Unsupported or undecodable image, including zero dimensions"""
    status_code = 422
    code = "image"


class ParseError(StaticsError):
    """Multipart structural failure: boundary, field or content-type missing"""
    status_code = 422
    code = "parse"


class UnauthorizedError(StaticsError):
    """Missing, invalid or expired bearer token"""
    status_code = 400
    code = "unauthorized"


class NetworkError(StaticsError):
    """Storage backend I/O failure"""
    status_code = 500
    code = "network"
