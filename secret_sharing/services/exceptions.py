"""Error taxonomy raised by the secret sharing services.

Each error carries the HTTP status the transport layer should answer with,
so routers never have to re-classify service failures.
"""


class SecretSharingError(Exception):
    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(SecretSharingError, ValueError):
    status_code = 400
    default_message = "Bad request"


class InvalidExpiryError(BadRequestError):
    default_message = "Expiration date cannot be in the past"


class ExpiryTooFarError(BadRequestError):
    default_message = "Expiration date cannot be more than 30 days"


class PayloadTooLargeError(BadRequestError):
    default_message = "Shared secret value too long"


class UnauthorizedError(SecretSharingError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(SecretSharingError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(SecretSharingError):
    status_code = 404
    default_message = "Shared secret not found"


class InternalServerError(SecretSharingError):
    status_code = 500
