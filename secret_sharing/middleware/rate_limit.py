from slowapi import Limiter
from starlette.requests import Request

from secret_sharing.config import settings


def get_client_key(request: Request) -> str:
    """Rate-limit key: the original client address.

    Behind the reverse proxy the client's address is the first entry of
    X-Forwarded-For; that header is only honoured when trust_forwarded_for is
    set, since a directly exposed service would let callers pick their own key.
    """
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


limiter = Limiter(key_func=get_client_key)
