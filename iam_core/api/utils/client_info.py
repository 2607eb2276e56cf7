from typing import Iterable, Optional

from fastapi import Request

from config import ApplicationConfig
from iam_core.app.use_cases.auth.dtos import ClientContext


def _forwarded_chain(request: Request) -> list[str]:
    forwarded = request.headers.get("x-forwarded-for", "")
    return [hop.strip() for hop in forwarded.split(",") if hop.strip()]


def client_ip(request: Request) -> Optional[str]:
    """First hop of X-Forwarded-For, else the socket peer. Audit metadata only."""
    chain = _forwarded_chain(request)
    if chain:
        return chain[0]
    return request.client.host if request.client else None


def rate_limit_ip(
    request: Request, trusted_proxies: Optional[Iterable[str]] = None
) -> Optional[str]:
    """
    Caller address used for rate-limit keys and the allowlist.

    X-Forwarded-For is honoured only when the socket peer is a trusted proxy;
    the chain is walked right to left and the first untrusted hop wins.
    """
    if trusted_proxies is None:
        trusted_proxies = ApplicationConfig.RATE_LIMIT_TRUSTED_PROXIES
    if isinstance(trusted_proxies, str):
        trusted_proxies = trusted_proxies.split(",")
    trusted = {p.strip() for p in trusted_proxies if p and p.strip()}

    peer = request.client.host if request.client else None
    if peer is None or peer not in trusted:
        return peer

    for hop in reversed(_forwarded_chain(request)):
        if hop not in trusted:
            return hop
    return peer


async def get_client_context(request: Request) -> ClientContext:
    return ClientContext(
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
