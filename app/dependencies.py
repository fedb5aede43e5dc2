"""
Request Dependencies

Components live on app.state for the lifetime of the process; handlers
get them, and the caller's user id, through FastAPI's Depends.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from src.auth import extract_bearer_token
from src.orchestrator import LedgerComponents


def get_components(request: Request) -> LedgerComponents:
    return request.app.state.components


async def get_current_user_id(
    authorization: Optional[str] = Header(default=None),
    components: LedgerComponents = Depends(get_components),
) -> str:
    """
    Resolve the bearer token to a user id.

    Raises:
        AuthError: If the header is missing, malformed, or the token unknown
    """
    token = extract_bearer_token(authorization)
    return await components.token_resolver.resolve_token(token)
