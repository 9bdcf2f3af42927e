"""Shared-token auth for the user-facing API."""

from __future__ import annotations

import hmac
import logging
from typing import TYPE_CHECKING

from fastapi import Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from nutrition_insights.containers import AppContainer

TOKEN_SCHEME = "X-Api-Token"

_logger = logging.getLogger(__name__)


def _configured_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_token(
    request: Request,
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_configured_token),
) -> None:
    """Reject requests whose token is missing or does not match.

    An empty configured token locks the API instead of opening it.
    """
    if api_token and x_api_token and hmac.compare_digest(
        x_api_token.encode(), api_token.encode()
    ):
        return
    _logger.warning(
        "Rejected API request: path=%s token_present=%s",
        request.url.path,
        x_api_token is not None,
    )
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        headers={"WWW-Authenticate": TOKEN_SCHEME},
    )
