"""Mattermost REST API v4 client for the calls the bridge needs."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from src.bridge.errors import DestinationError
from src.models import LocalIdentity, TranslatedMessage

logger = logging.getLogger(__name__)

PUBLIC_CHANNEL = "O"

# Raised while reading a decoded body that lacks the documented fields
_SHAPE_ERRORS = (KeyError, TypeError, AttributeError, ValidationError)


class MattermostClient:
    """Bearer-token client over ``httpx.AsyncClient``.

    Every non-2xx response, every transport error and every 2xx body that
    cannot be read surfaces as ``DestinationError``; callers decide whether
    to degrade or drop.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = http_client or httpx.AsyncClient(verify=True)
        self._base_url = f"{base_url.rstrip('/')}/api/v4"
        self._headers = {"Authorization": f"Bearer {token}"}
        self._timeout = timeout

    async def get_users_by_usernames(self, usernames: list[str]) -> list[LocalIdentity]:
        operation = "get_users_by_usernames"
        resp = await self._request(operation, "POST", "/users/usernames", json=usernames)
        data = _decode(resp, operation)
        try:
            return [
                LocalIdentity(id=user["id"], name=user.get("username", ""))
                for user in data
            ]
        except _SHAPE_ERRORS as exc:
            raise _malformed(operation, resp, exc) from exc

    async def get_channel_by_name(self, team_id: str, name: str) -> LocalIdentity | None:
        """Return the team's channel named ``name``, or None if it does not exist."""
        operation = "get_channel_by_name"
        path = f"/teams/{quote(team_id, safe='')}/channels/name/{quote(name, safe='')}"
        resp = await self._request(operation, "GET", path, allow_not_found=True)
        if resp.status_code == 404:
            return None
        return _channel_identity(resp, operation)

    async def create_channel(
        self,
        team_id: str,
        name: str,
        display_name: str,
        channel_type: str = PUBLIC_CHANNEL,
    ) -> LocalIdentity:
        body = {
            "team_id": team_id,
            "name": name,
            "display_name": display_name,
            "type": channel_type,
        }
        resp = await self._request("create_channel", "POST", "/channels", json=body)
        return _channel_identity(resp, "create_channel")

    async def create_post(self, message: TranslatedMessage) -> str:
        operation = "create_post"
        resp = await self._request(operation, "POST", "/posts", json=message.to_post_payload())
        data = _decode(resp, operation)
        if not isinstance(data, dict):
            raise _malformed(operation, resp, TypeError("expected a post object"))
        post_id: str = data.get("id", "")
        return post_id

    async def get_posts_since(self, channel_id: str, since_millis: int) -> list[str]:
        """Return post ids created at or after ``since_millis``, in the server's order."""
        operation = "get_posts_since"
        path = f"/channels/{quote(channel_id, safe='')}/posts"
        resp = await self._request(operation, "GET", path, params={"since": since_millis})
        data = _decode(resp, operation)
        if not isinstance(data, dict):
            raise _malformed(operation, resp, TypeError("expected a post list object"))
        order = data.get("order") or []
        if not isinstance(order, list) or not all(isinstance(p, str) for p in order):
            raise _malformed(operation, resp, TypeError("expected a list of post ids"))
        return order

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        allow_not_found: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            resp = await self._client.request(
                method,
                f"{self._base_url}{path}",
                headers=self._headers,
                timeout=self._timeout,
                **kwargs,
            )
        except httpx.HTTPError as exc:
            raise DestinationError(operation, None, str(exc) or type(exc).__name__) from exc

        logger.debug("Mattermost %s %s -> %s", method, path, resp.status_code)
        if resp.status_code == 404 and allow_not_found:
            return resp
        if resp.status_code >= 400:
            raise DestinationError(operation, resp.status_code, _error_detail(resp))
        return resp


def _decode(resp: httpx.Response, operation: str) -> Any:
    try:
        return resp.json()
    except ValueError as exc:
        raise _malformed(operation, resp, exc) from exc


def _malformed(operation: str, resp: httpx.Response, exc: Exception) -> DestinationError:
    """A 2xx response whose body is not the shape Mattermost documents."""
    return DestinationError(
        operation, resp.status_code, f"malformed response ({type(exc).__name__}: {exc})",
    )


def _channel_identity(resp: httpx.Response, operation: str) -> LocalIdentity:
    data = _decode(resp, operation)
    try:
        return LocalIdentity(id=data["id"], name=data.get("name", ""))
    except _SHAPE_ERRORS as exc:
        raise _malformed(operation, resp, exc) from exc


def _error_detail(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    message = data.get("message") if isinstance(data, dict) else None
    return message or resp.text[:200]
