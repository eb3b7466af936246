"""
Async wrappers over the REST API, one method per operation.

Every call returns a ServiceResult: either ``data`` or an ``error`` string that
is meant to be shown to the user as-is (the API's ``detail`` field).
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar
from urllib.parse import urlencode

import httpx
import websockets

from agriportal.core.config import settings
from agriportal.portal.realtime_channel import WebSocketSubscription, websocket_url

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONNECTION_ERROR = "Không thể kết nối tới máy chủ"
UNEXPECTED_ERROR = "Đã xảy ra lỗi không mong muốn"


@dataclass
class ServiceResult(Generic[T]):
    data: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return UNEXPECTED_ERROR
    detail = body.get("detail") if isinstance(body, dict) else None
    return detail if isinstance(detail, str) and detail else UNEXPECTED_ERROR


class PortalClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
        ws_connect: Callable[[str], Any] = websockets.connect,
    ):
        self.api_url = base_url.rstrip("/") + settings.API_V1_STR
        self._client = httpx.AsyncClient(base_url=self.api_url, transport=transport, timeout=timeout)
        self._ws_connect = ws_connect
        self.token: Optional[str] = None

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "PortalClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _request(self, method: str, path: str, **kwargs: Any) -> ServiceResult[Any]:
        try:
            response = await self._client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            return ServiceResult(error=CONNECTION_ERROR)
        if response.is_error:
            return ServiceResult(error=_error_message(response))
        if response.status_code == 204 or not response.content:
            return ServiceResult(data=True)
        return ServiceResult(data=response.json())

    # Auth

    async def sign_up(self, username: str, password: str, phone_number: str, **extra: Any) -> ServiceResult[dict]:
        payload = {"username": username, "password": password, "phone_number": phone_number, **extra}
        return await self._request("POST", "/auth/register", json=payload)

    async def sign_in(self, username: str, password: str, remember_me: bool = False) -> ServiceResult[dict]:
        result = await self._request(
            "POST", "/auth/login",
            json={"username": username, "password": password, "remember_me": remember_me},
        )
        if result.ok:
            self.token = result.data["access_token"]
        return result

    def sign_out(self) -> None:
        self.token = None

    async def get_profile(self) -> ServiceResult[dict]:
        return await self._request("GET", "/users/me")

    async def update_profile(self, **fields: Any) -> ServiceResult[dict]:
        return await self._request("PUT", "/users/me", json=fields)

    # Projects

    async def list_projects(self, status: str | None = None, limit: int = 20, offset: int = 0) -> ServiceResult[list]:
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if status:
            params["status"] = status
        return await self._request("GET", "/projects", params=params)

    async def get_project(self, project_id: int) -> ServiceResult[dict]:
        return await self._request("GET", f"/projects/{project_id}")

    async def create_project(self, data: dict[str, Any]) -> ServiceResult[dict]:
        return await self._request("POST", "/projects", json=data)

    async def update_project(self, project_id: int, data: dict[str, Any]) -> ServiceResult[dict]:
        return await self._request("PUT", f"/projects/{project_id}", json=data)

    async def upload_project_image(
        self, project_id: int, content: bytes, content_type: str, filename: str = "image"
    ) -> ServiceResult[dict]:
        files = {"file": (filename, content, content_type)}
        return await self._request("POST", f"/projects/{project_id}/image", files=files)

    # Investments and ratings

    async def invest(self, project_id: int, data: dict[str, Any]) -> ServiceResult[dict]:
        return await self._request("POST", f"/projects/{project_id}/investments", json=data)

    async def my_investments(self) -> ServiceResult[list]:
        return await self._request("GET", "/investments/me")

    async def rate_project(self, project_id: int, rating: int, review: str | None = None) -> ServiceResult[dict]:
        return await self._request("POST", f"/projects/{project_id}/ratings", json={"rating": rating, "review": review})

    async def get_my_rating(self, project_id: int) -> ServiceResult[dict | None]:
        return await self._request("GET", f"/projects/{project_id}/ratings/me")

    async def get_leaderboard(self, limit: int = 10) -> ServiceResult[list]:
        return await self._request("GET", "/leaderboard/projects", params={"limit": limit})

    # Notifications

    async def get_notifications(self, limit: int = 50, unread_only: bool = False) -> ServiceResult[list]:
        return await self._request("GET", "/notifications", params={"limit": limit, "unread_only": unread_only})

    async def get_unread_count(self) -> ServiceResult[dict]:
        return await self._request("GET", "/notifications/unread-count")

    async def mark_notification_read(self, notification_id: int) -> ServiceResult[dict]:
        return await self._request("PATCH", f"/notifications/{notification_id}/read")

    async def mark_all_notifications_read(self) -> ServiceResult[dict]:
        return await self._request("POST", "/notifications/read-all")

    async def delete_notification(self, notification_id: int) -> ServiceResult[bool]:
        return await self._request("DELETE", f"/notifications/{notification_id}")

    def subscribe_notifications(self, user_id: int | None = None) -> WebSocketSubscription:
        """Realtime channel for the signed in user; the token decides whose notifications arrive.

        Accepts the user id so it can be passed to AuthContext as ``subscribe``.
        """
        if not self.token:
            raise ValueError("Sign in before subscribing to notifications")
        url = websocket_url(self.api_url, "/notifications/ws") + "?" + urlencode({"token": self.token})
        return WebSocketSubscription(url, connect=self._ws_connect)

    # Settings

    async def get_settings(self) -> ServiceResult[dict]:
        return await self._request("GET", "/settings")

    async def update_settings(self, **fields: Any) -> ServiceResult[dict]:
        return await self._request("PUT", "/settings", json=fields)
