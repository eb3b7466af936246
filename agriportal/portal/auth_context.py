"""
Session state shared by every portal page.

AuthContext is built once at portal start. It owns the API client, the signed
in profile, the navigation state and the notification feed, and keeps them
consistent: signing in sets the navigation role (which runs the page guard)
and attaches the feed, signing out tears both down.
"""
import logging
from typing import Any, Callable, Optional

from agriportal.core.validation import validate_sign_in_data, validate_sign_up_data
from agriportal.portal.api_client import PortalClient, ServiceResult
from agriportal.portal.navigation import NavigationState
from agriportal.portal.notification_feed import NotificationChannel, NotificationFeed

logger = logging.getLogger(__name__)


class AuthContext:
    def __init__(
        self,
        client: PortalClient,
        subscribe: Optional[Callable[[int], NotificationChannel]] = None,
        navigation: NavigationState | None = None,
    ):
        self.client = client
        self.subscribe = subscribe
        self.navigation = navigation or NavigationState()
        self.feed = NotificationFeed()
        self.profile: Optional[dict[str, Any]] = None

    @property
    def token(self) -> Optional[str]:
        return self.client.token

    @property
    def is_authenticated(self) -> bool:
        return self.profile is not None

    @property
    def role(self) -> Optional[str]:
        return self.profile.get("role") if self.profile else None

    async def sign_in(self, username: str, password: str, remember_me: bool = False) -> ServiceResult[dict]:
        errors = validate_sign_in_data(username, password)
        if errors:
            return ServiceResult(error=errors[0].message)

        login = await self.client.sign_in(username.strip(), password, remember_me)
        if not login.ok:
            return login
        profile = await self.client.get_profile()
        if not profile.ok:
            self.client.sign_out()
            return profile

        self.profile = profile.data
        self.navigation.set_role(self.role)
        # Attach before fetching so nothing published in between is lost
        if self.subscribe is not None:
            self.feed.attach(self.subscribe(self.profile["id"]))
        await self._load_notifications()
        logger.info("Signed in as %s (%s)", self.profile["username"], self.role)
        return profile

    async def _load_notifications(self) -> None:
        listing = await self.client.get_notifications()
        if not listing.ok:
            logger.warning("Could not load notifications: %s", listing.error)
            return
        unread = await self.client.get_unread_count()
        self.feed.merge(listing.data, unread.data["count"] if unread.ok else None)

    async def sign_up(
        self,
        username: str,
        password: str,
        phone_number: str,
        confirm_password: str | None = None,
        role: str = "farmer",
        province: str | None = None,
    ) -> ServiceResult[dict]:
        """Register an account; the caller signs in afterwards"""
        errors = validate_sign_up_data(username, password, phone_number, confirm_password)
        if errors:
            return ServiceResult(error=errors[0].message)
        return await self.client.sign_up(
            username.strip(),
            password,
            phone_number,
            confirm_password=confirm_password,
            role=role,
            province=province,
        )

    def sign_out(self) -> None:
        self.feed.detach()
        self.feed.clear()
        self.client.sign_out()
        self.profile = None
        self.navigation.reset()

    async def refresh_profile(self) -> ServiceResult[dict]:
        result = await self.client.get_profile()
        if result.ok:
            self.profile = result.data
            self.navigation.set_role(self.role)
        return result
