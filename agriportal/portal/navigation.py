"""
Role-gated page navigation for the portal.

Pages form a closed set and the role -> reachable pages rule lives in one
table, ALLOWED_PAGES. Both the explicit navigate() call and the guard that runs
after every role or page change consult it through is_allowed().
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Role(str, Enum):
    FARMER = "farmer"
    BUSINESS = "business"


class Page(str, Enum):
    DASHBOARD = "dashboard"
    BUSINESS_DASHBOARD = "business-dashboard"
    SALINITY = "salinity"
    PROPHET = "prophet"
    POSTS = "posts"
    PRODUCTS = "products"
    INVEST = "invest"
    CREATE_PROJECT = "create-project"
    EDIT_PROJECT = "edit-project"
    ADMIN = "admin"
    ANALYTICS = "analytics"
    PROFILE = "profile"
    SETTINGS = "settings"


ALL_PAGES = frozenset(Page)

ALLOWED_PAGES: dict[Role, frozenset[Page]] = {
    Role.FARMER: ALL_PAGES,
    Role.BUSINESS: frozenset({
        Page.INVEST,
        Page.PROFILE,
        Page.SETTINGS,
        Page.CREATE_PROJECT,
        Page.EDIT_PROJECT,
        Page.PRODUCTS,
        Page.BUSINESS_DASHBOARD,
    }),
}

HOME_PAGES = {
    Role.FARMER: Page.DASHBOARD,
    Role.BUSINESS: Page.BUSINESS_DASHBOARD,
}


def to_role(role: Role | str | None) -> Role:
    """Anything that is not the business role navigates as a farmer"""
    if isinstance(role, Role):
        return role
    return Role.BUSINESS if role == Role.BUSINESS.value else Role.FARMER


def to_page(page: Page | str) -> Optional[Page]:
    if isinstance(page, Page):
        return page
    try:
        return Page(page)
    except ValueError:
        return None


def is_allowed(role: Role | str | None, page: Page | str) -> bool:
    resolved = to_page(page)
    if resolved is None:
        # Unknown pages are only open to roles with the full page set
        return ALLOWED_PAGES[to_role(role)] == ALL_PAGES
    return resolved in ALLOWED_PAGES[to_role(role)]


def allowed_pages(role: Role | str | None) -> list[Page]:
    pages = ALLOWED_PAGES[to_role(role)]
    return [p for p in Page if p in pages]


def home_page(role: Role | str | None) -> Page:
    return HOME_PAGES[to_role(role)]


@dataclass
class NavigationState:
    role: Optional[Role | str] = None
    current_page: str = Page.DASHBOARD.value
    on_scroll_top: Optional[Callable[[], None]] = None
    selected_product_id: Optional[int] = None
    editing_project_id: Optional[int] = None
    redirect_count: int = field(default=0)

    def navigate(self, page: Page | str) -> bool:
        """Go to page; a page the role may not reach leaves the state untouched"""
        value = page.value if isinstance(page, Page) else page
        if not is_allowed(self.role, value):
            logger.debug("Navigation to %s blocked for role %s", value, self.role)
            return False
        self.current_page = value
        if self.on_scroll_top is not None:
            self.on_scroll_top()
        return True

    def enforce(self) -> bool:
        """Move a role off a page it may not be on; returns True when it redirected"""
        if is_allowed(self.role, self.current_page):
            return False
        target = home_page(self.role)
        logger.info("Redirecting role %s from %s to %s", self.role, self.current_page, target.value)
        self.current_page = target.value
        self.redirect_count += 1
        return True

    def set_role(self, role: Role | str | None) -> bool:
        self.role = role
        return self.enforce()

    def set_page(self, page: Page | str) -> bool:
        """Assign the page directly (e.g. restored state), then re-run the guard"""
        self.current_page = page.value if isinstance(page, Page) else page
        return self.enforce()

    def reset(self) -> None:
        self.role = None
        self.current_page = Page.DASHBOARD.value
        self.selected_product_id = None
        self.editing_project_id = None
        self.redirect_count = 0

    def navigate_to_product(self, product_id: int) -> bool:
        if not self.navigate(Page.PRODUCTS):
            return False
        self.selected_product_id = product_id
        return True

    def edit_project(self, project_id: int) -> bool:
        if not self.navigate(Page.EDIT_PROJECT):
            return False
        self.editing_project_id = project_id
        return True
