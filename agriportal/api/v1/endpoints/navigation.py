from fastapi import APIRouter

from agriportal.core.deps import CurrentUser
from agriportal.portal.navigation import NavigationState, allowed_pages, home_page, to_role
from agriportal.schemas.navigation import NavigationInfo, ResolveInput, ResolveOut

router = APIRouter()


@router.get("", response_model=NavigationInfo)
async def navigation_info(user: CurrentUser):
    role = to_role(user.role)
    return NavigationInfo(
        role=role.value,
        allowed_pages=[p.value for p in allowed_pages(role)],
        home_page=home_page(role).value,
    )


@router.post("/resolve", response_model=ResolveOut)
async def resolve_navigation(data: ResolveInput, user: CurrentUser):
    """Where the caller ends up when navigating from current_page to target_page"""
    state = NavigationState(role=to_role(user.role))
    state.set_page(data.current_page)
    state.navigate(data.target_page)
    return ResolveOut(page=state.current_page, changed=state.current_page != data.current_page)
