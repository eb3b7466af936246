from pydantic import BaseModel


class NavigationInfo(BaseModel):
    role: str
    allowed_pages: list[str]
    home_page: str


class ResolveInput(BaseModel):
    current_page: str
    target_page: str


class ResolveOut(BaseModel):
    page: str
    changed: bool
