"""Navigation schemas."""

from typing import Optional

from pydantic import BaseModel

from celengan.services.navigation_service import Page


class PageResponse(BaseModel):
    page: Page
    title: str
    resource: str
    transaction_type: Optional[str] = None

    model_config = {"from_attributes": True}
