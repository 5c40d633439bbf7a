"""Client page registry.

The dashboard client switches between a fixed set of pages. Each page is a
plain enum member mapped to a descriptor telling the client which API
resource backs it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class Page(str, Enum):
    DASHBOARD = "dashboard"
    INCOME = "kas-masuk"
    EXPENSE = "kas-keluar"
    TARGET = "target"
    REPORT = "laporan"
    PROFILE = "profile"


@dataclass(frozen=True)
class PageDescriptor:
    page: Page
    title: str
    resource: str
    transaction_type: Optional[str] = None


_PAGES: Dict[Page, PageDescriptor] = {
    Page.DASHBOARD: PageDescriptor(Page.DASHBOARD, "Dashboard", "/api/v1/dashboard"),
    Page.INCOME: PageDescriptor(Page.INCOME, "Income", "/api/v1/transactions", "income"),
    Page.EXPENSE: PageDescriptor(Page.EXPENSE, "Expenses", "/api/v1/transactions", "expense"),
    Page.TARGET: PageDescriptor(Page.TARGET, "Savings Targets", "/api/v1/savings-targets"),
    Page.REPORT: PageDescriptor(Page.REPORT, "Reports", "/api/v1/reports/export"),
    Page.PROFILE: PageDescriptor(Page.PROFILE, "Profile", "/api/v1/profile"),
}


def resolve_page(page: str) -> PageDescriptor:
    """
    Look up the descriptor for a page id.

    Raises:
        ValueError: If the page id is unknown
    """
    return _PAGES[Page(page)]


def list_pages() -> List[PageDescriptor]:
    """All pages in menu order."""
    return [_PAGES[page] for page in Page]
