"""Unit tests for the client page registry."""

import pytest

from celengan.services.navigation_service import Page, list_pages, resolve_page


@pytest.mark.unit
class TestNavigation:
    """Page resolution."""

    def test_income_page_reads_income_transactions(self):
        descriptor = resolve_page("kas-masuk")
        assert descriptor.page == Page.INCOME
        assert descriptor.resource == "/api/v1/transactions"
        assert descriptor.transaction_type == "income"

    def test_expense_page_reads_expense_transactions(self):
        assert resolve_page("kas-keluar").transaction_type == "expense"

    def test_report_page(self):
        assert resolve_page(Page.REPORT).resource == "/api/v1/reports/export"

    def test_unknown_page_raises(self):
        with pytest.raises(ValueError):
            resolve_page("settings")

    def test_every_page_is_listed_in_order(self):
        pages = list_pages()
        assert [p.page for p in pages] == list(Page)
        assert pages[0].page == Page.DASHBOARD
