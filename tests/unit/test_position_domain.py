"""Unit tests for pt_account domain models: weighted-average positions."""

from decimal import Decimal

import pytest

from src.pt_account.domain.models import PortfolioSummary, Position


def _open(quantity: str = "1", price: str = "50") -> Position:
    return Position.open("user-1", "bitcoin", "btc", "Bitcoin", Decimal(quantity), Decimal(price))


class TestOpen:
    def test_new_position_fields(self) -> None:
        pos = _open()
        assert pos.is_new is True
        assert pos.version == 0
        assert pos.crypto_symbol == "BTC"
        assert pos.quantity == Decimal("1")
        assert pos.average_cost == Decimal("50")
        assert pos.total_invested == Decimal("50")


class TestApplyBuy:
    def test_blends_average_cost(self) -> None:
        pos = _open("1", "50")
        pos.apply_buy(Decimal("1"), Decimal("70"))
        assert pos.quantity == Decimal("2")
        assert pos.total_invested == Decimal("120")
        assert pos.average_cost == Decimal("60")

    def test_average_cost_is_quantized(self) -> None:
        pos = _open("3", "1")
        pos.apply_buy(Decimal("3"), Decimal("2"))
        pos.apply_buy(Decimal("1"), Decimal("0"))
        assert pos.average_cost == Decimal("1.28571429")


class TestApplySell:
    def test_partial_sell_keeps_average_cost(self) -> None:
        pos = _open("2", "60")
        pos.apply_sell(Decimal("0.5"))
        assert pos.quantity == Decimal("1.5")
        assert pos.average_cost == Decimal("60")
        assert pos.total_invested == Decimal("90")
        assert not pos.is_closed

    def test_full_sell_closes(self) -> None:
        pos = _open("2", "60")
        pos.apply_sell(Decimal("2"))
        assert pos.is_closed
        assert pos.total_invested == Decimal("0")

    def test_oversell_raises(self) -> None:
        pos = _open("1", "60")
        with pytest.raises(ValueError, match="only 1 held"):
            pos.apply_sell(Decimal("1.00000001"))


class TestPortfolioSummary:
    def test_totals(self) -> None:
        summary = PortfolioSummary(
            cash_balance=Decimal("10"),
            positions=[_open("1", "50"), _open("2", "25.5")],
        )
        assert summary.total_cryptos == 2
        assert summary.total_invested == Decimal("101")

    def test_empty(self) -> None:
        summary = PortfolioSummary(cash_balance=Decimal("0"), positions=[])
        assert summary.total_cryptos == 0
        assert summary.total_invested == Decimal("0")
