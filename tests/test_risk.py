import pytest

from cryptosignal.schemas.signal import TradeDecision
from cryptosignal.services.risk import calculate_risk_levels


def test_buy_levels_bracket_price():
    levels = calculate_risk_levels(100.0, TradeDecision.BUY)

    assert levels.stop_loss == pytest.approx(98.0)
    assert levels.take_profit == pytest.approx(104.0)


def test_sell_levels_are_inverted():
    levels = calculate_risk_levels(100.0, TradeDecision.SELL)

    assert levels.stop_loss == pytest.approx(102.0)
    assert levels.take_profit == pytest.approx(96.0)


def test_hold_has_no_levels():
    levels = calculate_risk_levels(100.0, TradeDecision.HOLD)

    assert levels.stop_loss is None
    assert levels.take_profit is None


def test_accepts_plain_string_decision():
    levels = calculate_risk_levels(90000.0, "BUY")

    assert levels.stop_loss == pytest.approx(88200.0)
    assert levels.take_profit == pytest.approx(93600.0)


@pytest.mark.parametrize("price", [0.15, 3200.0, 91250.0])
def test_buy_ordering_holds_for_any_price(price):
    levels = calculate_risk_levels(price, TradeDecision.BUY)
    assert levels.stop_loss < price < levels.take_profit

    levels = calculate_risk_levels(price, TradeDecision.SELL)
    assert levels.take_profit < price < levels.stop_loss
