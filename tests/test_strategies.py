import itertools

import pytest

from cryptosignal.schemas.signal import TradeDecision
from cryptosignal.services.strategy.evaluators import (
    AI_UNAVAILABLE_NOTE,
    breakout_strategy,
    macd_crossover_strategy,
    mean_reversion_strategy,
    momentum_strategy,
    rsi_divergence_strategy,
    support_resistance_strategy,
    trend_following_technical,
    volume_spike_strategy,
)
from cryptosignal.services.strategy.panel import STRATEGY_PANEL

from conftest import make_snapshot


def assert_levels(result, price):
    if result.decision == TradeDecision.BUY:
        assert result.stop_loss == pytest.approx(price * 0.98)
        assert result.take_profit == pytest.approx(price * 1.04)
    elif result.decision == TradeDecision.SELL:
        assert result.stop_loss == pytest.approx(price * 1.02)
        assert result.take_profit == pytest.approx(price * 0.96)
    else:
        assert result.stop_loss is None
        assert result.take_profit is None


class TestMomentum:
    def test_strong_rise_buys(self):
        result = momentum_strategy(make_snapshot(change_24h=3.0))

        assert result.decision == TradeDecision.BUY
        assert result.confidence == 90
        assert_levels(result, 90000.0)

    def test_strong_drop_sells(self):
        result = momentum_strategy(make_snapshot(change_24h=-5.0))

        assert result.decision == TradeDecision.SELL
        assert result.confidence == 90
        assert_levels(result, 90000.0)

    def test_neutral_band_leans_buy(self):
        result = momentum_strategy(make_snapshot(change_24h=0.5))

        assert result.decision == TradeDecision.BUY
        assert result.confidence == 77

    def test_confidence_capped(self):
        assert momentum_strategy(make_snapshot(change_24h=40.0)).confidence == 95


class TestMeanReversion:
    def test_below_mean_buys(self):
        result = mean_reversion_strategy(make_snapshot(moving_average_50=93000.0))

        assert result.decision == TradeDecision.BUY
        assert result.confidence == 83

    def test_above_mean_sells(self):
        result = mean_reversion_strategy(make_snapshot(moving_average_50=86000.0))

        assert result.decision == TradeDecision.SELL
        assert result.confidence == 79

    def test_near_mean_holds(self):
        result = mean_reversion_strategy(make_snapshot())

        assert result.decision == TradeDecision.HOLD
        assert result.confidence == 50
        assert_levels(result, 90000.0)


class TestBreakout:
    def test_high_of_range_with_volume_buys(self):
        result = breakout_strategy(make_snapshot(current_price=94000.0))

        assert result.decision == TradeDecision.BUY
        assert result.confidence == 91

    def test_high_of_range_without_volume_holds(self):
        result = breakout_strategy(make_snapshot(current_price=94000.0, volume=300_000.0))

        assert result.decision == TradeDecision.HOLD

    def test_low_of_range_sells(self):
        result = breakout_strategy(make_snapshot(current_price=85500.0))

        assert result.decision == TradeDecision.SELL
        assert result.confidence == 87

    def test_mid_range_holds(self):
        assert breakout_strategy(make_snapshot()).decision == TradeDecision.HOLD

    def test_zero_width_range_is_mid(self):
        result = breakout_strategy(
            make_snapshot(high_24h=90000.0, low_24h=90000.0)
        )
        assert result.decision == TradeDecision.HOLD


class TestRsiDivergence:
    def test_oversold_buys(self):
        result = rsi_divergence_strategy(make_snapshot(rsi=25.0))

        assert result.decision == TradeDecision.BUY
        assert result.confidence >= 70
        assert result.confidence == 75

    def test_overbought_sells(self):
        result = rsi_divergence_strategy(make_snapshot(rsi=80.0))

        assert result.decision == TradeDecision.SELL
        assert result.confidence == 80

    def test_falling_price_with_neutral_rsi_is_weak_buy(self):
        result = rsi_divergence_strategy(make_snapshot(rsi=50.0, change_24h=-1.0))

        assert result.decision == TradeDecision.BUY
        assert result.confidence == 60

    def test_neutral_holds(self):
        result = rsi_divergence_strategy(make_snapshot(rsi=50.0, change_24h=0.5))
        assert result.decision == TradeDecision.HOLD

    def test_extreme_rsi_capped(self):
        assert rsi_divergence_strategy(make_snapshot(rsi=0.0)).confidence == 95


class TestMacdCrossover:
    def test_bullish_crossover(self):
        result = macd_crossover_strategy(make_snapshot(macd=0.6, change_24h=1.2))

        assert result.decision == TradeDecision.BUY
        assert 70 <= result.confidence < 90
        assert result.confidence == 74

    def test_bearish_crossover(self):
        result = macd_crossover_strategy(make_snapshot(macd=-1.0, change_24h=-2.0))

        assert result.decision == TradeDecision.SELL
        assert result.confidence == 82

    def test_unconfirmed_macd_holds(self):
        result = macd_crossover_strategy(make_snapshot(macd=0.6, change_24h=-1.0))
        assert result.decision == TradeDecision.HOLD


class TestVolumeSpike:
    def test_spike_with_rise_buys(self):
        result = volume_spike_strategy(make_snapshot(volume=1_500_000.0, change_24h=0.5))

        assert result.decision == TradeDecision.BUY
        assert result.confidence == 85

    def test_spike_with_drop_sells(self):
        result = volume_spike_strategy(make_snapshot(volume=1_500_000.0, change_24h=-1.0))

        assert result.decision == TradeDecision.SELL
        assert result.confidence == 80

    def test_spike_without_direction_holds(self):
        result = volume_spike_strategy(make_snapshot(volume=1_500_000.0, change_24h=0.0))
        assert result.decision == TradeDecision.HOLD

    def test_normal_volume_holds(self):
        assert volume_spike_strategy(make_snapshot()).decision == TradeDecision.HOLD


class TestSupportResistance:
    def test_near_support_buys(self):
        result = support_resistance_strategy(
            make_snapshot(low_24h=88500.0, moving_average_200=95000.0)
        )

        assert result.decision == TradeDecision.BUY
        assert result.confidence == 78

    def test_support_uses_lower_of_low_and_ma200(self):
        # Price is close to the 24h low, but MA200 sits lower and is the support
        result = support_resistance_strategy(
            make_snapshot(low_24h=88500.0, moving_average_200=80000.0, high_24h=99000.0)
        )
        assert result.decision == TradeDecision.HOLD

    def test_near_resistance_sells(self):
        result = support_resistance_strategy(
            make_snapshot(low_24h=80000.0, moving_average_200=80000.0, high_24h=91000.0)
        )

        assert result.decision == TradeDecision.SELL
        assert result.confidence == 78

    def test_between_levels_holds(self):
        result = support_resistance_strategy(make_snapshot())

        assert result.decision == TradeDecision.HOLD
        assert_levels(result, 90000.0)

    def test_price_above_ma200_support_holds(self):
        # Support is MA200 (85500), 5.26% below price, and resistance is 3.33%
        # above; neither is within 2%, so the rule holds rather than buying.
        result = support_resistance_strategy(
            make_snapshot(
                current_price=90000.0,
                moving_average_50=88200.0,
                moving_average_200=85500.0,
                high_24h=93000.0,
                low_24h=87000.0,
            )
        )

        assert result.decision == TradeDecision.HOLD
        assert result.confidence == 50
        assert "5.26% above support" in result.reasoning


class TestTrendFollowingTechnical:
    def test_confirmed_golden_cross(self):
        result = trend_following_technical(
            make_snapshot(
                current_price=95000.0,
                high_24h=96000.0,
                moving_average_50=92000.0,
                moving_average_200=88000.0,
                change_24h=2.0,
            )
        )

        assert result.decision == TradeDecision.BUY
        assert result.confidence == 89
        assert AI_UNAVAILABLE_NOTE in result.reasoning

    def test_confirmed_death_cross(self):
        result = trend_following_technical(
            make_snapshot(
                current_price=85000.0,
                low_24h=84000.0,
                moving_average_50=88000.0,
                moving_average_200=92000.0,
                change_24h=-3.0,
            )
        )

        assert result.decision == TradeDecision.SELL
        assert result.confidence == 86

    def test_unconfirmed_golden_cross(self):
        result = trend_following_technical(
            make_snapshot(moving_average_50=92000.0, moving_average_200=88000.0)
        )

        assert result.decision == TradeDecision.BUY
        assert result.confidence == 78

    def test_no_trend_holds(self):
        result = trend_following_technical(make_snapshot())

        assert result.decision == TradeDecision.HOLD
        assert AI_UNAVAILABLE_NOTE in result.reasoning


@pytest.mark.parametrize(
    "change, rsi, macd, volume, ma50",
    list(
        itertools.product(
            [-12.0, -2.5, 0.0, 1.5, 12.0],
            [0.0, 29.0, 50.0, 71.0, 100.0],
            [-2.0, 0.0, 2.0],
            [0.0, 800_000.0, 5_000_000.0],
            [80000.0, 90000.0, 100000.0],
        )
    )[::7],
)
def test_panel_output_is_always_well_formed(change, rsi, macd, volume, ma50):
    snapshot = make_snapshot(
        change_24h=change, rsi=rsi, macd=macd, volume=volume, moving_average_50=ma50
    )

    for descriptor in STRATEGY_PANEL:
        result = descriptor.evaluator(snapshot)

        assert result.reasoning
        if result.decision == TradeDecision.HOLD:
            assert result.confidence == 50
        else:
            assert 50 <= result.confidence <= 100
        assert_levels(result, snapshot.current_price)


def test_evaluators_are_pure():
    snapshot = make_snapshot(change_24h=1.7, rsi=33.0, macd=0.8)

    for descriptor in STRATEGY_PANEL:
        assert descriptor.evaluator(snapshot) == descriptor.evaluator(snapshot)
