"""Tests for the GameState snapshot and its save-file shape."""

import dataclasses

import pytest


def test_default_game_state():
    from marketmaker.models import CandleData, default_game_state

    state = default_game_state()
    assert state.portfolio.cash == 2000.0
    assert state.portfolio.coins == 10000
    assert state.candle_history == (CandleData(open=1.0, high=1.03, low=0.97, close=1.0),)
    assert state.historical_candle_count == 1
    assert state.purchased_upgrade_ids == frozenset()
    assert state.active_effects == ()
    assert state.news_feed == ()
    assert state.triggered_one_time_event_ids == frozenset()
    assert state.current_growth_rate == 0.65


def test_state_is_immutable():
    from marketmaker.models import default_game_state

    state = default_game_state()
    with pytest.raises(dataclasses.FrozenInstanceError):
        state.historical_candle_count = 5


def test_derived_values():
    from marketmaker.models import GameState, PlayerPortfolio, default_game_state

    state = default_game_state()
    assert state.last_close == 1.0
    assert state.market_cap(100_000_000) == 100_000_000
    assert state.net_worth == 2000.0 + 10000

    empty = GameState(portfolio=PlayerPortfolio(cash=10.0, coins=3))
    assert empty.last_close is None
    assert empty.market_cap(100) == 0.0
    assert empty.net_worth == 10.0


def test_to_dict_uses_save_field_names():
    from marketmaker.models import ActiveEffect, NewsItem, default_game_state

    state = dataclasses.replace(
        default_game_state(),
        purchased_upgrade_ids=frozenset({"rd_pos_consensus"}),
        active_effects=(ActiveEffect("rd_pos_consensus", 42),),
        news_feed=(NewsItem("dummy_1", "hello", 7),),
        triggered_one_time_event_ids=frozenset({"review_pos_update"}),
    )
    data = state.to_dict()
    assert data["playerPortfolio"] == {"cash": 2000.0, "coins": 10000}
    assert data["candleHistory"] == [{"open": 1.0, "high": 1.03, "low": 0.97, "close": 1.0}]
    assert data["historicalCandleCount"] == 1
    assert data["purchasedUpgradeIds"] == ["rd_pos_consensus"]
    assert data["activeEffects"] == [{"upgradeId": "rd_pos_consensus", "durationRemainingInCandles": 42}]
    assert data["newsFeed"] == [{"eventId": "dummy_1", "headline": "hello", "timestamp": 7}]
    assert data["triggeredOneTimeEventIds"] == ["review_pos_update"]
    assert data["currentGrowthRate"] == 0.65


def test_from_dict_restores_state():
    from marketmaker.models import ActiveEffect, GameState, NewsItem, default_game_state

    state = dataclasses.replace(
        default_game_state(),
        historical_candle_count=12,
        purchased_upgrade_ids=frozenset({"mkt_social_blitz"}),
        active_effects=(ActiveEffect("mkt_social_blitz", 3),),
        news_feed=(NewsItem("dummy_2", "coffee", 11), NewsItem("dummy_1", "tv", 9)),
        current_growth_rate=0.78,
    )
    assert GameState.from_dict(state.to_dict()) == state


def test_from_dict_fills_optional_fields():
    """Older saves only carried the portfolio and the candles."""
    from marketmaker.models import GameState

    state = GameState.from_dict({
        "playerPortfolio": {"cash": 20000.0, "coins": 10000},
        "candleHistory": [
            {"open": 1.0, "high": 1.1, "low": 0.9, "close": 1.05},
            {"open": 1.05, "high": 1.2, "low": 1.0, "close": 1.15},
        ],
    })
    assert state.portfolio.cash == 20000.0
    assert state.historical_candle_count == 2
    assert state.active_effects == ()
    assert state.current_growth_rate == 0.65


@pytest.mark.parametrize("data", [
    [],
    {},
    {"playerPortfolio": {"cash": 1.0}, "candleHistory": []},
    {"playerPortfolio": {"cash": "lots", "coins": 1}, "candleHistory": []},
    {"playerPortfolio": {"cash": 1.0, "coins": 1}, "candleHistory": [{"open": 1.0}]},
    {"playerPortfolio": {"cash": 1.0, "coins": 1}, "candleHistory": [],
     "purchasedUpgradeIds": "rd_pos_consensus"},
    {"playerPortfolio": {"cash": 1.0, "coins": 1}, "candleHistory": [],
     "triggeredOneTimeEventIds": {"review_pos_update": True}},
])
def test_from_dict_rejects_bad_data(data):
    from marketmaker.models import GameState, SaveFormatError

    with pytest.raises(SaveFormatError):
        GameState.from_dict(data)
