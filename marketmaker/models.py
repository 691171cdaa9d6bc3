"""Game state model. Frozen dataclasses plus the JSON save shape.

A GameState is a snapshot: every field is immutable (tuples, frozensets)
so the engine can hand it to observers without copying.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_CASH = 2000.0
DEFAULT_COINS = 10000
BASE_GROWTH_RATE = 0.65


class SaveFormatError(ValueError):
    """Raised when save data does not have the expected shape."""


@dataclass(frozen=True)
class PlayerPortfolio:
    cash: float
    coins: int


@dataclass(frozen=True)
class CandleData:
    open: float
    high: float
    low: float
    close: float


@dataclass(frozen=True)
class ActiveEffect:
    source_id: str  # upgrade id or event id
    duration_remaining: int


@dataclass(frozen=True)
class NewsItem:
    event_id: str
    headline: str
    timestamp: int  # historical candle count when the news was generated


@dataclass(frozen=True)
class GameState:
    portfolio: PlayerPortfolio
    candle_history: tuple[CandleData, ...] = ()
    historical_candle_count: int = 0
    purchased_upgrade_ids: frozenset[str] = field(default_factory=frozenset)
    active_effects: tuple[ActiveEffect, ...] = ()
    news_feed: tuple[NewsItem, ...] = ()  # newest first
    triggered_one_time_event_ids: frozenset[str] = field(default_factory=frozenset)
    current_growth_rate: float = BASE_GROWTH_RATE

    @property
    def last_close(self) -> float | None:
        if not self.candle_history:
            return None
        return self.candle_history[-1].close

    def market_cap(self, supply: int) -> float:
        return (self.last_close or 0.0) * supply

    @property
    def net_worth(self) -> float:
        return self.portfolio.cash + self.portfolio.coins * (self.last_close or 0.0)

    # -- serialization -------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "playerPortfolio": {
                "cash": self.portfolio.cash,
                "coins": self.portfolio.coins,
            },
            "candleHistory": [
                {"open": c.open, "high": c.high, "low": c.low, "close": c.close}
                for c in self.candle_history
            ],
            "historicalCandleCount": self.historical_candle_count,
            "purchasedUpgradeIds": sorted(self.purchased_upgrade_ids),
            "activeEffects": [
                {"upgradeId": e.source_id, "durationRemainingInCandles": e.duration_remaining}
                for e in self.active_effects
            ],
            "newsFeed": [
                {"eventId": n.event_id, "headline": n.headline, "timestamp": n.timestamp}
                for n in self.news_feed
            ],
            "triggeredOneTimeEventIds": sorted(self.triggered_one_time_event_ids),
            "currentGrowthRate": self.current_growth_rate,
        }

    @classmethod
    def from_dict(cls, data: dict) -> GameState:
        """Rebuild a snapshot from save data.

        `playerPortfolio` and `candleHistory` are required; everything else
        falls back to the fresh-game default. Raises SaveFormatError when a
        field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise SaveFormatError(f"expected a JSON object, got {type(data).__name__}")
        try:
            raw_portfolio = data["playerPortfolio"]
            portfolio = PlayerPortfolio(
                cash=float(raw_portfolio["cash"]),
                coins=int(raw_portfolio["coins"]),
            )
            history = tuple(
                CandleData(
                    open=float(c["open"]),
                    high=float(c["high"]),
                    low=float(c["low"]),
                    close=float(c["close"]),
                )
                for c in data["candleHistory"]
            )
            effects = tuple(
                ActiveEffect(
                    source_id=str(e["upgradeId"]),
                    duration_remaining=int(e["durationRemainingInCandles"]),
                )
                for e in data.get("activeEffects", [])
            )
            news = tuple(
                NewsItem(
                    event_id=str(n["eventId"]),
                    headline=str(n["headline"]),
                    timestamp=int(n["timestamp"]),
                )
                for n in data.get("newsFeed", [])
            )
            return cls(
                portfolio=portfolio,
                candle_history=history,
                historical_candle_count=int(data.get("historicalCandleCount", len(history))),
                purchased_upgrade_ids=_id_set(data, "purchasedUpgradeIds"),
                active_effects=effects,
                news_feed=news,
                triggered_one_time_event_ids=_id_set(data, "triggeredOneTimeEventIds"),
                current_growth_rate=float(data.get("currentGrowthRate", BASE_GROWTH_RATE)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SaveFormatError(f"invalid save data: {e!r}") from e


def _id_set(data: dict, key: str) -> frozenset[str]:
    ids = data.get(key, [])
    if not isinstance(ids, list):
        raise TypeError(f"{key} must be a list, got {type(ids).__name__}")
    return frozenset(str(i) for i in ids)


def default_game_state(starting_cash: float = DEFAULT_CASH,
                       starting_coins: int = DEFAULT_COINS,
                       base_growth_rate: float = BASE_GROWTH_RATE) -> GameState:
    """Fresh game: starting funds and a single flat seed candle at 1.0."""
    seed = CandleData(open=1.0, high=1.03, low=0.97, close=1.0)
    return GameState(
        portfolio=PlayerPortfolio(cash=starting_cash, coins=starting_coins),
        candle_history=(seed,),
        historical_candle_count=1,
        current_growth_rate=base_growth_rate,
    )
