"""Market simulation: candles, timed effects and news events, plus trades.

Every function here is a reducer: it takes a GameState snapshot and returns
a new one (or the same object when nothing changes). Randomness comes from
an `rng` argument with a `random()` method, the `random` module by default.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from marketmaker.catalog import (
    EVENTS,
    UPGRADES,
    UPGRADES_BY_ID,
    GameEvent,
    TriggerCondition,
    TriggerConditionType,
    Upgrade,
)
from marketmaker.models import (
    BASE_GROWTH_RATE,
    ActiveEffect,
    CandleData,
    GameState,
    NewsItem,
    PlayerPortfolio,
)

logger = logging.getLogger(__name__)

# -- tuning ----------------------------------------------------------------
GREEN_CHANCE = 0.70
DRAMATIC_CHANCE = 0.15
DRAMATIC_MULTIPLIER = 3.5
NORMAL_MULTIPLIER = 0.8
DRAMATIC_OFFSET = 0.3
NORMAL_OFFSET = 0.45
WICK_NOISE = 0.03
MIN_CLOSE = 0.1
HISTORY_LIMIT = 30
NEWS_LIMIT = 50
COIN_SUPPLY = 100_000_000
TRADE_LOT = 100


# -- candle generator ------------------------------------------------------

def generate_next_candle(previous_close: float, growth_bias: float, rng=random) -> CandleData:
    """Generate the candle that follows `previous_close`.

    Green 70% of the time. A dramatic move (15%) scales the random delta by
    3.5 instead of 0.8. Wicks extend up to 3% past the body and the close
    never drops below 0.1.
    """
    open_ = previous_close
    is_green = rng.random() < GREEN_CHANCE
    is_dramatic = rng.random() < DRAMATIC_CHANCE
    if is_dramatic:
        change = growth_bias * (rng.random() - DRAMATIC_OFFSET) * DRAMATIC_MULTIPLIER
    else:
        change = growth_bias * (rng.random() - NORMAL_OFFSET) * NORMAL_MULTIPLIER
    close = open_ + abs(change) if is_green else open_ - abs(change)
    high = max(open_, close) * (1 + rng.random() * WICK_NOISE)
    low = min(open_, close) * (1 - rng.random() * WICK_NOISE)
    return CandleData(open=open_, high=high, low=low, close=max(MIN_CLOSE, close))


# -- effects ---------------------------------------------------------------

def tick_effects(state: GameState) -> GameState:
    """Count every active effect down by one candle and drop expired ones."""
    if not state.active_effects:
        return state
    remaining = tuple(
        replace(e, duration_remaining=e.duration_remaining - 1)
        for e in state.active_effects
        if e.duration_remaining - 1 > 0
    )
    return replace(state, active_effects=remaining)


# -- events ----------------------------------------------------------------

def condition_met(condition: TriggerCondition, state: GameState,
                  supply: int = COIN_SUPPLY) -> bool:
    kind = condition.type
    if kind == TriggerConditionType.ALWAYS:
        return True
    if kind == TriggerConditionType.MARKET_CAP_ABOVE:
        return state.market_cap(supply) >= condition.value
    if kind == TriggerConditionType.UPGRADE_IS_PURCHASED:
        return condition.string_value is not None and condition.string_value in state.purchased_upgrade_ids
    if kind == TriggerConditionType.HISTORICAL_CANDLE_COUNT_ABOVE:
        return state.historical_candle_count > condition.value
    # No hype score or interest rate is simulated; these never hold.
    return False


def conditions_met(conditions: Iterable[TriggerCondition], state: GameState,
                   supply: int = COIN_SUPPLY) -> bool:
    """All conditions must hold. An event with no conditions never triggers."""
    conditions = list(conditions)
    if not conditions:
        return False
    return all(condition_met(c, state, supply) for c in conditions)


def trigger_event(state: GameState, event: GameEvent, news_limit: int = NEWS_LIMIT) -> GameState:
    """Publish an event: news item first, then its timed effect if it has one."""
    item = NewsItem(
        event_id=event.id,
        headline=event.headline,
        timestamp=state.historical_candle_count,
    )
    news_feed = ((item,) + state.news_feed)[:news_limit]

    effects = state.active_effects
    if not event.is_dummy and event.effect_type is not None and event.effect_duration > 0:
        effects = effects + (ActiveEffect(event.id, event.effect_duration),)

    triggered = state.triggered_one_time_event_ids
    if event.is_one_time:
        triggered = triggered | {event.id}

    return replace(
        state,
        news_feed=news_feed,
        active_effects=effects,
        triggered_one_time_event_ids=triggered,
    )


def check_for_events(state: GameState, events: Iterable[GameEvent] = EVENTS, rng=random,
                     supply: int = COIN_SUPPLY,
                     news_limit: int = NEWS_LIMIT) -> tuple[GameState, list[GameEvent]]:
    """Roll every eligible event once. Returns the new state and what fired."""
    fired = []
    for event in events:
        if event.is_one_time and event.id in state.triggered_one_time_event_ids:
            continue
        if not conditions_met(event.trigger_conditions, state, supply):
            continue
        if rng.random() < event.trigger_chance:
            state = trigger_event(state, event, news_limit)
            fired.append(event)
            logger.debug("event fired: %s", event.id)
    return state, fired


# -- growth rate -----------------------------------------------------------

Modifier = Callable[[float], float]


class GrowthModifiers:
    """Maps an effect source id to the function it applies to the growth rate."""

    def __init__(self):
        self._modifiers: dict[str, Modifier] = {}

    def register(self, source_id: str, modifier: Modifier) -> None:
        self._modifiers[source_id] = modifier

    def __contains__(self, source_id: str) -> bool:
        return source_id in self._modifiers

    def apply(self, rate: float, effects: Iterable[ActiveEffect]) -> float:
        for effect in effects:
            modifier = self._modifiers.get(effect.source_id)
            if modifier is not None:
                rate = modifier(rate)
        return rate


def _multiplier(factor: float) -> Modifier:
    return lambda rate: rate * factor


def build_growth_modifiers(upgrades: Iterable[Upgrade] = UPGRADES) -> GrowthModifiers:
    """Register a multiplicative modifier for each upgrade that boosts growth."""
    modifiers = GrowthModifiers()
    for upgrade in upgrades:
        if upgrade.growth_multiplier is not None:
            modifiers.register(upgrade.id, _multiplier(upgrade.growth_multiplier))
    return modifiers


def compute_growth_rate(state: GameState, modifiers: GrowthModifiers,
                        base_rate: float = BASE_GROWTH_RATE) -> float:
    return modifiers.apply(base_rate, state.active_effects)


# -- upgrades --------------------------------------------------------------

def is_unlocked(upgrade: Upgrade, state: GameState) -> bool:
    return upgrade.depends_on is None or upgrade.depends_on in state.purchased_upgrade_ids


def can_purchase(upgrade: Upgrade, state: GameState, enforce_dependencies: bool = False) -> bool:
    if upgrade.id in state.purchased_upgrade_ids:
        return False
    if state.portfolio.cash < upgrade.cost:
        return False
    if enforce_dependencies and not is_unlocked(upgrade, state):
        return False
    return True


def purchase_upgrade(state: GameState, upgrade_id: str,
                     upgrades: dict[str, Upgrade] = UPGRADES_BY_ID,
                     enforce_dependencies: bool = False) -> GameState:
    """Buy an upgrade. Unknown, unaffordable or owned upgrades leave `state` as is."""
    upgrade = upgrades.get(upgrade_id)
    if upgrade is None or not can_purchase(upgrade, state, enforce_dependencies):
        return state

    effects = state.active_effects
    if upgrade.effect_duration > 0:
        effects = effects + (ActiveEffect(upgrade.id, upgrade.effect_duration),)

    logger.info("upgrade purchased: %s for %.2f", upgrade.id, upgrade.cost)
    return replace(
        state,
        portfolio=replace(state.portfolio, cash=state.portfolio.cash - upgrade.cost),
        purchased_upgrade_ids=state.purchased_upgrade_ids | {upgrade.id},
        active_effects=effects,
    )


# -- trades ----------------------------------------------------------------

def buy(state: GameState, lot: int = TRADE_LOT) -> GameState:
    """Buy `lot` coins at the last close if cash covers it."""
    price = state.last_close
    if price is None:
        return state
    cost = lot * price
    if state.portfolio.cash < cost:
        return state
    portfolio = PlayerPortfolio(
        cash=state.portfolio.cash - cost,
        coins=state.portfolio.coins + lot,
    )
    return replace(state, portfolio=portfolio)


def sell(state: GameState, lot: int = TRADE_LOT) -> GameState:
    """Sell `lot` coins at the last close if enough are held."""
    price = state.last_close
    if price is None:
        return state
    if state.portfolio.coins < lot:
        return state
    portfolio = PlayerPortfolio(
        cash=state.portfolio.cash + lot * price,
        coins=state.portfolio.coins - lot,
    )
    return replace(state, portfolio=portfolio)


# -- tick ------------------------------------------------------------------

@dataclass(frozen=True)
class MarketSettings:
    base_growth_rate: float = BASE_GROWTH_RATE
    history_limit: int = HISTORY_LIMIT
    news_limit: int = NEWS_LIMIT
    coin_supply: int = COIN_SUPPLY


@dataclass(frozen=True)
class TickResult:
    state: GameState
    candle: CandleData
    fired_events: tuple[GameEvent, ...] = ()


def advance(state: GameState, modifiers: GrowthModifiers,
            settings: MarketSettings = MarketSettings(),
            events: Iterable[GameEvent] = EVENTS, rng=random) -> TickResult:
    """Run one simulation step.

    Order matters: effects tick down first, then events roll against the
    updated state, then the growth rate is folded from whatever effects are
    active and fed into the next candle.
    """
    state = tick_effects(state)
    state, fired = check_for_events(
        state, events, rng, supply=settings.coin_supply, news_limit=settings.news_limit,
    )
    growth_rate = compute_growth_rate(state, modifiers, settings.base_growth_rate)

    last_close = state.last_close
    candle = generate_next_candle(last_close if last_close is not None else 1.0, growth_rate, rng)
    history = (state.candle_history + (candle,))[-settings.history_limit:]

    state = replace(
        state,
        candle_history=history,
        historical_candle_count=state.historical_candle_count + 1,
        current_growth_rate=growth_rate,
    )
    return TickResult(state=state, candle=candle, fired_events=tuple(fired))
