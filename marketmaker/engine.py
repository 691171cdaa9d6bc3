"""Game engine: owns the current snapshot and the tick thread."""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable

from marketmaker import market
from marketmaker.catalog import EVENTS, UPGRADES, UPGRADES_BY_ID, Upgrade
from marketmaker.config import AppConfig
from marketmaker.models import GameState, default_game_state
from marketmaker.persistence import SaveManager

logger = logging.getLogger(__name__)


class GameEngine:
    """Single owner of the GameState.

    Every accepted change replaces the snapshot, bumps `version` and, once the lock is
    released, calls `on_change(state, version)`. Rejected actions change nothing.
    """

    def __init__(self, config: AppConfig, save_manager: SaveManager,
                 rng: random.Random | None = None,
                 on_change: Callable[[GameState, int], None] | None = None):
        self.config = config
        self.save_manager = save_manager
        self.rng = rng or random.Random()
        self.on_change = on_change
        self.lock = threading.Lock()
        self.modifiers = market.build_growth_modifiers(UPGRADES)
        self.settings = market.MarketSettings(
            base_growth_rate=config.simulation.base_growth_rate,
            history_limit=config.simulation.history_limit,
            news_limit=config.simulation.news_limit,
            coin_supply=config.simulation.coin_supply,
        )
        self._state = self._fresh_state()
        self._version = 0

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def version(self) -> int:
        return self._version

    def _fresh_state(self) -> GameState:
        return default_game_state(
            starting_cash=self.config.player.starting_cash,
            starting_coins=self.config.player.starting_coins,
            base_growth_rate=self.config.simulation.base_growth_rate,
        )

    def _swap(self, new_state: GameState) -> int | None:
        """Swap in `new_state` if it differs. Caller holds the lock.

        Returns the new version, or None when nothing changed.
        """
        if new_state is self._state:
            return None
        self._state = new_state
        self._version += 1
        return self._version

    def _notify(self, state: GameState, version: int | None) -> bool:
        """Tell the observer about a swap. Called after the lock is released."""
        if version is None:
            return False
        if self.on_change:
            self.on_change(state, version)
        return True

    # -- simulation ----------------------------------------------------------

    def tick(self) -> market.TickResult:
        with self.lock:
            result = market.advance(
                self._state, self.modifiers, self.settings, EVENTS, self.rng,
            )
            version = self._swap(result.state)
        self._notify(result.state, version)
        for event in result.fired_events:
            logger.info("news: %s", event.headline)
        return result

    # -- player actions ------------------------------------------------------

    def buy(self) -> bool:
        with self.lock:
            state = market.buy(self._state, self.config.player.trade_lot)
            version = self._swap(state)
        return self._notify(state, version)

    def sell(self) -> bool:
        with self.lock:
            state = market.sell(self._state, self.config.player.trade_lot)
            version = self._swap(state)
        return self._notify(state, version)

    def purchase_upgrade(self, upgrade_id: str) -> bool:
        with self.lock:
            state = market.purchase_upgrade(
                self._state, upgrade_id, UPGRADES_BY_ID,
                enforce_dependencies=self.config.player.enforce_dependencies,
            )
            version = self._swap(state)
        return self._notify(state, version)

    def available_upgrades(self) -> list[Upgrade]:
        """Upgrades that are unlocked and not yet owned."""
        state = self._state
        return [
            u for u in UPGRADES
            if u.id not in state.purchased_upgrade_ids and market.is_unlocked(u, state)
        ]

    # -- save / load ---------------------------------------------------------

    def load_game(self) -> bool:
        """Continue the saved game. Falls back to a fresh game if there is none."""
        loaded = self.save_manager.load()
        state = loaded if loaded is not None else self._fresh_state()
        with self.lock:
            version = self._swap(state)
        self._notify(state, version)
        return loaded is not None

    def new_game(self) -> None:
        self.save_manager.delete()
        state = self._fresh_state()
        with self.lock:
            version = self._swap(state)
        self._notify(state, version)

    def save_game(self) -> None:
        self.save_manager.save(self._state)


class TickThread(threading.Thread):
    """Background thread that advances the engine at a fixed interval."""

    def __init__(self, engine: GameEngine, interval: float,
                 on_tick: Callable[[market.TickResult], None] | None = None):
        super().__init__(daemon=True)
        self.engine = engine
        self.interval = interval
        self.on_tick = on_tick
        self._stop_event = threading.Event()

    def stop(self):
        """Signal the tick thread to stop."""
        self._stop_event.set()

    def run(self):
        while not self._stop_event.wait(self.interval):
            result = self.engine.tick()
            if self.on_tick:
                self.on_tick(result)
