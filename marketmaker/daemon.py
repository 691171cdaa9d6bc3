# marketmaker/daemon.py
"""Market Maker — headless terminal runner."""

import argparse
import logging
import sys
import threading
from pathlib import Path

from marketmaker.catalog import UpgradeCategory, upgrades_in_category
from marketmaker.config import AppConfig, load_config
from marketmaker.engine import GameEngine, TickThread
from marketmaker.market import TickResult
from marketmaker.persistence import SaveManager

HELP = "commands: b=buy  s=sell  u <id>=upgrade  l=list upgrades  n=news  w=save  q=quit"


def _compact(n: float) -> str:
    if n >= 1_000_000:
        return f"{n / 1_000_000:.2f}M"
    if n >= 1_000:
        return f"{n / 1_000:.1f}K"
    return f"{n:.2f}"


class MarketMaker:
    """Main application class."""

    def __init__(self, config: AppConfig, engine: GameEngine, verbose: bool = False):
        self.config = config
        self.engine = engine
        self.verbose = verbose
        self.ticker: TickThread | None = None
        self.print_lock = threading.Lock()

    def start(self, new_game: bool = False):
        """Load or reset the game and start ticking."""
        if new_game:
            self.engine.new_game()
        elif self.engine.load_game():
            self._print("Continuing saved game.")
        else:
            self._print("No saved game, starting fresh.")

        self.ticker = TickThread(
            engine=self.engine,
            interval=self.config.simulation.tick_interval,
            on_tick=self._on_tick,
        )
        self.ticker.start()

        if self.verbose:
            self._print(f"Tick every {self.config.simulation.tick_interval}s, "
                        f"saving to {self.engine.save_manager.path}")

    def stop(self):
        """Stop ticking and save."""
        if self.ticker:
            self.ticker.stop()
            self.ticker.join(timeout=self.config.simulation.tick_interval + 1)
        self.engine.save_game()

    def _print(self, text: str):
        with self.print_lock:
            print(text, flush=True)

    def status_line(self) -> str:
        state = self.engine.state
        close = state.last_close or 0.0
        return (f"#{state.historical_candle_count:<5} price {close:8.4f}  "
                f"growth {state.current_growth_rate:.3f}  "
                f"cash {_compact(state.portfolio.cash)}  coins {state.portfolio.coins}  "
                f"net {_compact(state.net_worth)}")

    def _on_tick(self, result: TickResult):
        for event in result.fired_events:
            self._print(f"  NEWS: {event.headline}")
        if self.verbose:
            c = result.candle
            arrow = "+" if c.close >= c.open else "-"
            self._print(f"{arrow} {self.status_line()}")

    def handle_command(self, line: str) -> bool:
        """Run one console command. Returns False when the user quits."""
        parts = line.strip().split()
        if not parts:
            return True
        cmd, args = parts[0].lower(), parts[1:]

        if cmd == "q":
            return False

        if cmd == "b":
            ok = self.engine.buy()
            self._print(self.status_line() if ok else "Not enough cash.")

        elif cmd == "s":
            ok = self.engine.sell()
            self._print(self.status_line() if ok else "Not enough coins.")

        elif cmd == "u":
            if not args:
                self._print("usage: u <upgrade id>")
            elif self.engine.purchase_upgrade(args[0]):
                self._print(f"Purchased {args[0]}.")
            else:
                self._print(f"Cannot purchase {args[0]}.")

        elif cmd == "l":
            state = self.engine.state
            for category in UpgradeCategory:
                self._print(f"[{category.value}]")
                for u in upgrades_in_category(category):
                    owned = "*" if u.id in state.purchased_upgrade_ids else " "
                    dep = f" (needs {u.depends_on})" if u.depends_on else ""
                    self._print(f" {owned} {u.id:<24} {_compact(u.cost):>8}  {u.name}{dep}")

        elif cmd == "n":
            news = self.engine.state.news_feed[:10]
            if not news:
                self._print("No news yet.")
            for item in news:
                self._print(f"  [{item.timestamp}] {item.headline}")

        elif cmd == "w":
            self.engine.save_game()
            self._print("Saved.")

        else:
            self._print(HELP)

        return True


def main():
    parser = argparse.ArgumentParser(description="Market Maker simulation")
    parser.add_argument("--config", default="config.yaml", help="Config file path")
    parser.add_argument("--new", action="store_true", help="Discard the save and start over")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config_path = Path(args.config)
    config = load_config(config_path) if config_path.exists() else AppConfig()

    engine = GameEngine(config=config, save_manager=SaveManager(config.save.path))
    app = MarketMaker(config=config, engine=engine, verbose=args.verbose)
    app.start(new_game=args.new)
    print(HELP)

    try:
        for line in sys.stdin:
            if not app.handle_command(line):
                break
    except KeyboardInterrupt:
        print("\nSaving...")
    finally:
        app.stop()
        print("Done.")


if __name__ == "__main__":
    main()
