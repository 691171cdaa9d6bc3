"""Config loader — YAML to dataclasses."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class SimulationConfig:
    tick_interval: float = 2.0
    base_growth_rate: float = 0.65
    history_limit: int = 30
    news_limit: int = 50
    coin_supply: int = 100_000_000


@dataclass
class PlayerConfig:
    starting_cash: float = 2000.0
    starting_coins: int = 10000
    trade_lot: int = 100
    enforce_dependencies: bool = False


@dataclass
class SaveConfig:
    directory: str = "~/.market-maker"
    file_name: str = "market_maker_save.json"

    @property
    def path(self) -> Path:
        return Path(os.path.expanduser(self.directory)) / self.file_name


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    save: SaveConfig = field(default_factory=SaveConfig)


def load_config(path: Path) -> AppConfig:
    """Load config from YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    simulation = SimulationConfig(**{k: v for k, v in (raw.get("simulation") or {}).items()})
    player = PlayerConfig(**{k: v for k, v in (raw.get("player") or {}).items()})
    save = SaveConfig(**{k: v for k, v in (raw.get("save") or {}).items()})

    return AppConfig(simulation=simulation, player=player, save=save)
