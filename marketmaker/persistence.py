"""Save file, one JSON snapshot of the GameState.

Stores the game in ~/.market-maker/market_maker_save.json by default.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from marketmaker.config import SaveConfig
from marketmaker.models import GameState, SaveFormatError

logger = logging.getLogger(__name__)


class SaveManager:
    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path is not None else SaveConfig().path

    def save(self, state: GameState) -> None:
        try:
            os.makedirs(self.path.parent, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(state.to_dict(), f, indent=2)
        except OSError:
            logger.exception("could not write save file %s", self.path)
            return
        logger.debug("game saved to %s", self.path)

    def load(self) -> GameState | None:
        """Load the saved game. Returns None if there is none or it is unreadable."""
        try:
            with open(self.path) as f:
                data = json.load(f)
            return GameState.from_dict(data)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError, UnicodeDecodeError, SaveFormatError):
            logger.exception("could not read save file %s", self.path)
            return None

    def exists(self) -> bool:
        return self.path.is_file()

    def delete(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception("could not delete save file %s", self.path)
