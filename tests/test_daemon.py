"""Tests for the terminal runner."""

import random
from unittest.mock import patch

from marketmaker.config import AppConfig


def _app(tmp_path, verbose=False):
    from marketmaker.daemon import MarketMaker
    from marketmaker.engine import GameEngine
    from marketmaker.persistence import SaveManager

    config = AppConfig()
    engine = GameEngine(config=config, save_manager=SaveManager(tmp_path / "save.json"),
                        rng=random.Random(2))
    return MarketMaker(config=config, engine=engine, verbose=verbose)


def test_buy_and_sell_commands(tmp_path, capsys):
    app = _app(tmp_path)
    assert app.handle_command("b\n") is True
    assert app.engine.state.portfolio.coins == 10100
    assert app.handle_command("s") is True
    assert app.engine.state.portfolio.coins == 10000
    out = capsys.readouterr().out
    assert "cash" in out


def test_upgrade_command_rejected(tmp_path, capsys):
    app = _app(tmp_path)
    app.handle_command("u rd_pos_consensus")
    assert "Cannot purchase rd_pos_consensus" in capsys.readouterr().out
    app.handle_command("u")
    assert "usage" in capsys.readouterr().out


def test_list_and_news_commands(tmp_path, capsys):
    app = _app(tmp_path)
    app.handle_command("l")
    out = capsys.readouterr().out
    assert "rd_pos_consensus" in out
    assert "needs mkt_social_blitz" in out
    assert out.index("[marketing]") < out.index("mkt_social_blitz") < out.index("[r_and_d]")
    app.handle_command("n")
    assert "No news yet." in capsys.readouterr().out


def test_save_command(tmp_path):
    app = _app(tmp_path)
    app.handle_command("w")
    assert app.engine.save_manager.exists()


def test_quit_and_unknown(tmp_path, capsys):
    app = _app(tmp_path)
    assert app.handle_command("q") is False
    assert app.handle_command("") is True
    assert app.handle_command("dance") is True
    assert "commands:" in capsys.readouterr().out


def test_start_new_game_then_stop_saves(tmp_path):
    app = _app(tmp_path)
    with patch("marketmaker.daemon.TickThread") as MockThread:
        app.start(new_game=True)
        MockThread.return_value.start.assert_called_once()
        app.stop()
        MockThread.return_value.stop.assert_called_once()
    assert app.engine.save_manager.exists()


def test_start_reports_missing_save(tmp_path, capsys):
    app = _app(tmp_path)
    with patch("marketmaker.daemon.TickThread"):
        app.start()
    assert "No saved game" in capsys.readouterr().out


def test_on_tick_prints_news(tmp_path, capsys):
    from marketmaker.catalog import EVENTS_BY_ID

    app = _app(tmp_path, verbose=True)
    result = app.engine.tick()
    result = type(result)(state=result.state, candle=result.candle,
                          fired_events=(EVENTS_BY_ID["dummy_2"],))
    app._on_tick(result)
    out = capsys.readouterr().out
    assert "NEWS: Is it just me" in out
    assert "price" in out
