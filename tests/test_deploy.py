import shutil

import pytest

from Mods.deploy import DeploymentContext, deploy_mods, launch_game
from Mods.engine_config import native_packages
from Mods.errors import CopyFailed
from Utils.app_log import LogType

from conftest import make_game, make_mod


@pytest.fixture
def game(tmp_path):
    return make_game(tmp_path / "game")


@pytest.fixture
def three_mods(mods_dir, make_manager):
    make_mod(mods_dir, "A", scripts=["AScripts"], files={"Chars/sol.upk": "a"})
    make_mod(mods_dir, "B", files={"Chars/sol.upk": "b"})
    make_mod(mods_dir, "C", scripts=["CScripts", "AScripts"], files={"Chars/ky.upk": "c"})
    manager = make_manager()
    assert [m.name for m in manager.mods] == ["A", "B", "C"]
    return manager


def test_bottom_of_list_gets_first_slot(game, three_mods, mods_dir):
    context = DeploymentContext(game)
    result = deploy_mods(three_mods.mods, context)

    assert result.deployed == [("C", "a"), ("B", "b"), ("A", "c")]
    assert result.slot_of("A") == "c"
    deploy_dir = context.deploy_dir
    assert (deploy_dir / "a" / "C" / "Chars" / "ky.upk").read_text() == "c"
    assert (deploy_dir / "c" / "A" / "Chars" / "sol.upk").read_text() == "a"
    assert (deploy_dir / "c" / "A" / "mod.ini").is_file()
    # Sources are left alone.
    assert (mods_dir / "A" / "Chars" / "sol.upk").read_text() == "a"


def test_disabled_mods_are_not_deployed(game, three_mods):
    three_mods.set_enabled("B", False)
    result = deploy_mods(three_mods.mods, DeploymentContext(game))
    assert result.deployed == [("C", "a"), ("A", "b")]


def test_previous_deployment_is_cleared(game, three_mods):
    context = DeploymentContext(game)
    stale = context.deploy_dir / "zz" / "Old"
    stale.mkdir(parents=True)
    deploy_mods(three_mods.mods, context)
    assert not (context.deploy_dir / "zz").exists()


def test_script_packages_merged_once(game, three_mods):
    context = DeploymentContext(game)
    result = deploy_mods(three_mods.mods, context)
    assert result.config_merged
    assert result.packages_added == ["CScripts", "AScripts"]
    assert native_packages(context.engine_ini) == ["REDGame", "CScripts", "AScripts"]


def test_packages_of_disabled_mods_are_dropped(game, three_mods):
    context = DeploymentContext(game)
    deploy_mods(three_mods.mods, context)
    three_mods.set_enabled("C", False)
    deploy_mods(three_mods.mods, context)
    assert native_packages(context.engine_ini) == ["REDGame", "AScripts"]


def test_slot_exhaustion_skips_only_that_mod(game, three_mods, log):
    """Start two slots below the end of the namespace so the third mod finds
    every remaining single-character slot taken."""
    context = DeploymentContext(game, first_slot="\ud7fe")
    result = deploy_mods(three_mods.mods, context, log)
    assert result.deployed == [("C", "\ud7fe"), ("B", "\ud7ff")]
    assert result.skipped == ["A"]
    assert any("Too many mods installed" in line for line in log.lines(LogType.ERROR))
    # A's scripts are not registered because A was not copied.
    assert native_packages(context.engine_ini) == ["REDGame", "CScripts", "AScripts"]


def test_copy_failure_skips_mod(game, three_mods, log):
    shutil.rmtree(three_mods.get("B").path)
    context = DeploymentContext(game)
    result = deploy_mods(three_mods.mods, context, log)
    assert result.skipped == ["B"]
    assert result.deployed == [("C", "a"), ("A", "b")]
    assert any("Could not copy mod B" in line for line in log.lines(LogType.ERROR))


def test_unusable_deploy_dir_raises(game, three_mods, log):
    context = DeploymentContext(game)
    context.deploy_dir.parent.mkdir(parents=True, exist_ok=True)
    context.deploy_dir.write_text("not a folder", encoding="utf-8")
    with pytest.raises(CopyFailed):
        deploy_mods(three_mods.mods, context, log)
    assert any("Could not clear" in line for line in log.lines(LogType.WARN))


def test_missing_engine_ini_only_aborts_merge(tmp_path, three_mods, log):
    game = tmp_path / "bare_game"
    game.mkdir()
    context = DeploymentContext(game)
    result = deploy_mods(three_mods.mods, context, log)
    assert len(result.deployed) == 3
    assert not result.config_merged
    assert log.lines(LogType.ERROR)
    assert "Mods copied to game directory!" in log.log_text


def test_missing_script_section_aborts_merge(tmp_path, three_mods, log):
    game = make_game(tmp_path / "broken", engine_ini="[Core.System]\nx=1\n")
    result = deploy_mods(three_mods.mods, DeploymentContext(game), log)
    assert len(result.deployed) == 3
    assert not result.config_merged
    assert any("Engine.ScriptPackages" in line for line in log.lines(LogType.ERROR))


def test_progress_callback(game, three_mods):
    calls = []
    deploy_mods(three_mods.mods, DeploymentContext(game), progress_fn=lambda d, t: calls.append((d, t)))
    assert calls == [(1, 3), (2, 3), (3, 3)]


def test_launch_deploys_then_opens_steam(game, three_mods, log):
    opened = []

    def fake_open(url):
        opened.append(url)
        return True

    result = launch_game(three_mods.mods, DeploymentContext(game), log, open_fn=fake_open)
    assert len(result.deployed) == 3
    assert opened == ["steam://run/520440"]
