from Mods.registry import Registry
from Utils.app_log import LogType

from conftest import write_registry


def test_missing_file_is_empty_with_warning(tmp_path, log):
    reg = Registry.load(tmp_path / "config.ini", log)
    assert len(reg) == 0
    assert any("No mods found" in line for line in log.lines(LogType.WARN))


def test_entries_keep_file_order(tmp_path, log):
    path = tmp_path / "config.ini"
    write_registry(path, [("Top", "True"), ("Mid", "False"), ("Bottom", "yes")])
    reg = Registry.load(path, log)
    assert reg.names() == ["Top", "Mid", "Bottom"]
    assert [e.enabled for e in reg.entries()] == [True, False, False]


def test_duplicate_keys_collapse_to_first(tmp_path, log):
    path = tmp_path / "config.ini"
    write_registry(path, [("A", "True"), ("B", "True"), ("A", "False")])
    reg = Registry.load(path, log)
    assert reg.names() == ["A", "B"]
    assert reg.get("A").enabled
    assert reg.dirty


def test_corrupt_file_is_empty_and_logged(tmp_path, log):
    path = tmp_path / "config.ini"
    path.write_text("[Mods\ngarbage\n", encoding="utf-8")
    reg = Registry.load(path, log)
    assert len(reg) == 0
    assert reg.dirty
    assert log.lines(LogType.ERROR)


def test_rewrite_replaces_mods_and_keeps_general(tmp_path, log):
    path = tmp_path / "config.ini"
    write_registry(path, [("Old", "True")])
    reg = Registry.load(path, log)
    reg.rewrite([("B", True), ("A", False)])

    again = Registry.load(path, log)
    assert again.names() == ["B", "A"]
    assert again.get_setting("ConsoleVisible") == "True"
    text = path.read_text(encoding="utf-8")
    assert "Old" not in text
    assert text.index("[General]") < text.index("[Mods]")


def test_replace_all_keeps_first_of_duplicates(tmp_path):
    reg = Registry(tmp_path / "config.ini")
    reg.replace_all([("A", True), ("B", False), ("A", False)])
    assert reg.names() == ["A", "B"]
    assert reg.get("A").enabled
    assert reg.remove("B") is True
    assert reg.remove("B") is False


def test_settings_roundtrip(tmp_path):
    path = tmp_path / "config.ini"
    reg = Registry(path)
    reg.set_setting("GamePath", "/games/xrd")
    reg.save()
    assert Registry.load(path).get_setting("GamePath") == "/games/xrd"
    assert Registry.load(path).get_setting("Missing", "x") == "x"
