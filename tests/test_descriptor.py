import pytest

from Mods.descriptor import (
    ModDescriptor,
    read_descriptor,
    validate_mod_name,
    write_descriptor,
)
from Mods.errors import (
    DescriptorMissingName,
    DescriptorMissingSection,
    DescriptorParseError,
    InvalidModName,
)


def test_write_then_read(tmp_path):
    mod_dir = tmp_path / "Foo"
    data = ModDescriptor(name="Foo", author="Me", version="1.2", category="Chars",
                         description="Does things", page="https://example.com/foo?a=1",
                         scripts=["FooScripts", "BarScripts"], path=mod_dir)
    write_descriptor(data)
    assert read_descriptor(mod_dir) == data


def test_read_real_world_file(tmp_path):
    (tmp_path / "mod.ini").write_text(
        "[Description]\nName=Foo\nAuthor=Someone\n\n"
        "[Scripts]\nScriptPackage=A\nScriptPackage=B\nScriptPackage=A\n",
        encoding="utf-8")
    data = read_descriptor(tmp_path)
    assert data.name == "Foo"
    assert data.author == "Someone"
    assert data.version == ""
    assert data.scripts == ["A", "B", "A"]
    assert data.path == tmp_path


def test_missing_scripts_section_is_empty(tmp_path):
    (tmp_path / "mod.ini").write_text("[Description]\nName=Foo\n", encoding="utf-8")
    assert read_descriptor(tmp_path).scripts == []


def test_missing_description_section(tmp_path):
    (tmp_path / "mod.ini").write_text("[Scripts]\nScriptPackage=A\n", encoding="utf-8")
    with pytest.raises(DescriptorMissingSection):
        read_descriptor(tmp_path)


@pytest.mark.parametrize("body", ["[Description]\nAuthor=x\n", "[Description]\nName=\n"])
def test_missing_or_empty_name(tmp_path, body):
    (tmp_path / "mod.ini").write_text(body, encoding="utf-8")
    with pytest.raises(DescriptorMissingName):
        read_descriptor(tmp_path)


def test_missing_file_is_parse_error(tmp_path):
    with pytest.raises(DescriptorParseError):
        read_descriptor(tmp_path / "nothing")


def test_write_is_full_overwrite(tmp_path):
    (tmp_path / "mod.ini").write_text(
        "[Description]\nName=Old\nExtra=1\n\n[Scripts]\nScriptPackage=Gone\n",
        encoding="utf-8")
    write_descriptor(ModDescriptor(name="New", path=tmp_path))
    text = (tmp_path / "mod.ini").read_text(encoding="utf-8")
    assert "Extra" not in text
    assert "[Scripts]" not in text
    assert read_descriptor(tmp_path).name == "New"


def test_multiline_values_are_flattened(tmp_path):
    write_descriptor(ModDescriptor(name="Foo", description="line one\nline two", path=tmp_path))
    assert read_descriptor(tmp_path).description == "line one line two"


@pytest.mark.parametrize("name", ["", "   ", "..", "a/b", "a\\b", "a=b", "[x", ";x", "#x"])
def test_invalid_names(name):
    with pytest.raises(InvalidModName):
        validate_mod_name(name)


def test_valid_name_is_stripped():
    assert validate_mod_name("  Sol Badguy Recolor ") == "Sol Badguy Recolor"
