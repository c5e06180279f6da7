import pytest

from Utils.ini_file import IniDocument, IniParseError


def test_repeated_keys_are_kept_in_order():
    doc = IniDocument.loads("[S]\nK=a\nOther=1\nK=b\n")
    assert doc.section("S").get_all("K") == ["a", "b"]
    assert doc.section("S").get("K") == "a"


def test_value_split_on_first_equals():
    doc = IniDocument.loads("[S]\nPage = https://x.org/?a=b\n")
    assert doc.section("S").get("Page") == "https://x.org/?a=b"


def test_roundtrip_preserves_comments_and_blank_lines():
    text = "; header\n[A]\nx=1\n\n# note\n[B]\ny=2\n"
    assert IniDocument.loads(text).dumps() == text


def test_crlf_and_bom_are_preserved():
    text = "\ufeff[A]\r\nx=1\r\n"
    doc = IniDocument.loads(text)
    doc.section("A").append("y", "2")
    assert doc.dumps() == "\ufeff[A]\r\nx=1\r\ny=2\r\n"


def test_append_goes_before_trailing_blank_lines():
    doc = IniDocument.loads("[A]\nx=1\n\n[B]\n")
    doc.section("A").append("x", "2")
    assert doc.dumps() == "[A]\nx=1\nx=2\n\n[B]\n"


def test_set_replaces_first_and_drops_rest():
    doc = IniDocument.loads("[A]\nk=1\nj=0\nk=2\n")
    doc.section("A").set("k", "3")
    assert doc.section("A").items() == [("k", "3"), ("j", "0")]


def test_remove_all_returns_values():
    doc = IniDocument.loads("[A]\n+P=a\nQ=1\n+P=b\n")
    assert doc.section("A").remove_all("+P") == ["a", "b"]
    assert doc.section("A").items() == [("Q", "1")]


def test_replace_section_keeps_position():
    doc = IniDocument.loads("[A]\nx=1\n\n[Mods]\nold=True\n\n[C]\nz=3\n")
    doc.replace_section("Mods", [("new", "False")])
    assert doc.sections() == ["A", "Mods", "C"]
    assert doc.dumps() == "[A]\nx=1\n\n[Mods]\nnew=False\n\n[C]\nz=3\n"


def test_add_section_separates_with_blank_line():
    doc = IniDocument.loads("[A]\nx=1\n")
    doc.add_section("B").append("y", "2")
    assert doc.dumps() == "[A]\nx=1\n\n[B]\ny=2\n"


@pytest.mark.parametrize("text", ["[Broken\nx=1\n", "[A]\nnot a pair\n"])
def test_invalid_lines_raise(text):
    with pytest.raises(IniParseError):
        IniDocument.loads(text)


def test_write_creates_parent_dirs(tmp_path):
    doc = IniDocument.loads("[A]\nx=1\n")
    target = tmp_path / "deep" / "dir" / "file.ini"
    doc.write(target)
    assert IniDocument.load(target).section("A").get("x") == "1"
