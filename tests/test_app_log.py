from datetime import datetime

from Utils.app_log import LaunchLog, LogType, format_line


def test_format_line():
    when = datetime(2024, 5, 1, 18, 30)
    assert format_line("hello", LogType.WARN, when) == "[WARN] [2024-05-01 18:30] hello"


def test_lines_filtered_by_level():
    log = LaunchLog()
    log("started")
    log("careful", LogType.WARN)
    log("broken", LogType.ERROR)
    assert len(log.lines()) == 3
    assert log.lines(LogType.ERROR)[0].endswith("broken")
    assert log.lines(LogType.WARN)[0].endswith("careful")


def test_appends_to_file(tmp_path):
    path = tmp_path / "logs" / "Launch.log"
    first = LaunchLog(path)
    first("one")
    first.close()
    second = LaunchLog(path)
    second("two")
    second.close()
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [line.split("] ", 2)[-1] for line in lines] == ["one", "two"]


def test_listeners_receive_lines_and_failures_are_ignored():
    log = LaunchLog()
    got = []

    def broken(line):
        raise RuntimeError("listener bug")

    log.add_listener(broken)
    log.add_listener(got.append)
    log("hi")
    log.remove_listener(got.append)
    log("bye")
    assert len(got) == 1
    assert got[0].startswith("[INFO]")
