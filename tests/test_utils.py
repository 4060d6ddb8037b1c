from opponent import utils


def test_color_text_wraps_ansi() -> None:
    text = utils.color_text("hello", "32")
    assert text.startswith("\033[32m")
    assert text.endswith("\033[0m")


def test_console_logger_prints_debug_lines(capsys) -> None:
    utils.console_logger()("Advanced (White): played e4")
    out = capsys.readouterr().out
    assert "DEBUG" in out
    assert "played e4" in out


def test_quiet_console_logger_prints_nothing(capsys) -> None:
    utils.console_logger(quiet=True)("ignored")
    assert capsys.readouterr().out == ""
