import main


def test_missing_command_prints_help(capsys):
    assert main.main([]) == 1
    out = capsys.readouterr().out
    for command in main.COMMANDS:
        assert command in out


def test_unknown_command_prints_help(capsys):
    assert main.main(['diagonalSlide']) == 1
    assert "requires at least one argument" in capsys.readouterr().out


def test_horizontal_slide_prints_trajectory(capsys):
    assert main.main(['horizontalSlide', '--quiet']) == 0
    out = capsys.readouterr().out
    assert "Total cost:" in out
    assert "Hardstop Hit:" not in out


def test_horizontal_slide_debug_output(capsys):
    assert main.main(['horizontalSlide']) == 0
    assert "pos=" in capsys.readouterr().out


def test_auto_tune_small_run(capsys):
    code = main.main(['autoTuneHorizontalSlide', '--generations', '1', '--trials', '3', '--sims', '2',
                      '--seed', '4', '--workers', '1', '--quiet'])
    assert code == 0
    assert "Best values were found: kP" in capsys.readouterr().out
