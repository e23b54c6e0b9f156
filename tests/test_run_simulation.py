from ptft_game.run_simulation import main


def test_runs_and_prints_population(capsys):
    assert main(["--L", "6", "--num_steps", "3", "--rounds", "10", "--quiet", "--tail", "2"]) == 0
    out = capsys.readouterr().out
    assert "Population after 3 generations" in out
    assert "PTFT" in out
    assert "Cooperated" in out


def test_reports_bad_configuration(capsys):
    assert main(["--L", "6", "--num_steps", "1", "--radius", "-1", "--quiet"]) == 1
    assert "Error:" in capsys.readouterr().out


def test_without_ptft(capsys):
    assert main(["--L", "5", "--num_steps", "1", "--no_ptft", "--interaction", "pairwise", "--quiet"]) == 0
