import json

from analysis_reports.cli import build_parser, run_cli

FAST = ["--trials", "3", "--max-spares", "1", "--max-repairmen", "1", "--horizon", "20"]


def test_factory_command(capsys):
    assert run_cli(["factory"] + FAST) == 0
    assert "OPTIMAL FACTORY CONFIGURATION" in capsys.readouterr().out


def test_factory_config_file(tmp_path, capsys):
    cfg = tmp_path / "factory.json"
    cfg.write_text(json.dumps({"num_operating": 2, "mean_life": 3.0}))
    assert run_cli(["factory", "--config", str(cfg)] + FAST) == 0
    assert "Machines operating:   2" in capsys.readouterr().out


def test_factory_over_budget_exits_2():
    assert run_cli(["factory", "--budget", "10"] + FAST) == 2


def test_factory_bad_config_key(tmp_path):
    cfg = tmp_path / "factory.json"
    cfg.write_text(json.dumps({"machines": 2}))
    assert run_cli(["factory", "--config", str(cfg)] + FAST) == 2


def test_rental_command_writes_outputs(rentals, tmp_path, capsys):
    src = tmp_path / "rentals.csv"
    rentals.to_csv(src, index=False)
    out = tmp_path / "out"
    assert run_cli(["--out", str(out), "rental", str(src),
                    "--features", "bedrooms", "bathrooms"]) == 0
    assert (out / "describe.csv").exists()
    assert (out / "models.csv").exists()
    assert "RENTAL PRICE EXPLORATION" in capsys.readouterr().out


def test_sports_command(players, tmp_path, capsys):
    src = tmp_path / "players.csv"
    players.to_csv(src, index=False)
    assert run_cli(["sports", str(src), "--stats", "points", "assists"]) == 0
    assert "SPORTS STATISTICS EXPLORATION" in capsys.readouterr().out


def test_missing_csv_exits_2(tmp_path):
    assert run_cli(["sports", str(tmp_path / "missing.csv")]) == 2


def test_unknown_args_are_ignored():
    args, unknown = build_parser().parse_known_args(["factory", "-f", "kernel.json"])
    assert args.command == "factory"
    assert unknown == ["-f", "kernel.json"]


def test_flags_override_config_file(tmp_path, capsys):
    cfg = tmp_path / "factory.json"
    cfg.write_text(json.dumps({"num_operating": 2, "budget": 900.0}))
    assert run_cli(["factory", "--config", str(cfg), "--machines", "4"] + FAST) == 0
    out = capsys.readouterr().out
    assert "Machines operating:   4" in out
    assert "(budget $900.00)" in out


def test_config_value_of_wrong_type_exits_2(tmp_path):
    cfg = tmp_path / "factory.json"
    cfg.write_text(json.dumps({"mean_life": "10"}))
    assert run_cli(["factory", "--config", str(cfg)] + FAST) == 2


def test_rental_raw_column_name_flag(rentals, tmp_path):
    src = tmp_path / "rentals.csv"
    rentals.to_csv(src, index=False)
    assert run_cli(["rental", str(src), "--price", "Price", "--group", "Neighbourhood"]) == 0
