"""
CLI tests.
"""

import json

import pytest

from trackgate.cli import main, parse_args


def test_parse_replay_flags():
    args = parse_args(["replay", "walk.csv", "--mode", "trilha", "--min-step-meters", "3"])
    assert args.command == "replay"
    assert args.mode == "trilha"
    assert args.min_step_meters == 3.0
    assert args.max_accuracy_meters is None


def test_profile_prints_resolved_json(capsys):
    main(["profile", "corrida", "--max-accuracy-meters", "40"])
    out = json.loads(capsys.readouterr().out)
    assert out["max_implicit_speed_mps"] == 12.0
    assert out["min_speed_mps"] == 1.5
    assert out["max_accuracy_meters"] == 40.0


def test_profile_rejects_bad_window():
    with pytest.raises(SystemExit) as exc:
        main(["profile", "--smoothing-window-size", "0"])
    assert exc.value.code == 2


def test_replay_prints_summary(tmp_path, capsys, sample):
    path = tmp_path / "run.csv"
    rows = ["lat,lng,accuracy,timestamp_ms,speed_mps"]
    for i in range(8):
        s = sample(north_m=20 * i, t_s=5 * i, speed=4.0)
        rows.append(f"{s.lat},{s.lng},{s.accuracy},{s.timestamp_ms},{s.speed_mps}")
    path.write_text("\n".join(rows) + "\n", encoding="utf-8")

    main(["replay", str(path), "--mode", "running", "--decisions"])

    out = capsys.readouterr().out
    assert "first_point" in out
    assert "accepted" in out
    assert "distance (m)" in out


def test_replay_missing_file_exits():
    with pytest.raises(SystemExit) as exc:
        main(["replay", "does-not-exist.csv"])
    assert exc.value.code == 2
