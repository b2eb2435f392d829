"""
Sample file reader tests.
"""

import json

import pytest

from trackgate.parsers.samples import iter_samples_csv, load_samples


def test_load_csv_with_aliases(tmp_path):
    path = tmp_path / "walk.csv"
    path.write_text(
        "timestamp,lat,lon,accuracy,speed\n"
        "1700000000000,-23.5505,-46.6333,8.0,1.2\n"
        "1700000002000,-23.5506,-46.6333,9.5,\n",
        encoding="utf-8",
    )

    samples, summary = load_samples(path)

    assert summary.rows_total == 2
    assert summary.rows_skipped == 0
    assert samples[0].timestamp_ms == 1700000000000
    assert samples[0].lng == -46.6333
    assert samples[0].speed_mps == 1.2
    assert samples[1].speed_mps is None


def test_csv_bad_rows_are_skipped(tmp_path):
    path = tmp_path / "noisy.csv"
    path.write_text(
        "lat,lng,accuracy,timestamp_ms\n"
        "-23.5505,-46.6333,8.0,1700000000000\n"
        "not-a-number,-46.6333,8.0,1700000001000\n"
        "-23.5505,-46.6333,-3,1700000002000\n"
        "-23.5507,-46.6333,8.0,1700000003000\n",
        encoding="utf-8",
    )

    samples, summary = load_samples(path)

    assert len(samples) == 2
    assert summary.rows_total == 4
    assert summary.rows_skipped == 2


def test_csv_missing_column_raises(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("lat,lng,timestamp_ms\n1,2,3\n", encoding="utf-8")

    with pytest.raises(KeyError, match="accuracy"):
        list(iter_samples_csv(path))


def test_load_jsonl(tmp_path):
    path = tmp_path / "ride.jsonl"
    rows = [
        {"lat": 1.0, "lng": 2.0, "accuracy": 5, "timestamp_ms": 1000, "speed_mps": 4.0},
        {"lat": 1.0001, "lon": 2.0, "accuracy": 5, "timestamp": 3000},
    ]
    path.write_text(
        "\n".join(json.dumps(r) for r in rows) + "\n\n{broken\n",
        encoding="utf-8",
    )

    samples, summary = load_samples(path)

    assert [s.timestamp_ms for s in samples] == [1000, 3000]
    assert samples[0].speed_mps == 4.0
    assert samples[1].speed_mps is None
    assert summary.rows_total == 3
    assert summary.rows_skipped == 1


def test_unsupported_suffix(tmp_path):
    path = tmp_path / "track.gpx"
    path.write_text("<gpx/>", encoding="utf-8")
    with pytest.raises(ValueError, match="unsupported"):
        load_samples(path)
