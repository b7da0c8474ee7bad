from __future__ import annotations

import builtins

import pytest

from errors import ValidationError
from main import ConsoleApp, evaluate_index, make_random_store, print_summary
from settings import IndexSettings


def feed(monkeypatch, answers):
    it = iter(answers)
    monkeypatch.setattr(builtins, "input", lambda prompt="": next(it))


def test_random_store_is_unique():
    store = make_random_store(500, seed=1)
    points = [e.point for e in store.entries]
    assert len(points) == len(set(points))
    assert store.criteria_names == ("year", "height", "department")


def test_benchmark_counts_agree(capsys):
    settings = IndexSettings(bench_points=300, bench_repeats=1)
    summary = evaluate_index(settings)

    assert set(summary) == {"narrow", "wide", "empty"}
    assert summary["empty"]["count"] == 0
    assert "Mismatch" not in capsys.readouterr().out

    print_summary(summary)
    assert "RANGE SEARCH PERFORMANCE" in capsys.readouterr().out


def test_console_session(monkeypatch, capsys, tmp_path):
    settings = IndexSettings(data_dir=tmp_path)
    (tmp_path / "sample.txt").write_text(
        "3\nyear\nheight\ndepartment\n2\n1 164.63 chimie\n3 182 informatique\n", encoding="utf-8"
    )
    app = ConsoleApp(settings)

    feed(monkeypatch, [
        "1", "",                                        # load sample.txt
        "3", "4", "176.33", "physique",                 # insert
        "3", "4", "176.33", "biologie",                 # duplicate -> error, loop goes on
        "5", "1",                                       # min height
        "7", "3", "4", "170", "180",                    # range search
        "9", "SELECT department FROM P WHERE year = 3",  # query
        "2", "saved.txt",                               # save
        "0",
    ])
    app.run()
    out = capsys.readouterr().out

    assert "[INFO] Sample loaded." in out
    assert "[ERROR]" in out
    assert "Minimum for height: 164.63" in out
    assert "(4.0, 176.33) ['physique']" in out
    assert "{'department': 'informatique'}" in out
    assert (tmp_path / "saved.txt").exists()
    assert len(app.index) == 3


def test_console_build_sample(monkeypatch, capsys, tmp_path):
    app = ConsoleApp(IndexSettings(data_dir=tmp_path))
    feed(monkeypatch, [
        "8", "3", "year", "height", "department",
        "2", "1", "160", "chimie", "2", "170", "math",
        "built.txt",
        "6", "0",                                       # max year
        "0",
    ])
    app.run()
    out = capsys.readouterr().out

    assert "[INFO] Sample built and loaded." in out
    assert "Maximum for year: 2.0" in out
    assert (tmp_path / "built.txt").read_text(encoding="utf-8").startswith("3\nyear\nheight\ndepartment\n2\n")
    assert len(app.index) == 2


def test_console_reports_empty_state(monkeypatch, capsys, tmp_path):
    app = ConsoleApp(IndexSettings(data_dir=tmp_path))
    feed(monkeypatch, ["4", "5", "2", "x.txt", "42", "0"])
    app.run()
    out = capsys.readouterr().out

    assert out.count("[ERROR]") == 3
    assert "Invalid option." in out
    assert not (tmp_path / "x.txt").exists()


def test_console_survives_non_utf8_file(monkeypatch, capsys, tmp_path):
    (tmp_path / "bad.txt").write_bytes(b"2\nx\ny\n1\n1 2\xff\n")
    app = ConsoleApp(IndexSettings(data_dir=tmp_path))
    feed(monkeypatch, ["1", "bad.txt", "99", "0"])
    app.run()
    out = capsys.readouterr().out

    assert "[ERROR]" in out and "not valid UTF-8" in out
    assert "Invalid option." in out
    assert app.index.is_empty()


def test_console_blank_save_name(monkeypatch, capsys, tmp_path):
    (tmp_path / "sample.txt").write_text("2\nx\ny\n1\n1 2\n", encoding="utf-8")
    app = ConsoleApp(IndexSettings(data_dir=tmp_path))
    feed(monkeypatch, ["1", "", "2", "   ", "0"])
    app.run()
    out = capsys.readouterr().out

    assert "[INFO] Sample loaded." in out
    assert "[ERROR] File name must not be empty" in out
    assert sorted(p.name for p in tmp_path.iterdir()) == ["sample.txt"]


def test_resolve_uses_data_dir_only(monkeypatch, tmp_path):
    data_dir = tmp_path / "data"
    monkeypatch.chdir(tmp_path)
    (tmp_path / "x.txt").write_text("cwd copy", encoding="utf-8")
    settings = IndexSettings(data_dir=data_dir)

    assert settings.resolve("x.txt") == data_dir / "x.txt"
    assert settings.resolve(str(tmp_path / "x.txt")) == tmp_path / "x.txt"
    with pytest.raises(ValidationError):
        settings.resolve("")


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__]))
