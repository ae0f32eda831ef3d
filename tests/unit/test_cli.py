import sqlite3

import yaml

import datamanager


def test_print_template(capsys):
    assert datamanager.main(["--print-template"]) == 0
    out = capsys.readouterr().out
    assert yaml.safe_load(out)["backend"] == "file"


def test_setup_creates_tables(tmp_path, capsys):
    db = tmp_path / "dm.sqlite"
    cfg = tmp_path / "datamanager.yml"
    cfg.write_text(yaml.safe_dump({"backend": "sqlite", "sqlite_path": str(db)}), encoding="utf-8")
    assert datamanager.main(["--config", str(cfg), "--setup"]) == 0
    assert "sqlite" in capsys.readouterr().out
    conn = sqlite3.connect(str(db))
    try:
        count = conn.execute("SELECT COUNT(*) FROM sqlite_master WHERE type = 'table'").fetchone()[0]
    finally:
        conn.close()
    assert count == 30


def test_invalid_config_exit_code(tmp_path, capsys):
    cfg = tmp_path / "datamanager.yml"
    cfg.write_text("backend: postgres\n", encoding="utf-8")
    assert datamanager.main(["--config", str(cfg), "--setup"]) == 2
    assert "Invalid configuration" in capsys.readouterr().err


def test_no_action_prints_help(tmp_path, capsys):
    assert datamanager.main(["--config", str(tmp_path / "missing.yml")]) == 1
    assert "--serve" in capsys.readouterr().out
