import yaml

from datamanager_lib.data import DataManager, GlobalScope, PlayerScope
from datamanager_lib.storage.codec import ColumnType
from datamanager_lib.storage.file_backend import FileStorageBackend
from datamanager_lib.storage.schema import Column, Table, UpdateColumnEntry, define_table
from datamanager_lib.storage.serializer import JSONSerializer

PLAYER = "6f1c9a52-4c55-4c7e-9a9e-0a3b6a5b7d10"

NOTES = Table("notes", (
    Column("Ns", ColumnType.STRING_KEY, True),
    Column("Data", ColumnType.STRING_VALUE),
))


def test_rows_survive_a_new_backend_instance(tmp_path):
    b = FileStorageBackend(data_dir=tmp_path)
    dm = DataManager(b)
    dm.setup()
    assert dm.set(PlayerScope("quests", PLAYER), "done", ["q1", "q,2"])
    assert dm.add_group("guild", "quests")

    reopened = DataManager(FileStorageBackend(data_dir=tmp_path))
    reopened.setup()
    assert reopened.get_list(PlayerScope("quests", PLAYER), "done") == ["q1", "q,2"]
    assert reopened.get_groups("quests") == ["guild"]


def test_table_document_layout(tmp_path):
    b = FileStorageBackend(data_dir=tmp_path)
    define_table(b, NOTES)
    assert (tmp_path / "notes.yml").exists()
    b.upsert("notes", [
        UpdateColumnEntry("Ns", ColumnType.STRING_KEY, "a", True),
        UpdateColumnEntry("Data", ColumnType.STRING_VALUE, "1"),
    ])
    doc = yaml.safe_load((tmp_path / "notes.yml").read_text(encoding="utf-8"))
    assert doc == {"table": "notes", "columns": ["Ns", "Data"], "rows": [{"Ns": "a", "Data": "1"}]}
    assert not list(tmp_path.glob("*.tmp"))


def test_json_serializer_uses_json_files(tmp_path):
    b = FileStorageBackend(data_dir=tmp_path, serializer=JSONSerializer())
    dm = DataManager(b)
    dm.setup()
    dm.set(GlobalScope("quests"), "count", 3, ColumnType.INT)
    assert (tmp_path / "VersuchDrei_DataManager_Ints.json").exists()
    assert not list(tmp_path.glob("*.yml"))


def test_damaged_table_file_starts_empty_and_is_replaced(tmp_path):
    (tmp_path / "notes.yml").write_text("rows: [unterminated", encoding="utf-8")
    b = FileStorageBackend(data_dir=tmp_path)
    define_table(b, NOTES)
    assert b.lookup_all("notes", "Data", []) == []
    assert b.upsert("notes", [
        UpdateColumnEntry("Ns", ColumnType.STRING_KEY, "a", True),
        UpdateColumnEntry("Data", ColumnType.STRING_VALUE, "x"),
    ])
    doc = yaml.safe_load((tmp_path / "notes.yml").read_text(encoding="utf-8"))
    assert doc["rows"] == [{"Ns": "a", "Data": "x"}]


def test_rows_missing_key_columns_are_skipped(tmp_path):
    (tmp_path / "notes.yml").write_text(
        yaml.safe_dump({"table": "notes", "rows": [{"Data": "orphan"}, {"Ns": "b", "Data": "kept"}]}),
        encoding="utf-8",
    )
    b = FileStorageBackend(data_dir=tmp_path)
    define_table(b, NOTES)
    assert b.lookup_all("notes", "Data", []) == ["kept"]


def test_write_failure_returns_false_and_keeps_last_saved_state(tmp_path, monkeypatch):
    b = FileStorageBackend(data_dir=tmp_path)
    define_table(b, NOTES)
    b.upsert("notes", [
        UpdateColumnEntry("Ns", ColumnType.STRING_KEY, "a", True),
        UpdateColumnEntry("Data", ColumnType.STRING_VALUE, "saved"),
    ])

    def fail(name, rows):
        raise OSError("disk full")

    monkeypatch.setattr(b, "_write", fail)
    assert b.upsert("notes", [
        UpdateColumnEntry("Ns", ColumnType.STRING_KEY, "a", True),
        UpdateColumnEntry("Data", ColumnType.STRING_VALUE, "lost"),
    ]) is False
    assert b.lookup("notes", "Data", [UpdateColumnEntry("Ns", ColumnType.STRING_KEY, "a", True)]).value == "saved"


def test_table_file_without_a_mapping_starts_empty_and_is_replaced(tmp_path):
    (tmp_path / "notes.yml").write_text("- a\n- b\n", encoding="utf-8")
    b = FileStorageBackend(data_dir=tmp_path)
    define_table(b, NOTES)
    assert b.lookup_all("notes", "Data", []) == []
    assert b.upsert("notes", [
        UpdateColumnEntry("Ns", ColumnType.STRING_KEY, "a", True),
        UpdateColumnEntry("Data", ColumnType.STRING_VALUE, "x"),
    ])
    doc = yaml.safe_load((tmp_path / "notes.yml").read_text(encoding="utf-8"))
    assert doc["rows"] == [{"Ns": "a", "Data": "x"}]


def test_rows_that_are_not_a_list_start_empty(tmp_path):
    (tmp_path / "notes.yml").write_text("table: notes\nrows: oops\n", encoding="utf-8")
    b = FileStorageBackend(data_dir=tmp_path)
    define_table(b, NOTES)
    assert b.lookup_all("notes", "Data", []) == []


def test_rows_that_are_not_mappings_are_skipped(tmp_path):
    (tmp_path / "notes.yml").write_text(
        yaml.safe_dump({"table": "notes", "rows": ["junk", 3, None, {"Ns": "b", "Data": "kept"}]}),
        encoding="utf-8",
    )
    b = FileStorageBackend(data_dir=tmp_path)
    define_table(b, NOTES)
    assert b.lookup_all("notes", "Data", []) == ["kept"]


def test_yaml_documents_escape_line_separators(tmp_path):
    b = FileStorageBackend(data_dir=tmp_path)
    define_table(b, NOTES)
    text = "x\x85y\u2028z\u2029"
    assert b.upsert("notes", [
        UpdateColumnEntry("Ns", ColumnType.STRING_KEY, "a", True),
        UpdateColumnEntry("Data", ColumnType.STRING_VALUE, text),
    ])
    raw = (tmp_path / "notes.yml").read_bytes()
    assert raw.isascii()
    reopened = FileStorageBackend(data_dir=tmp_path)
    define_table(reopened, NOTES)
    assert reopened.lookup_all("notes", "Data", []) == [text]


def test_unencodable_text_returns_false_and_keeps_last_saved_state(tmp_path):
    b = FileStorageBackend(data_dir=tmp_path, serializer=JSONSerializer())
    define_table(b, NOTES)
    key = UpdateColumnEntry("Ns", ColumnType.STRING_KEY, "a", True)
    assert b.upsert("notes", [key, UpdateColumnEntry("Data", ColumnType.STRING_VALUE, "saved")])
    assert b.upsert("notes", [key, UpdateColumnEntry("Data", ColumnType.STRING_VALUE, "bad\ud800")]) is False
    assert b.lookup("notes", "Data", [key]).value == "saved"
