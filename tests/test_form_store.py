from ledgerwise.store.forms import FormStore

INITIAL = {
    "totalAmount": "",
    "requesterName": "",
    "description": "",
    "participants": [{"name": "", "phoneNumber": ""}],
    "paymentStatus": {},
}


def test_restore_without_snapshot_returns_initial_copy():
    store = FormStore(None)
    restored = store.restore("split", INITIAL)
    assert restored == INITIAL
    restored["participants"].append({"name": "x"})
    assert len(INITIAL["participants"]) == 1


def test_stored_fields_override_defaults():
    store = FormStore(None)
    store.persist("split", {"totalAmount": "50"})
    restored = store.restore("split", INITIAL)
    assert restored["totalAmount"] == "50"
    assert restored["description"] == ""
    assert restored["participants"] == [{"name": "", "phoneNumber": ""}]


def test_last_write_wins():
    store = FormStore(None)
    store.persist("split", {"totalAmount": "1"})
    store.persist("split", {"totalAmount": "2"})
    assert store.restore("split", INITIAL)["totalAmount"] == "2"


def test_keys_are_independent():
    store = FormStore(None)
    store.persist("a", {"totalAmount": "1"})
    assert store.restore("b", INITIAL) == INITIAL


def test_clear_removes_snapshot():
    store = FormStore(None)
    store.persist("split", {"totalAmount": "50"})
    assert store.clear("split", INITIAL) == INITIAL
    assert store.restore("split", INITIAL) == INITIAL


def test_survives_reopen(tmp_path):
    path = str(tmp_path / "forms.json")
    FormStore(path).persist("split", {"totalAmount": "75", "paymentStatus": {"0": "paid"}})
    restored = FormStore(path).restore("split", INITIAL)
    assert restored["totalAmount"] == "75"
    assert restored["paymentStatus"] == {"0": "paid"}


def test_corrupt_file_is_absorbed(tmp_path):
    path = tmp_path / "forms.json"
    path.write_text("{not json")
    store = FormStore(str(path))
    assert store.restore("split", INITIAL) == INITIAL
    store.persist("split", {"totalAmount": "5"})
    store.clear("split", INITIAL)


def test_unusable_location_falls_back_to_memory_only(tmp_path):
    # A directory cannot be opened as the database file
    store = FormStore(str(tmp_path))
    assert store.table is None
    store.persist("split", {"totalAmount": "5"})
    assert store.restore("split", INITIAL) == INITIAL
    assert store.clear("split", INITIAL) == INITIAL


def test_non_object_snapshot_is_ignored():
    store = FormStore(None)
    store.persist("split", ["not", "a", "dict"])
    assert store.restore("split", INITIAL) == INITIAL


def test_restored_state_is_detached_from_store():
    store = FormStore(None)
    store.persist("split", {"participants": [{"name": "Alice", "phoneNumber": ""}]})
    store.restore("split", INITIAL)["participants"].append({"name": "Bob"})
    assert store.restore("split", INITIAL)["participants"] == [
        {"name": "Alice", "phoneNumber": ""}
    ]
