import threading

import pytest

from systematic_reasoning.modules.core.errors import StorageCorrupt
from systematic_reasoning.modules.ledger.documents import (
    DocumentStore,
    FileDocumentStore,
    MemoryDocumentStore,
)
from systematic_reasoning.modules.ledger.keying import namespace_of


def test_file_store_roundtrips_documents(tmp_path):
    store = FileDocumentStore(tmp_path)
    ns = namespace_of("/proj")
    store.save(ns, "tickets", [{"id": "a"}])
    assert store.load(ns, "tickets") == [{"id": "a"}]
    assert store.path(ns, "tickets") == tmp_path / "workspaces" / ns / "tickets.json"
    # no temp files left behind
    assert sorted(p.name for p in store.namespace_dir(ns).iterdir()) == ["tickets.json"]


def test_file_store_missing_and_blank_documents_load_as_none(tmp_path):
    store = FileDocumentStore(tmp_path)
    ns = namespace_of("/proj")
    assert store.load(ns, "reflections") is None

    path = store.path(ns, "reflections")
    path.parent.mkdir(parents=True)
    path.write_text("  \n\t")
    assert store.load(ns, "reflections") is None


def test_file_store_raises_on_unparsable_document(tmp_path):
    store = FileDocumentStore(tmp_path)
    ns = namespace_of("/proj")
    path = store.path(ns, "tickets")
    path.parent.mkdir(parents=True)
    path.write_text("[{broken")

    with pytest.raises(StorageCorrupt) as excinfo:
        store.load(ns, "tickets")
    assert str(path) in excinfo.value.message
    # left untouched for the operator
    assert path.read_text() == "[{broken"


def test_ensure_namespace_records_workspace_once(tmp_path):
    store = FileDocumentStore(tmp_path)
    ns = namespace_of("/proj")
    assert store.namespaces() == []

    store.ensure_namespace(ns, "/proj")
    store.ensure_namespace(ns, "/other")
    assert store.namespaces() == [ns]
    assert store.workspace_for(ns) == "/proj"


def test_namespaces_ignores_foreign_directories(tmp_path):
    store = FileDocumentStore(tmp_path)
    (tmp_path / "workspaces" / "not-a-namespace").mkdir(parents=True)
    assert store.namespaces() == []


def test_file_lock_serializes_threads(tmp_path):
    store = FileDocumentStore(tmp_path)
    ns = namespace_of("/proj")
    store.save(ns, "counter", {"n": 0})

    def bump():
        for _ in range(20):
            with store.lock(ns):
                doc = store.load(ns, "counter")
                doc["n"] += 1
                store.save(ns, "counter", doc)

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.load(ns, "counter") == {"n": 80}


def test_memory_store_copies_documents():
    store = MemoryDocumentStore()
    doc = {"reflections": []}
    store.save("ns", "reflections", doc)
    doc["reflections"].append("mutated")
    assert store.load("ns", "reflections") == {"reflections": []}
    assert store.load("ns", "tickets") is None


def test_both_stores_satisfy_protocol(tmp_path):
    assert isinstance(FileDocumentStore(tmp_path), DocumentStore)
    assert isinstance(MemoryDocumentStore(), DocumentStore)


def test_file_store_raises_on_non_utf8_document(tmp_path):
    store = FileDocumentStore(tmp_path)
    ns = namespace_of("/proj")
    path = store.path(ns, "reflections")
    path.parent.mkdir(parents=True)
    path.write_bytes(b'{"reflections": [\xff]}')

    with pytest.raises(StorageCorrupt) as excinfo:
        store.load(ns, "reflections")
    assert str(path) in excinfo.value.message


def test_workspace_for_tolerates_non_utf8_info(tmp_path):
    store = FileDocumentStore(tmp_path)
    ns = namespace_of("/proj")
    path = store.path(ns, "workspace")
    path.parent.mkdir(parents=True)
    path.write_bytes(b"\xff\xfe")
    assert store.workspace_for(ns) is None
