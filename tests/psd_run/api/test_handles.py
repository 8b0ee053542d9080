import os

import pytest

from psd_run.api.document import Document
from psd_run.api.handles import Handle, HandleTable
from psd_run.errors import HandleTableExhausted, InvalidHandle


def test_handle_token():
    handle = Handle(3, 2)
    assert handle.token == (2 << 16) | 3
    assert int(handle) == handle.token
    assert Handle.from_token(handle.token) == handle


def test_allocate_and_lookup():
    table = HandleTable()
    document = Document(1, 1)
    handle = table.allocate(document)
    assert handle.slot == 1
    assert table.lookup(handle) is document
    assert table.lookup(handle.token) is document
    assert handle in table
    assert len(table) == 1


def test_table_exhaustion():
    table = HandleTable(capacity=16)
    handles = [table.allocate(Document(1, 1)) for _ in range(15)]
    assert sorted(handle.slot for handle in handles) == list(range(1, 16))
    with pytest.raises(HandleTableExhausted):
        table.allocate(Document(1, 1))

    table.release(handles[4])
    assert table.allocate(Document(1, 1)).slot == 5


def test_stale_handle():
    table = HandleTable()
    first = Document(1, 1)
    handle = table.allocate(first)
    assert table.release(handle)

    second = Document(2, 2)
    reused = table.allocate(second)
    assert reused.slot == handle.slot
    assert reused != handle
    with pytest.raises(InvalidHandle):
        table.lookup(handle)
    assert not table.release(handle)
    assert table.lookup(reused) is second


@pytest.mark.parametrize("handle", [0, -1, 16, 1 << 40, True, "abc", None, Handle(0)])
def test_invalid_handles(handle):
    table = HandleTable()
    table.allocate(Document(1, 1))
    with pytest.raises(InvalidHandle):
        table.lookup(handle)
    assert not table.release(handle)
    assert handle not in table


def test_release_closes_document(tmp_path):
    path = tmp_path / "staged.psd"
    path.write_bytes(b"data")
    document = Document(1, 1)
    document.staged_path = str(path)

    table = HandleTable()
    handle = table.allocate(document)
    table.release(handle)
    assert not os.path.exists(path)
    with pytest.raises(InvalidHandle):
        table.lookup(handle)


def test_release_all():
    table = HandleTable(capacity=4)
    for _ in range(3):
        table.allocate(Document(1, 1))
    table.release_all()
    assert len(table) == 0
    assert list(table.handles()) == []


@pytest.mark.parametrize("capacity", [0, 1, (1 << 16) + 1])
def test_invalid_capacity(capacity):
    with pytest.raises(ValueError):
        HandleTable(capacity)
