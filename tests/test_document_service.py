import asyncio
import os
import time

import pytest

from cadastro.core.exceptions import DocumentStorageError
from cadastro.services.document_service import LocalDocumentStore, DocumentValidator, extension_for
from cadastro.services.maintenance_service import run_maintenance_once, maintenance_loop
from cadastro.services.session_service import SessionStore

DAY = 24 * 3600


@pytest.fixture
def store(tmp_path):
    return LocalDocumentStore(str(tmp_path / "uploads"))


async def test_store_and_delete(store):
    reference = await store.store(b"image-bytes", ".jpg")

    assert reference.endswith(".jpg")
    assert store.path_for(reference).read_bytes() == b"image-bytes"

    assert await store.delete(reference)
    assert not store.path_for(reference).exists()


async def test_delete_missing_file_is_tolerated(store):
    store.ensure_dir()
    assert await store.delete("gone.jpg") is False


def test_reference_cannot_escape_base_dir(store):
    with pytest.raises(DocumentStorageError):
        store.path_for("../secrets.txt")


async def test_sweep_deletes_only_old_files(store):
    old = await store.store(b"old", ".png")
    new = await store.store(b"new", ".png")
    stale = time.time() - DAY - 60
    os.utime(store.path_for(old), (stale, stale))

    assert await store.sweep(DAY) == 1
    assert not store.path_for(old).exists()
    assert store.path_for(new).exists()


async def test_sweep_without_directory(store):
    assert await store.sweep(DAY) == 0


async def test_maintenance_pass(store):
    reference = await store.store(b"old", ".pdf")
    stale = time.time() - DAY - 60
    os.utime(store.path_for(reference), (stale, stale))

    result = await run_maintenance_once(store, SessionStore(), DAY)
    assert result == {"documents_deleted": 1, "sessions_purged": 0}


async def test_validator_approves():
    assert await DocumentValidator(delay_seconds=0).validate("doc.jpg") is True


@pytest.mark.parametrize("content_type, expected", [
    ("image/jpeg", ".jpg"),
    ("image/png", ".png"),
    ("application/pdf", ".pdf"),
    (None, ".bin"),
    ("application/x-unknown-thing", ".bin"),
])
def test_extension_for(content_type, expected):
    assert extension_for(content_type) == expected


class FlakyStore:
    """Fails every sweep; cancels the loop on the third attempt."""

    def __init__(self):
        self.calls = 0

    async def sweep(self, max_age_seconds):
        self.calls += 1
        if self.calls >= 3:
            raise asyncio.CancelledError()
        raise RuntimeError("disk on fire")


async def test_maintenance_loop_survives_unexpected_errors():
    flaky = FlakyStore()
    with pytest.raises(asyncio.CancelledError):
        await maintenance_loop(flaky, SessionStore(), DAY, interval_seconds=0)
    assert flaky.calls == 3
