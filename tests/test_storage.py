import re

import pytest

from academy.core.errors import NotFound, StorageError
from academy.utils.storage import AVATARS, PAYMENT_SLIPS, ObjectStorage, build_object_key


def test_object_key_layout():
    key = build_object_key("user-1", "Receipt.JPEG")
    assert re.fullmatch(r"user-1/\d{13}\.jpeg", key)
    assert re.fullmatch(r"user-1/\d{13}", build_object_key("user-1", "noext"))
    assert re.fullmatch(r"user-1/\d{13}", build_object_key("user-1", "x./.."))
    assert re.fullmatch(r"user-1/\d{13}\.pdf", build_object_key("user-1", "slip.p d/f"))


def test_upload_does_not_overwrite_without_upsert(tmp_path):
    store = ObjectStorage(tmp_path)
    store.upload(AVATARS, "u/1.png", b"one")
    with pytest.raises(StorageError):
        store.upload(AVATARS, "u/1.png", b"two")
    store.upload(AVATARS, "u/1.png", b"two", upsert=True)
    assert store.open_path(AVATARS, "u/1.png").read_bytes() == b"two"


def test_delete_reports_missing(tmp_path):
    store = ObjectStorage(tmp_path)
    store.upload(PAYMENT_SLIPS, "u/1.pdf", b"pdf")
    assert store.delete(PAYMENT_SLIPS, "u/1.pdf") is True
    assert store.delete(PAYMENT_SLIPS, "u/1.pdf") is False


def test_keys_cannot_escape_bucket(tmp_path):
    store = ObjectStorage(tmp_path)
    with pytest.raises(NotFound):
        store.upload(AVATARS, "../secrets.txt", b"x")
    with pytest.raises(NotFound):
        store.upload("other", "a.txt", b"x")


def test_signed_url_round_trip(tmp_path):
    store = ObjectStorage(tmp_path, "http://files")
    url = store.create_signed_url(PAYMENT_SLIPS, "u/1.pdf", expires_in=60)
    match = re.fullmatch(r"http://files/storage/payment_slips/u/1\.pdf\?expires=(\d+)&signature=([0-9a-f]+)", url)
    assert match
    expires, signature = int(match.group(1)), match.group(2)
    assert store.verify_signature(PAYMENT_SLIPS, "u/1.pdf", expires, signature)
    assert not store.verify_signature(PAYMENT_SLIPS, "u/2.pdf", expires, signature)
    assert not store.verify_signature(PAYMENT_SLIPS, "u/1.pdf", expires + 1, signature)
