import uuid

from json2db.utils import document_id_from_path, new_document_id


def test_new_ids_are_unique_uuid1():
    first, second = new_document_id(), new_document_id()

    assert first != second
    assert uuid.UUID(first).version == 1


def test_id_from_path():
    assert document_id_from_path("users/abc.json") == "abc"
    assert document_id_from_path("abc.backup.json") == "abc"
    assert document_id_from_path("nested/dir/plain") == "plain"
