from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect

from app.features.privacy_reminder.repository import MenteeRepository, MenteeRepositoryError
from app.features.privacy_reminder.repository.mentee_repository import (
    document_to_record,
    record_to_update,
)
from tests.fakes import make_record


def _collection_with_documents(documents):
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=documents)
    collection = MagicMock()
    collection.find = MagicMock(return_value=cursor)
    return collection


def test_document_to_record_reads_owned_fields():
    oid = ObjectId()
    verified = datetime(2024, 3, 1, 9, 30, tzinfo=UTC)

    record = document_to_record(
        {
            "_id": oid,
            "email": "parent@example.com",
            "firebase_uid": "abc",
            "verified_date": verified,
            "reminder_sent": True,
            "name": "ignored",
        }
    )

    assert record.id == str(oid)
    assert record.verified_date == verified
    assert record.reminder_sent is True


def test_document_to_record_defaults_missing_flags():
    record = document_to_record({"_id": ObjectId(), "email": "a@example.com", "firebase_uid": "u"})

    assert record.verified_date is None
    assert record.reminder_sent is False


def test_document_to_record_accepts_epoch_millis_and_naive_dates():
    from_millis = document_to_record(
        {"_id": 1, "email": "a@example.com", "firebase_uid": "u", "verified_date": 1709283600000}
    )
    from_naive = document_to_record(
        {
            "_id": 2,
            "email": "b@example.com",
            "firebase_uid": "v",
            "verified_date": datetime(2024, 3, 1, 9, 0),
        }
    )

    assert from_millis.verified_date == datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
    assert from_naive.verified_date == datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


def test_document_without_identity_is_unusable():
    assert document_to_record({"_id": ObjectId(), "email": "a@example.com"}) is None
    assert document_to_record({"_id": ObjectId(), "firebase_uid": "u"}) is None


def test_update_only_sets_owned_fields():
    unverified = make_record("m1")
    verified = make_record("m2", verified_date=datetime(2024, 3, 1, tzinfo=UTC), reminder_sent=True)

    assert record_to_update(unverified) == {"$set": {"reminder_sent": False}}
    assert record_to_update(verified) == {
        "$set": {"reminder_sent": True, "verified_date": datetime(2024, 3, 1, tzinfo=UTC)}
    }


@pytest.mark.asyncio
async def test_list_all_skips_unusable_documents():
    good = {"_id": ObjectId(), "email": "a@example.com", "firebase_uid": "u"}
    no_uid = {"_id": ObjectId(), "email": "b@example.com"}
    bad_date = {"_id": ObjectId(), "email": "c@example.com", "firebase_uid": "w", "verified_date": "soon"}
    repository = MenteeRepository(_collection_with_documents([good, no_uid, bad_date]))

    records = await repository.list_all()

    assert [r.id for r in records] == [str(good["_id"])]


@pytest.mark.asyncio
async def test_list_all_wraps_driver_errors():
    collection = MagicMock()
    cursor = MagicMock()
    cursor.to_list = AsyncMock(side_effect=AutoReconnect("gone"))
    collection.find = MagicMock(return_value=cursor)
    repository = MenteeRepository(collection)

    with pytest.raises(MenteeRepositoryError) as exc_info:
        await repository.list_all()

    assert exc_info.value.operation == "list_all"


@pytest.mark.asyncio
async def test_save_targets_object_id():
    oid = ObjectId()
    collection = MagicMock()
    collection.update_one = AsyncMock(return_value=MagicMock(matched_count=1))
    repository = MenteeRepository(collection)

    saved = await repository.save(make_record(str(oid), reminder_sent=True))

    assert saved is True
    collection.update_one.assert_awaited_once_with(
        {"_id": oid}, {"$set": {"reminder_sent": True}}
    )


@pytest.mark.asyncio
async def test_save_reports_missing_document():
    collection = MagicMock()
    collection.update_one = AsyncMock(return_value=MagicMock(matched_count=0))
    repository = MenteeRepository(collection)

    assert await repository.save(make_record("legacy-id")) is False
    collection.update_one.assert_awaited_once_with(
        {"_id": "legacy-id"}, {"$set": {"reminder_sent": False}}
    )


@pytest.mark.asyncio
async def test_save_wraps_driver_errors():
    collection = MagicMock()
    collection.update_one = AsyncMock(side_effect=AutoReconnect("gone"))
    repository = MenteeRepository(collection)

    with pytest.raises(MenteeRepositoryError) as exc_info:
        await repository.save(make_record("m1"))

    assert exc_info.value.operation == "save"
