# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

import logging
import threading
from datetime import timedelta

import mongomock
import pytest
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from app.db.exceptions import DuplicateUserError, StorageNotConnectedError
from app.db.models import NgoUpdate
from app.db.mongo_storage import MongoStorage, iexact
from app.db.storage import utcnow
from tests.test_helpers import ngo_data, opportunity_data, user_data


@pytest.mark.asyncio
async def test_connect_creates_indexes(mongo_storage: MongoStorage):
    users = mongo_storage.db["users"].index_information()
    assert users["username_1"]["unique"] is True
    assert users["email_1"]["unique"] is True

    assert "ngo_id_1" in mongo_storage.db["opportunities"].index_information()
    assert "volunteer_id_1" in mongo_storage.db["applications"].index_information()
    sessions = mongo_storage.db["sessions"].index_information()
    assert sessions["sid_1"]["unique"] is True
    assert "expires_at_1" in sessions


@pytest.mark.asyncio
async def test_operations_before_connect_raise():
    storage = MongoStorage(mongomock.MongoClient(), "volunteerconnect_unconnected")

    with pytest.raises(StorageNotConnectedError):
        await storage.get_user(1)
    with pytest.raises(StorageNotConnectedError):
        await storage.create_ngo(ngo_data())


@pytest.mark.asyncio
async def test_operations_after_close_raise(mongo_storage: MongoStorage):
    await mongo_storage.close()

    with pytest.raises(StorageNotConnectedError):
        await mongo_storage.list_ngos()


@pytest.mark.asyncio
async def test_connect_failure_is_logged_and_raised(mocker, caplog):
    client = mocker.MagicMock()
    client.__getitem__.side_effect = ServerSelectionTimeoutError("no servers")
    storage = MongoStorage(client, "volunteerconnect")

    with caplog.at_level(logging.ERROR, logger="app.db.mongo_storage"):
        with pytest.raises(ServerSelectionTimeoutError):
            await storage.connect()

    assert "MongoDB connection error" in caplog.text
    assert storage.db is None
    with pytest.raises(StorageNotConnectedError):
        await storage.count_users()


@pytest.mark.asyncio
async def test_ping_issues_admin_command(mocker):
    client = mocker.MagicMock()
    storage = MongoStorage(client, "volunteerconnect")

    assert await storage.ping() is True
    client.admin.command.assert_called_once_with("ping")


def test_from_uri_builds_timezone_aware_client(mocker):
    mock_client = mocker.patch("app.db.mongo_storage.MongoClient")

    storage = MongoStorage.from_uri("mongodb://db.example:27017", "volunteers")

    mock_client.assert_called_once_with("mongodb://db.example:27017", tz_aware=True)
    assert storage.client is mock_client.return_value
    assert storage.db_name == "volunteers"


@pytest.mark.asyncio
async def test_next_id_continues_from_highest_stored_id(mongo_storage: MongoStorage):
    mongo_storage.db["ngos"].insert_one({"id": 10, **ngo_data(name="Imported").model_dump()})

    created = await mongo_storage.create_ngo(ngo_data())

    assert created.id == 11


@pytest.mark.asyncio
async def test_internal_object_id_is_not_exposed(mongo_storage: MongoStorage):
    created = await mongo_storage.create_user(user_data("ann"))

    raw = mongo_storage.db["users"].find_one({"id": created.id})
    assert "_id" in raw
    assert "_id" not in created.model_dump()
    assert "_id" not in (await mongo_storage.get_user(created.id)).model_dump()


@pytest.mark.asyncio
async def test_unique_index_violation_becomes_duplicate_user_error(mongo_storage: MongoStorage, mocker):
    await mongo_storage.create_user(user_data("ann"))
    # Simulate a concurrent insert that slipped past the lookup
    mocker.patch.object(mongo_storage, "get_user_by_username", mocker.AsyncMock(return_value=None))

    with pytest.raises(DuplicateUserError) as exc_info:
        await mongo_storage.create_user(user_data("ann", email="second@example.com"))

    assert exc_info.value.field == "username"
    assert await mongo_storage.count_users() == 1


def test_iexact_escapes_pattern_characters():
    assert iexact("a.b*") == {"$regex": r"^a\.b\*$", "$options": "i"}


@pytest.mark.asyncio
async def test_documents_without_deleted_flag_are_listed(mongo_storage: MongoStorage):
    ngo = await mongo_storage.create_ngo(ngo_data())
    legacy = {"id": 1, "created_at": utcnow(), **opportunity_data(ngo.id, title="Legacy").model_dump()}
    mongo_storage.db["opportunities"].insert_one(legacy)

    listed = await mongo_storage.list_opportunities()

    assert [opportunity.title for opportunity in listed] == ["Legacy"]
    assert listed[0].deleted is False
    assert await mongo_storage.list_opportunities_by_ngo(ngo.id) == listed


@pytest.mark.asyncio
async def test_empty_update_returns_current_record(mongo_storage: MongoStorage):
    created = await mongo_storage.create_ngo(ngo_data())

    assert await mongo_storage.update_ngo(created.id, NgoUpdate()) == created
    assert await mongo_storage.update_ngo(99, NgoUpdate()) is None


@pytest.mark.asyncio
async def test_duplicate_field_comes_from_key_pattern(mongo_storage: MongoStorage, mocker):
    """
    A username that merely contains "email" must still be reported as a username clash.
    """
    username_clash = DuplicateKeyError(
        'E11000 duplicate key error collection: volunteerconnect.users index: username_1 '
        'dup key: { username: "email_fan" }',
        11000,
        {"keyPattern": {"username": 1}, "keyValue": {"username": "email_fan"}},
    )
    mocker.patch.object(mongo_storage, "_insert", side_effect=username_clash)

    with pytest.raises(DuplicateUserError) as exc_info:
        await mongo_storage.create_user(user_data("email_fan"))
    assert exc_info.value.field == "username"

    email_clash = DuplicateKeyError(
        "E11000 duplicate key error", 11000, {"keyPattern": {"email": 1}, "keyValue": {"email": "a@b.org"}}
    )
    mocker.patch.object(mongo_storage, "_insert", side_effect=email_clash)

    with pytest.raises(DuplicateUserError) as exc_info:
        await mongo_storage.create_user(user_data("bea", email="a@b.org"))
    assert exc_info.value.field == "email"
    assert exc_info.value.value == "a@b.org"


@pytest.mark.asyncio
async def test_create_session_returns_record_even_if_already_purged(mongo_storage: MongoStorage):
    mongo_storage.session_ttl = timedelta(seconds=-1)

    session = await mongo_storage.create_session(user_id=4)
    # Simulate the TTL monitor removing the expired document straight away
    mongo_storage.db["sessions"].delete_many({})

    assert session.user_id == 4
    assert session.expires_at.tzinfo is not None
    assert await mongo_storage.get_session(session.sid) is None


@pytest.mark.asyncio
async def test_driver_calls_run_off_the_event_loop(mocker):
    client = mocker.MagicMock()
    collection = client.__getitem__.return_value.__getitem__.return_value
    threads = []
    collection.find_one.side_effect = lambda *args, **kwargs: threads.append(threading.get_ident())
    collection.find.side_effect = lambda *args, **kwargs: threads.append(threading.get_ident()) or []
    storage = MongoStorage(client, "volunteerconnect")
    await storage.connect()

    assert await storage.get_user(1) is None
    assert await storage.list_ngos() == []

    assert len(threads) == 2
    assert threading.get_ident() not in threads
