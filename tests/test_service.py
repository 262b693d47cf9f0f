from datetime import datetime

import pytest

from consistency import ConsistencyState
from errors import ConflictError, InvalidInputError, InvalidUsernameError, NotFoundError
from models import Name, User
from schemas import UserDTO


def _create(service, username="jdoe", **fields):
    fields = fields or {"firstName": "Jane", "lastName": "Doe"}
    return service.create(username, None, UserDTO(**fields))


def test_create_then_read_returns_same_names(service):
    created = _create(service, firstName="  Jane ", lastName="Doe")
    assert created.payload == {"username": "jdoe", "firstName": "Jane", "lastName": "Doe"}
    assert created.state is ConsistencyState.CONSISTENT
    assert service.read("jdoe").payload == created.payload


def test_create_from_full_name_answers_in_v1(service, store):
    created = _create(service, "amsmith", fullName="Anna Maria  Smith")
    assert created.payload == {"username": "amsmith", "fullName": "Anna Maria Smith"}
    record = store.find_by_username("amsmith")
    assert (record.first_name, record.last_name) == ("Anna Maria", "Smith")
    assert service.read("amsmith", "2").payload["firstName"] == "Anna Maria"


def test_create_rejects_short_usernames(service):
    for username in ("ab", "a1"):
        with pytest.raises(InvalidUsernameError):
            _create(service, username)


def test_create_rejects_existing_username(service):
    _create(service)
    with pytest.raises(ConflictError):
        _create(service, firstName="John", lastName="Roe")


@pytest.mark.parametrize("fields", [{"firstName": "Jane"}, {"fullName": "Jane"}])
def test_create_rejects_incomplete_payload(service, store, fields):
    with pytest.raises(InvalidInputError):
        service.create("jdoe", None, UserDTO(**fields))
    assert store.find_by_username("jdoe") is None


def test_create_with_superseded_version_only_redirects(service, store):
    result = service.create("jdoe", "1", UserDTO(fullName="Jane Doe"))
    assert result.payload is None
    assert result.redirect == "/user/jdoe?version=2"
    assert store.find_by_username("jdoe") is None


def test_update_single_field_keeps_the_other(service, store):
    _create(service)
    result = service.update("jdoe", None, UserDTO(lastName="Roe"))
    assert result.payload == {"username": "jdoe", "firstName": "Jane", "lastName": "Roe"}
    record = store.find_by_username("jdoe")
    assert record.full_name == "Jane Roe"
    assert record.name.last_name == "Roe"


def test_update_missing_user(service):
    with pytest.raises(NotFoundError):
        service.update("nobody", None, UserDTO(firstName="Jane"))


def test_update_with_empty_body_is_invalid(service):
    _create(service)
    with pytest.raises(InvalidInputError):
        service.update("jdoe", None, UserDTO())


def test_update_migrates_legacy_record(service, store, legacy_user):
    legacy_user("old", full_name="Jane Doe")
    result = service.update("old", None, UserDTO(firstName="Janet"))
    assert result.payload == {"username": "old", "firstName": "Janet", "lastName": "Doe"}
    record = store.find_by_username("old")
    assert record.name is not None
    assert record.full_name == "Janet Doe"


def test_update_adds_sub_record_to_split_name_record(service, store, legacy_user):
    legacy_user("mid", full_name="Jane Doe", first_name="Jane", last_name="Doe")
    result = service.update("mid", None, UserDTO(lastName="Roe"))
    assert result.state is ConsistencyState.CONSISTENT
    record = store.find_by_username("mid")
    assert (record.name.first_name, record.name.last_name) == ("Jane", "Roe")


def test_update_refreshes_updated_at(service, store, db):
    long_ago = datetime(2000, 1, 1)
    _create(service)
    db.query(User).update({"updated_at": long_ago})
    db.query(Name).update({"updated_at": long_ago})
    db.commit()

    service.update("jdoe", None, UserDTO(lastName="Roe"))

    record = store.find_by_username("jdoe")
    assert record.updated_at > long_ago
    assert record.name.updated_at > long_ago
    assert record.created_at > long_ago


def test_update_with_superseded_version_redirects_with_result(service):
    _create(service)
    result = service.update("jdoe", "1", UserDTO(fullName="Janet Roe"))
    assert result.redirect == "/user/jdoe?version=2"
    assert result.payload == {"username": "jdoe", "firstName": "Janet", "lastName": "Roe"}


def test_read_legacy_record_degrades_to_full_name(service, legacy_user):
    legacy_user("old", full_name="Jane Doe")
    assert service.read("old").payload == {"username": "old", "fullName": "Jane Doe"}
    assert service.read("old").state is ConsistencyState.NOT_APPLICABLE


def test_read_with_superseded_version_redirects(service):
    _create(service)
    result = service.read("jdoe", "1")
    assert result.redirect == "/user/jdoe?version=2"
    assert result.payload == {"username": "jdoe", "firstName": "Jane", "lastName": "Doe"}


def test_read_missing_user(service):
    with pytest.raises(NotFoundError):
        service.read("nobody")


def test_diverged_sub_record_reports_integrity_fault(service, store, db):
    _create(service)
    db.query(Name).update({"first_name": "Mallory"})
    db.commit()

    result = service.read("jdoe")
    assert result.faulted
    assert result.payload == {"error": "integrity_fault", "detail": "inconsistent data"}

    record = store.find_by_username("jdoe")
    assert (record.first_name, record.name.first_name) == ("Jane", "Mallory")


def test_update_keeps_its_write_when_fault_is_reported(service, store, db):
    _create(service)
    db.query(Name).update({"first_name": "Mallory"})
    db.commit()

    result = service.update("jdoe", None, UserDTO(lastName="Roe"))
    assert result.faulted
    assert store.find_by_username("jdoe").last_name == "Roe"


def test_delete_returns_deleted_user(service, store):
    _create(service)
    result = service.delete("jdoe")
    assert result.payload == {"username": "jdoe", "firstName": "Jane", "lastName": "Doe"}
    assert store.find_by_username("jdoe") is None


def test_delete_reports_fault_after_deleting(service, store, db):
    _create(service)
    db.query(Name).update({"last_name": "Roe"})
    db.commit()
    assert service.delete("jdoe").faulted
    assert store.find_by_username("jdoe") is None


def test_delete_missing_user(service):
    with pytest.raises(NotFoundError):
        service.delete("nobody")


def test_delete_with_unsupported_version_keeps_record(service, store):
    _create(service)
    with pytest.raises(InvalidInputError):
        service.delete("jdoe", "3")
    assert store.find_by_username("jdoe") is not None


def test_migrate_all_reports_every_field(service, legacy_user):
    legacy_user("old", full_name="Anna Maria Smith")
    assert service.migrate_all() == [
        {
            "username": "old",
            "fullName": "Anna Maria Smith",
            "firstName": "Anna Maria",
            "lastName": "Smith",
        }
    ]
