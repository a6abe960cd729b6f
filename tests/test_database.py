"""Tests for the SQLite application record store."""

import sqlite3
from datetime import date, timedelta

import pytest

from cooloff_tracker.tracking.database import ApplicationDatabase
from cooloff_tracker.tracking.errors import NotFoundError, StorageFailure
from cooloff_tracker.tracking.models import ApplicationStatus, CoolOffStartType, JobApplication


def make_record(company="Acme", job_title="Engineer", location="NY",
                applied=date(2024, 1, 1), **kwargs) -> JobApplication:
    fields = dict(
        company=company,
        job_title=job_title,
        location=location,
        applied_date=applied,
        cool_off_ends=applied + timedelta(days=182),
    )
    fields.update(kwargs)
    return JobApplication(**fields)


def test_add_assigns_incrementing_ids(database):
    first = database.add(make_record(company="Acme"))
    second = database.add(make_record(company="Globex"))
    assert second > first
    assert database.count() == 2


def test_add_then_get_round_trips_record(database):
    record = make_record(status=ApplicationStatus.INTERVIEWING,
                         cool_off_start_type=CoolOffStartType.REJECTION)
    application_id = database.add(record)

    stored = database.get(application_id)
    assert stored == record.model_copy(update={'id': application_id})


def test_add_ignores_caller_supplied_id(database):
    application_id = database.add(make_record(id=999))
    assert application_id != 999
    assert database.get(999) is None


def test_get_missing_returns_none(database):
    assert database.get(42) is None


def test_update_merges_fields(database):
    application_id = database.add(make_record())
    updated = database.update(application_id, status=ApplicationStatus.OFFER, location="Remote")

    assert updated.status == ApplicationStatus.OFFER
    assert updated.location == "Remote"
    assert updated.company == "Acme"
    assert database.get(application_id) == updated


def test_update_accepts_status_text(database):
    application_id = database.add(make_record())
    assert database.update(application_id, status="Rejected").status == ApplicationStatus.REJECTED


def test_update_missing_raises_not_found(database):
    with pytest.raises(NotFoundError) as excinfo:
        database.update(7, status=ApplicationStatus.OFFER)
    assert excinfo.value.application_id == 7


def test_update_rejects_unknown_fields_and_id_changes(database):
    application_id = database.add(make_record())
    with pytest.raises(ValueError):
        database.update(application_id, salary="lots")
    with pytest.raises(ValueError):
        database.update(application_id, id=5)


def test_delete_is_safe_for_missing_ids(database):
    application_id = database.add(make_record())
    assert database.delete(application_id) is True
    assert database.delete(application_id) is False
    assert database.count() == 0


def test_count_where_on_indexed_fields(database):
    database.add(make_record(company="Acme", status=ApplicationStatus.INTERVIEWING))
    database.add(make_record(company="Globex", status=ApplicationStatus.INTERVIEWING))
    database.add(make_record(company="Initech", status=ApplicationStatus.OFFER))

    assert database.count_where('status', ApplicationStatus.INTERVIEWING) == 2
    assert database.count_where('status', 'Offer') == 1
    assert database.count_where('company', 'Globex') == 1
    assert database.count_where('applied_date', date(2024, 1, 1)) == 3


def test_count_where_rejects_unindexed_field(database):
    with pytest.raises(ValueError):
        database.count_where('notes', 'x')


def test_query_orders_and_slices(database):
    for day in (3, 1, 2, 5, 4):
        database.add(make_record(company=f"Co{day}", applied=date(2024, 1, day)))

    newest = database.query('applied_date', 'desc', offset=0, limit=2)
    assert [r.applied_date.day for r in newest] == [5, 4]

    middle = database.query('applied_date', 'desc', offset=2, limit=2)
    assert [r.applied_date.day for r in middle] == [3, 2]

    oldest = database.query('applied_date', 'asc', offset=0, limit=1)
    assert [r.applied_date.day for r in oldest] == [1]


def test_query_breaks_date_ties_by_id(database):
    ids = [database.add(make_record(company=f"Co{i}")) for i in range(4)]
    records = database.query('applied_date', 'desc', offset=0, limit=10)
    assert [r.id for r in records] == sorted(ids, reverse=True)


def test_query_validates_arguments(database):
    with pytest.raises(ValueError):
        database.query('salary', 'desc')
    with pytest.raises(ValueError):
        database.query('applied_date', 'sideways')
    with pytest.raises(ValueError):
        database.query('applied_date', 'desc', offset=-1)


def test_find_duplicate_ignores_case_and_excluded_id(database):
    application_id = database.add(make_record(company="Acme", job_title="Engineer", location="NY"))

    clash = database.find_duplicate("ACME", "engineer", "ny")
    assert clash is not None and clash.id == application_id

    assert database.find_duplicate("Acme", "Engineer", "NY", exclude_id=application_id) is None
    assert database.find_duplicate("Acme", "Engineer", "Boston") is None


def test_clear_and_bulk_insert_preserve_ids(database):
    database.add(make_record(company="Old"))
    records = [
        make_record(id=10, company="Acme"),
        make_record(id=20, company="Globex"),
        make_record(company="Initech"),
    ]

    assert database.clear() == 1
    assert database.bulk_insert(records) == 3

    assert database.get(10).company == "Acme"
    assert database.get(20).company == "Globex"
    assert {r.company for r in database.all()} == {"Acme", "Globex", "Initech"}
    # Records without an id continue after the highest id
    assert database.add(make_record(company="Hooli")) > 20


def test_replace_all_rolls_back_on_failure(database):
    database.add(make_record(company="Keep"))

    with pytest.raises(StorageFailure):
        database.replace_all([
            make_record(id=1, company="Acme"),
            make_record(id=1, company="Globex"),
        ])

    assert [r.company for r in database.all()] == ["Keep"]


def test_storage_errors_are_wrapped(database):
    database.conn.execute("DROP TABLE applications")
    with pytest.raises(StorageFailure) as excinfo:
        database.count()
    assert isinstance(excinfo.value.__cause__, sqlite3.Error)


def test_file_backed_store_persists(tmp_path):
    path = tmp_path / "nested" / "applications.db"
    with ApplicationDatabase(path) as db:
        application_id = db.add(make_record())

    with ApplicationDatabase(path) as db:
        assert db.get(application_id).company == "Acme"


def test_update_rejects_applied_date_changes(database):
    application_id = database.add(make_record())
    with pytest.raises(ValueError):
        database.update(application_id, applied_date=date(2025, 1, 1))
    assert database.get(application_id).applied_date == date(2024, 1, 1)


def test_closed_store_raises_storage_failure(database):
    application_id = database.add(make_record())
    database.close()

    with pytest.raises(StorageFailure):
        database.get(application_id)
    with pytest.raises(StorageFailure):
        database.add(make_record(company="Globex"))
    with pytest.raises(StorageFailure):
        database.replace_all([make_record()])
