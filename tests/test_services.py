# tests/test_services.py
from app import crud
from app.models import SavedSearch
from app.schemas import ListingFilter
from app.scheduler import build_scheduler
from app.services import evaluate_search_alerts


def test_evaluate_search_alerts_records_matches(db, buyer, cars):
    sedans = crud.create_saved_search(db, buyer.id, "Sedans", ListingFilter(body_type="Sedan"), email_alerts=True)
    quiet = crud.create_saved_search(db, buyer.id, "Quiet", ListingFilter(make="BMW"), email_alerts=False)

    results = evaluate_search_alerts(db)

    assert results == {sedans.id: 4}
    refreshed = db.get(SavedSearch, sedans.id)
    assert refreshed.last_match_count == 4
    assert refreshed.last_checked_at is not None
    assert db.get(SavedSearch, quiet.id).last_checked_at is None


def test_broken_saved_search_is_skipped(db, buyer, cars):
    good = crud.create_saved_search(db, buyer.id, "Teslas", ListingFilter(make="Tesla"), email_alerts=True)
    db.add(SavedSearch(user_id=buyer.id, search_name="Broken", search_criteria='{"page": "x"}', email_alerts=True))
    db.commit()

    assert evaluate_search_alerts(db) == {good.id: 1}


def test_scheduler_registers_alert_job():
    scheduler = build_scheduler()
    assert scheduler.get_job("search_alerts") is not None


def test_failed_search_rolls_back_and_others_still_record(db, buyer, cars, monkeypatch):
    from sqlalchemy.exc import OperationalError

    first = crud.create_saved_search(db, buyer.id, "SUVs", ListingFilter(body_type="SUV"), email_alerts=True)
    second = crud.create_saved_search(db, buyer.id, "Teslas", ListingFilter(make="Tesla"), email_alerts=True)

    original_scalar = db.scalar
    original_rollback = db.rollback
    calls = {"scalar": 0, "rollback": 0}

    def flaky_scalar(*args, **kwargs):
        calls["scalar"] += 1
        if calls["scalar"] == 1:
            raise OperationalError("SELECT", {}, Exception("server closed the connection"))
        return original_scalar(*args, **kwargs)

    def counting_rollback():
        calls["rollback"] += 1
        original_rollback()

    monkeypatch.setattr(db, "scalar", flaky_scalar)
    monkeypatch.setattr(db, "rollback", counting_rollback)

    assert evaluate_search_alerts(db) == {second.id: 1}
    assert calls["rollback"] == 1
    assert db.get(SavedSearch, second.id).last_match_count == 1
    assert db.get(SavedSearch, first.id).last_checked_at is None
