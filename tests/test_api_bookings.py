from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event, update

from stayfinder.core.exceptions import DatesNotAvailable
from stayfinder.core.immutability import ImmutabilityViolationError
from stayfinder.core.security import get_password_hash
from stayfinder.database import get_db
from stayfinder.main import app
from stayfinder.models.booking import Booking, BookingMessage
from stayfinder.models.listing import Listing
from stayfinder.models.user import User
from stayfinder.schemas.booking import GuestCounts
from stayfinder.services.booking_service import booking_service
from tests.conftest import (
    API,
    TestingSessionLocal,
    booking_payload,
    create_listing,
    run_db,
    sync_engine,
)


def in_days(days: int) -> str:
    return str(datetime.now(UTC).date() + timedelta(days=days))


def book(client: TestClient, guest: dict, listing_id: str, check_in: str, check_out: str, **kwargs):
    return client.post(
        f"{API}/bookings/",
        json=booking_payload(listing_id, check_in, check_out, **kwargs),
        headers=guest["headers"],
    )


def make_admin(client: TestClient) -> dict:
    async def _create(session):
        session.add(
            User(
                email="admin@example.com",
                name="Ada Admin",
                password_hash=get_password_hash("secret123"),
                role="admin",
                host_profile=None,
            )
        )
        await session.commit()

    run_db(_create)
    response = client.post(
        f"{API}/auth/login", json={"email": "admin@example.com", "password": "secret123"}
    )
    assert response.status_code == 200
    return {"headers": {"Authorization": f"Bearer {response.json()['access_token']}"}}


# --- Creation and availability ---


def test_booking_blocks_dates_and_rejects_overlap(client: TestClient, guest, other_guest, listing):
    """A booked range makes overlapping requests fail."""
    response = book(client, guest, listing["id"], "2024-03-15", "2024-03-18", adults=2)

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["nights"] == 3
    assert data["status"] == "pending"
    assert data["payment_status"] == "pending"
    assert data["booking_number"].startswith("SF-")
    assert data["host_id"] == listing["host_id"]
    assert data["refund_policy"] == "moderate"
    assert data["refund_policy_description"].startswith("Full refund up to 5 days")
    assert Decimal(data["subtotal"]) == Decimal("450.00")
    assert Decimal(data["service_fee"]) == Decimal("63.00")
    assert Decimal(data["taxes"]) == Decimal("36.00")
    assert Decimal(data["total_amount"]) == Decimal("574.00")

    listing_data = client.get(f"{API}/listings/{listing['id']}").json()
    assert listing_data["total_bookings"] == 1
    assert len(listing_data["blocked_dates"]) == 1
    blocked = listing_data["blocked_dates"][0]
    assert blocked["start_date"] == "2024-03-15"
    assert blocked["end_date"] == "2024-03-18"
    assert blocked["reason"] == "booked"
    assert blocked["booking_id"] == data["id"]

    response = book(client, other_guest, listing["id"], "2024-03-17", "2024-03-20")
    assert response.status_code == 400
    assert response.json()["detail"] == "Listing is not available for selected dates"


def test_same_day_turnover_is_rejected(client: TestClient, guest, other_guest, listing):
    assert book(client, guest, listing["id"], "2024-03-15", "2024-03-18").status_code == 201
    response = book(client, other_guest, listing["id"], "2024-03-18", "2024-03-21")
    assert response.status_code == 400


def test_calculate_price(client: TestClient, guest, listing):
    request = {
        "listing_id": listing["id"],
        "check_in": "2024-03-15",
        "check_out": "2024-03-18",
        "guests": {"adults": 2},
    }
    response = client.post(f"{API}/bookings/calculate", json=request)

    assert response.status_code == 200
    data = response.json()
    assert data["nights"] == 3
    assert data["currency"] == "USD"
    assert data["available"] is True
    assert Decimal(data["cleaning_fee"]) == Decimal("25.00")
    assert Decimal(data["total_amount"]) == Decimal("574.00")

    book(client, guest, listing["id"], "2024-03-15", "2024-03-18")
    assert client.post(f"{API}/bookings/calculate", json=request).json()["available"] is False


def test_booking_requires_authentication(client: TestClient, listing):
    response = client.post(
        f"{API}/bookings/", json=booking_payload(listing["id"], "2024-03-15", "2024-03-18")
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authorized, no token"


def test_check_out_must_follow_check_in(client: TestClient, guest, listing):
    response = book(client, guest, listing["id"], "2024-03-18", "2024-03-18")

    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Validation failed"
    assert body["errors"][0]["field"] == "check_out"


def test_capacity_is_enforced(client: TestClient, guest, listing):
    response = book(client, guest, listing["id"], "2024-03-15", "2024-03-18", adults=5)
    assert response.status_code == 400
    assert response.json()["detail"] == "This listing can accommodate maximum 4 guests"


def test_pets_do_not_count_towards_capacity(client: TestClient, guest, listing):
    payload = booking_payload(listing["id"], "2024-03-15", "2024-03-18", adults=4)
    payload["guests"]["pets"] = 2
    response = client.post(f"{API}/bookings/", json=payload, headers=guest["headers"])
    assert response.status_code == 201


def test_host_cannot_book_own_listing(client: TestClient, host, listing):
    response = book(client, host, listing["id"], "2024-03-15", "2024-03-18")
    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot book your own listing"


def test_draft_listing_cannot_be_booked(client: TestClient, host, guest):
    draft = create_listing(client, host, status="draft")
    response = book(client, guest, draft["id"], "2024-03-15", "2024-03-18")
    assert response.status_code == 400
    assert response.json()["detail"] == "This listing is not available"


def test_minimum_stay_is_enforced(client: TestClient, host, guest):
    listing = create_listing(client, host, min_nights=3)
    response = book(client, guest, listing["id"], "2024-03-15", "2024-03-17")
    assert response.status_code == 400
    assert response.json()["detail"] == "Minimum stay is 3 nights"


def test_unknown_listing(client: TestClient, guest):
    response = book(client, guest, "00000000-0000-0000-0000-000000000000", "2024-03-15", "2024-03-18")
    assert response.status_code == 404


# --- Reading bookings ---


def test_booking_visibility(client: TestClient, host, guest, other_guest, listing):
    booking = book(client, guest, listing["id"], "2024-03-15", "2024-03-18").json()
    url = f"{API}/bookings/{booking['id']}"

    assert client.get(url, headers=guest["headers"]).status_code == 200
    assert client.get(url, headers=host["headers"]).status_code == 200
    response = client.get(url, headers=other_guest["headers"])
    assert response.status_code == 403
    assert response.json()["detail"] == "Not authorized to view this booking"


def test_list_bookings_as_guest_and_host(client: TestClient, host, guest, listing):
    book(client, guest, listing["id"], "2024-03-15", "2024-03-18")
    book(client, guest, listing["id"], "2024-04-01", "2024-04-03")

    as_guest = client.get(f"{API}/bookings/", headers=guest["headers"]).json()
    assert as_guest["total"] == 2
    assert as_guest["total_pages"] == 1

    as_host = client.get(f"{API}/bookings/?role=host", headers=host["headers"]).json()
    assert as_host["total"] == 2

    filtered = client.get(f"{API}/bookings/?status=confirmed", headers=guest["headers"]).json()
    assert filtered["total"] == 0

    response = client.get(f"{API}/bookings/?role=host", headers=guest["headers"])
    assert response.status_code == 403


def test_admin_can_read_but_not_drive_bookings(client: TestClient, guest, listing):
    admin = make_admin(client)
    booking = book(client, guest, listing["id"], "2024-03-15", "2024-03-18").json()

    assert client.get(f"{API}/bookings/{booking['id']}", headers=admin["headers"]).status_code == 200
    response = client.put(
        f"{API}/bookings/{booking['id']}/status",
        json={"status": "confirmed"},
        headers=admin["headers"],
    )
    assert response.status_code == 403


# --- Lifecycle ---


def test_host_drives_stay_to_completion(client: TestClient, host, guest, listing):
    booking = book(client, guest, listing["id"], "2024-03-15", "2024-03-18").json()
    base = f"{API}/bookings/{booking['id']}"

    response = client.put(f"{base}/status", json={"status": "confirmed"}, headers=guest["headers"])
    assert response.status_code == 403
    assert response.json()["detail"] == "Only the host can confirm bookings"

    response = client.put(f"{base}/status", json={"status": "confirmed"}, headers=host["headers"])
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"
    assert response.json()["confirmed_at"] is not None

    response = client.post(f"{base}/check-in", headers=host["headers"])
    assert response.json()["status"] == "in_progress"

    response = client.post(f"{base}/complete", headers=host["headers"])
    assert response.json()["status"] == "completed"
    assert response.json()["completed_at"] is not None

    response = client.put(
        f"{base}/status", json={"status": "cancelled_by_guest"}, headers=guest["headers"]
    )
    assert response.status_code == 400


def test_complete_requires_check_in(client: TestClient, host, guest, listing):
    booking = book(client, guest, listing["id"], "2024-03-15", "2024-03-18").json()
    response = client.post(f"{API}/bookings/{booking['id']}/complete", headers=host["headers"])
    assert response.status_code == 400


def test_no_show(client: TestClient, host, guest, listing):
    booking = book(client, guest, listing["id"], "2024-03-15", "2024-03-18").json()
    base = f"{API}/bookings/{booking['id']}"
    client.put(f"{base}/status", json={"status": "confirmed"}, headers=host["headers"])

    assert client.post(f"{base}/no-show", headers=guest["headers"]).status_code == 403
    response = client.post(f"{base}/no-show", headers=host["headers"])
    assert response.json()["status"] == "no_show"


def test_guest_cancels_early_for_full_refund(client: TestClient, guest, other_guest, listing):
    check_in, check_out = in_days(30), in_days(33)
    booking = book(client, guest, listing["id"], check_in, check_out).json()
    base = f"{API}/bookings/{booking['id']}"

    paid = client.post(f"{base}/pay", headers=guest["headers"]).json()
    assert paid["payment_status"] == "completed"
    assert paid["transaction_id"].startswith("txn_")

    response = client.put(
        f"{base}/status",
        json={"status": "cancelled_by_guest", "reason": "Change of plans"},
        headers=guest["headers"],
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "cancelled_by_guest"
    assert data["cancelled_by"] == guest["id"]
    assert data["cancellation_reason"] == "Change of plans"
    assert Decimal(data["cancellation_refund_amount"]) == Decimal("574.00")
    assert data["payment_status"] == "refunded"
    assert data["can_be_cancelled"] is False

    # Released dates can be booked again
    listing_data = client.get(f"{API}/listings/{listing['id']}").json()
    assert listing_data["blocked_dates"] == []
    assert book(client, other_guest, listing["id"], check_in, check_out).status_code == 201


def test_late_cancellation_is_partially_refunded(client: TestClient, host, guest, listing):
    booking = book(client, guest, listing["id"], in_days(3), in_days(6)).json()
    base = f"{API}/bookings/{booking['id']}"
    client.post(f"{base}/pay", headers=guest["headers"])

    response = client.put(
        f"{base}/status", json={"status": "cancelled_by_host"}, headers=host["headers"]
    )
    data = response.json()
    assert data["status"] == "cancelled_by_host"
    assert Decimal(data["cancellation_refund_amount"]) == Decimal("287.00")
    assert data["payment_status"] == "partially_refunded"


def test_unpaid_cancellation_keeps_payment_pending(client: TestClient, guest, listing):
    booking = book(client, guest, listing["id"], in_days(30), in_days(33)).json()
    response = client.put(
        f"{API}/bookings/{booking['id']}/status",
        json={"status": "cancelled_by_guest"},
        headers=guest["headers"],
    )
    assert response.json()["payment_status"] == "pending"


def test_past_check_in_cannot_be_cancelled(client: TestClient, guest, listing):
    booking = book(client, guest, listing["id"], "2024-03-15", "2024-03-18").json()
    assert booking["can_be_cancelled"] is False

    response = client.put(
        f"{API}/bookings/{booking['id']}/status",
        json={"status": "cancelled_by_guest"},
        headers=guest["headers"],
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "This booking can no longer be cancelled"


def test_only_guest_pays_once(client: TestClient, host, guest, listing):
    booking = book(client, guest, listing["id"], in_days(30), in_days(33)).json()
    base = f"{API}/bookings/{booking['id']}"

    assert client.post(f"{base}/pay", headers=host["headers"]).status_code == 403
    assert client.post(f"{base}/pay", headers=guest["headers"]).status_code == 200
    assert client.post(f"{base}/pay", headers=guest["headers"]).status_code == 400


# --- Messages ---


def test_message_thread(client: TestClient, host, guest, other_guest, listing):
    booking = book(client, guest, listing["id"], "2024-03-15", "2024-03-18").json()
    base = f"{API}/bookings/{booking['id']}/messages"

    response = client.post(base, json={"message": "What time is check-in?"}, headers=guest["headers"])
    assert response.status_code == 201
    assert response.json()["sender_id"] == guest["id"]
    assert response.json()["is_read"] is False

    client.post(base, json={"message": "From 15:00."}, headers=host["headers"])

    thread = client.get(base, headers=host["headers"]).json()
    assert [m["message"] for m in thread] == ["What time is check-in?", "From 15:00."]

    response = client.post(f"{base}/read", headers=host["headers"])
    assert response.json() == {"marked_read": 1}
    assert client.post(f"{base}/read", headers=host["headers"]).json() == {"marked_read": 0}

    assert client.get(base, headers=other_guest["headers"]).status_code == 403


def test_empty_message_is_rejected(client: TestClient, guest, listing):
    booking = book(client, guest, listing["id"], "2024-03-15", "2024-03-18").json()
    response = client.post(
        f"{API}/bookings/{booking['id']}/messages", json={"message": ""}, headers=guest["headers"]
    )
    assert response.status_code == 400


# --- Stored record guards ---


def test_pricing_snapshot_cannot_be_rewritten(client: TestClient, guest, listing):
    booking = book(client, guest, listing["id"], "2024-03-15", "2024-03-18").json()

    async def tamper(session):
        record = await session.get(Booking, UUID(booking["id"]))
        record.total_amount = Decimal("1.00")
        await session.flush()

    with pytest.raises(ImmutabilityViolationError) as exc_info:
        run_db(tamper)
    assert exc_info.value.fields == ["total_amount"]


def test_bookings_cannot_be_deleted(client: TestClient, guest, listing):
    booking = book(client, guest, listing["id"], "2024-03-15", "2024-03-18").json()

    async def remove(session):
        record = await session.get(Booking, UUID(booking["id"]))
        await session.delete(record)
        await session.flush()

    with pytest.raises(ImmutabilityViolationError):
        run_db(remove)


def test_messages_are_append_only(client: TestClient, guest, listing):
    booking = book(client, guest, listing["id"], "2024-03-15", "2024-03-18").json()
    message = client.post(
        f"{API}/bookings/{booking['id']}/messages", json={"message": "Hello"}, headers=guest["headers"]
    ).json()

    async def edit(session):
        record = await session.get(BookingMessage, UUID(message["id"]))
        record.message = "Edited"
        await session.flush()

    with pytest.raises(ImmutabilityViolationError):
        run_db(edit)

    async def mark_read(session):
        record = await session.get(BookingMessage, UUID(message["id"]))
        record.is_read = True
        await session.commit()
        return record.is_read

    assert run_db(mark_read) is True


def test_booking_dates_are_stored_as_given(client: TestClient, guest, listing):
    booking = book(client, guest, listing["id"], "2024-03-15", "2024-03-18").json()

    async def load(session):
        return await session.get(Booking, UUID(booking["id"]))

    record = run_db(load)
    assert record.check_in == date(2024, 3, 15)
    assert record.check_out == date(2024, 3, 18)
    assert record.total_guests == 2


# --- Concurrent writers ---


def test_concurrent_booking_rejected_after_first_commit(client: TestClient, guest, other_guest, listing):
    """A session holding a stale copy of the listing cannot book over a committed range."""
    listing_id = UUID(listing["id"])

    async def race(first):
        async with TestingSessionLocal() as second:
            # The second writer reads the listing before the first one books
            await second.get(Listing, listing_id)
            late_guest = await second.get(User, UUID(other_guest["id"]))
            early_guest = await first.get(User, UUID(guest["id"]))

            await booking_service.create_booking(
                first,
                early_guest,
                listing_id,
                date(2030, 3, 15),
                date(2030, 3, 18),
                GuestCounts(adults=2),
                "credit_card",
            )
            await first.commit()

            try:
                await booking_service.create_booking(
                    second,
                    late_guest,
                    listing_id,
                    date(2030, 3, 16),
                    date(2030, 3, 17),
                    GuestCounts(adults=2),
                    "credit_card",
                )
            finally:
                await second.rollback()

    with pytest.raises(DatesNotAvailable):
        run_db(race)

    blocked = client.get(f"{API}/listings/{listing['id']}").json()["blocked_dates"]
    assert [(b["start_date"], b["end_date"]) for b in blocked] == [("2030-03-15", "2030-03-18")]

    mine = client.get(f"{API}/bookings/", params={"role": "guest"}, headers=other_guest["headers"])
    assert mine.json()["total"] == 0


def test_stale_listing_edit_returns_400(client: TestClient, host, listing):
    """An edit whose listing version moved underneath it is refused."""
    listings = Listing.__table__

    def bump_version(session, flush_context, instances):
        with sync_engine.begin() as conn:
            conn.execute(
                update(listings)
                .where(listings.c.id == UUID(listing["id"]))
                .values(availability_version=listings.c.availability_version + 1)
            )

    async def db_with_concurrent_writer():
        async with TestingSessionLocal() as session:
            event.listen(session.sync_session, "before_flush", bump_version, once=True)
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    regular_db = app.dependency_overrides[get_db]
    app.dependency_overrides[get_db] = db_with_concurrent_writer
    try:
        response = client.patch(
            f"{API}/listings/{listing['id']}", json={"title": "Renamed loft"}, headers=host["headers"]
        )
    finally:
        app.dependency_overrides[get_db] = regular_db

    assert response.status_code == 400
    assert "modified concurrently" in response.json()["detail"]
    assert client.get(f"{API}/listings/{listing['id']}").json()["title"] == listing["title"]
