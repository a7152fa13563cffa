#!/usr/bin/env python3
"""
Booking walk-through against a running server.

This script only orchestrates API calls; every rule lives in the backend.

Usage:
    python scripts/flow_book_and_pay.py --listing-id <UUID> --check-in 2026-04-01 --check-out 2026-04-04
    python scripts/flow_book_and_pay.py --listing-id <UUID> --check-in 2026-04-01 --check-out 2026-04-04 --cancel

Flow:
    1. Login as guest
    2. Calculate booking price
    3. Create booking
    4. Pay (mock)
    5. Login as host and confirm
    6. Check-in and complete, or cancel as guest with --cancel
"""

import argparse
import json
import os
import sys

import httpx

BASE_URL = os.environ.get("STAYFINDER_URL", "http://localhost:8000")

GUEST_EMAIL = os.environ.get("GUEST_EMAIL", "guest@stayfinder.local")
GUEST_PASSWORD = os.environ.get("GUEST_PASSWORD", "Test@1234")
HOST_EMAIL = os.environ.get("HOST_EMAIL", "host@stayfinder.local")
HOST_PASSWORD = os.environ.get("HOST_PASSWORD", "Test@1234")


def login(email: str, password: str) -> str:
    """Login and return the access token."""
    response = httpx.post(
        f"{BASE_URL}/api/v1/auth/login",
        json={"email": email, "password": password},
        timeout=10.0,
    )
    if response.status_code != 200:
        print(f"ERROR: Login failed for {email}: {response.status_code}")
        print(response.text)
        sys.exit(1)

    return response.json()["access_token"]


def api_request(token: str, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make authenticated API request."""
    response = httpx.request(
        method,
        f"{BASE_URL}{endpoint}",
        headers={"Authorization": f"Bearer {token}"},
        json=data if method != "GET" else None,
        timeout=10.0,
    )
    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    print(f"\n{'=' * 60}")
    print(f"STEP {step}: {title}")
    print("=" * 60)


def print_result(result: dict, fields: list[str] | None = None) -> bool:
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    data = result["data"]
    if fields:
        data = {k: data.get(k) for k in fields if k in data}
    print(json.dumps(data, indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Booking lifecycle walk-through")
    parser.add_argument("--listing-id", required=True, help="Listing UUID")
    parser.add_argument("--check-in", required=True, help="Check-in date (YYYY-MM-DD)")
    parser.add_argument("--check-out", required=True, help="Check-out date (YYYY-MM-DD)")
    parser.add_argument("--adults", type=int, default=2, help="Number of adults")
    parser.add_argument("--cancel", action="store_true", help="Cancel as guest after confirmation")
    args = parser.parse_args()

    stay = {
        "listing_id": args.listing_id,
        "check_in": args.check_in,
        "check_out": args.check_out,
        "guests": {"adults": args.adults},
    }

    print_step(1, "Login as guest")
    guest_token = login(GUEST_EMAIL, GUEST_PASSWORD)
    print(f"Logged in as {GUEST_EMAIL}")

    print_step(2, "Calculate booking price")
    quote = api_request(guest_token, "POST", "/api/v1/bookings/calculate", stay)
    if not print_result(quote):
        sys.exit(1)
    if not quote["data"]["available"]:
        print("ERROR: Listing is not available for these dates")
        sys.exit(1)

    print_step(3, "Create booking")
    booking = api_request(
        guest_token, "POST", "/api/v1/bookings/", {**stay, "payment_method": "credit_card"}
    )
    if not print_result(booking, ["id", "booking_number", "nights", "total_amount", "status"]):
        sys.exit(1)
    booking_id = booking["data"]["id"]
    booking_number = booking["data"]["booking_number"]

    print_step(4, "Pay (mock)")
    paid = api_request(guest_token, "POST", f"/api/v1/bookings/{booking_id}/pay")
    if not print_result(paid, ["payment_status", "transaction_id", "paid_at"]):
        sys.exit(1)

    print_step(5, "Login as host and confirm")
    host_token = login(HOST_EMAIL, HOST_PASSWORD)
    confirmed = api_request(
        host_token, "PUT", f"/api/v1/bookings/{booking_id}/status", {"status": "confirmed"}
    )
    if not print_result(confirmed, ["status", "confirmed_at"]):
        sys.exit(1)

    if args.cancel:
        print_step(6, "Cancel as guest")
        cancelled = api_request(
            guest_token,
            "PUT",
            f"/api/v1/bookings/{booking_id}/status",
            {"status": "cancelled_by_guest", "reason": "Walk-through cancellation"},
        )
        if not print_result(
            cancelled,
            ["status", "refund_policy", "cancellation_refund_amount", "payment_status"],
        ):
            sys.exit(1)
    else:
        print_step(6, "Check-in and complete")
        for action in ("check-in", "complete"):
            result = api_request(host_token, "POST", f"/api/v1/bookings/{booking_id}/{action}")
            if not print_result(result, ["status", "checked_in_at", "completed_at"]):
                sys.exit(1)

    print("\n" + "=" * 60)
    print(f"FLOW COMPLETE: {booking_number} total {quote['data']['total_amount']} {quote['data']['currency']}")
    print("=" * 60)


if __name__ == "__main__":
    main()
