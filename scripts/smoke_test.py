"""
Post-deploy smoke test.

Runs against a live server:
1. Health check
2. Trip booking -> running -> completion
3. Ledger, dashboard and bill verification

The smoke trip and its settlement stay in the ledger; point this at a
staging database.

Usage: python scripts/smoke_test.py [base_url]
"""

import sys

import httpx

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/v1"


def fail(msg):
    print(f"❌ FAILURE: {msg}")
    sys.exit(1)


def success(msg):
    print(f"✅ {msg}")


def expect(response: httpx.Response, status_code: int, what: str) -> dict:
    if response.status_code != status_code:
        fail(f"{what}: {response.status_code} {response.text}")
    return response.json()


def main(base_url: str):
    with httpx.Client(base_url=base_url, timeout=10) as client:
        health = expect(client.get("/health"), 200, "Health check")
        success(f"Server healthy (refresh generation {health['refresh_generation']})")

        trip = expect(client.post(f"{API_PREFIX}/trips", json={
            "pickup_location": "Smoke Test Origin",
            "drop_location": "Smoke Test Destination",
            "fare_amount": 1000,
            "distance_km": 1,
            "notes": "post-deploy smoke test",
        }), 201, "Trip booking")
        success(f"Booked {trip['trip_number']}")

        expect(client.patch(f"{API_PREFIX}/trips/{trip['id']}/status", json={"status": "running"}),
               200, "Trip start")

        result = expect(client.post(f"{API_PREFIX}/trips/{trip['id']}/complete",
                                    json={"fuel": 100, "toll": 0, "other": 0}), 200, "Trip completion")
        if not result["success"] or result["net_profit"] != 900:
            fail(f"Unexpected completion result: {result}")
        success(f"Completed {trip['trip_number']} (net profit {result['net_profit']})")

        ledger = expect(client.get(f"{API_PREFIX}/transactions", params={"search": trip["trip_number"]}),
                        200, "Ledger search")
        kinds = sorted(t["kind"] for t in ledger)
        if kinds != ["expense", "income"]:
            fail(f"Expected one income and one expense for the smoke trip, got {kinds}")
        success("Settlement visible in the ledger")

        expect(client.get(f"{API_PREFIX}/analytics/summary"), 200, "Dashboard summary")
        expect(client.get(f"{API_PREFIX}/billing/summary"), 200, "Billing summary")
        success("Reports reachable")

    success("Smoke test passed!")


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else BASE_URL)
