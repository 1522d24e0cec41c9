"""
Locust load test suite for the booking engine.

Resources are admin-managed, so the suite books against existing resources.
Provision them first and export their ids:

  export LOAD_RESOURCE_ID=1          # contested resource
  export LOAD_RESOURCE_IDS=1,2,3     # pool for the mixed workload

Run scenarios:
  locust -f locustfile.py --tags contention   # Double-booking under load
  locust -f locustfile.py --tags throughput   # Availability cache
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests
"""

import os
import random
import string
from datetime import datetime, timezone, timedelta

from locust import HttpUser, task, between, tag, events

CONTESTED_RESOURCE_ID = int(os.environ.get("LOAD_RESOURCE_ID", "1"))
RESOURCE_IDS = [
    int(x) for x in os.environ.get("LOAD_RESOURCE_IDS", str(CONTESTED_RESOURCE_ID)).split(",") if x
]

# Every contention user aims at this one hour, 30 days out
CONTESTED_START = (datetime.now(timezone.utc) + timedelta(days=30)).replace(
    hour=10, minute=0, second=0, microsecond=0
)
CONTESTED_END = CONTESTED_START + timedelta(hours=1)


def random_email():
    return f"load_{random.randint(10000, 99999)}@campus.example.com"


def random_username():
    return "u_" + "".join(random.choices(string.ascii_lowercase, k=8))


def register_organizer(client) -> dict:
    """Register and log in a fresh organizer; returns auth headers (empty on failure)."""
    email = random_email()
    client.post("/api/v1/auth/register", json={
        "email": email,
        "username": random_username(),
        "password": "loadtest123",
        "role": "organizer",
    })
    resp = client.post("/api/v1/auth/login", json={
        "email": email,
        "password": "loadtest123",
    })
    if resp.status_code != 200:
        return {}
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"Contested resource {CONTESTED_RESOURCE_ID}: "
          f"{CONTESTED_START.isoformat()} .. {CONTESTED_END.isoformat()}")
    print("=" * 60)


class ContentionUser(HttpUser):
    """
    TEST 1: Contention - many organizers, one slot

    Run: locust -f locustfile.py --tags contention -u 100 -r 50 --run-time 30s

    After test, verify no overlapping active bookings:
      SELECT COUNT(*) FROM bookings
      WHERE resource_id = X AND status IN ('pending', 'approved')
        AND start_time < :end AND end_time > :start;
    Should be exactly 1.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = register_organizer(self.client)

    @tag("contention")
    @task
    def book_contested_slot(self):
        if not self.headers:
            return

        # Shifted hours that all overlap one another
        offset = timedelta(minutes=random.choice([-15, 0, 15]))
        with self.client.post("/api/v1/bookings/",
            json={
                "resource_id": CONTESTED_RESOURCE_ID,
                "start_time": (CONTESTED_START + offset).isoformat(),
                "end_time": (CONTESTED_END + offset).isoformat(),
            },
            headers=self.headers,
            name="/api/v1/bookings/ [contested]",
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: slot taken
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - availability cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. With REDIS_ENABLED=false, run again

    Compare avg response time, requests/sec, P95/P99 latency.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def day_availability(self):
        day = (CONTESTED_START + timedelta(days=random.randint(-3, 3))).date()
        self.client.get(
            f"/api/v1/bookings/resource/{random.choice(RESOURCE_IDS)}?date={day.isoformat()}",
            name="/api/v1/bookings/resource/{id}?date [cached]")

    @tag("throughput", "read")
    @task(3)
    def slot_grid(self):
        self.client.get(
            f"/api/v1/bookings/resource/{random.choice(RESOURCE_IDS)}/slots"
            f"?date={CONTESTED_START.date().isoformat()}",
            name="/api/v1/bookings/resource/{id}/slots")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = register_organizer(self.client)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_resource(self):
        with self.client.post("/api/v1/bookings/",
            json={
                "resource_id": 999999,
                "start_time": CONTESTED_START.isoformat(),
                "end_time": CONTESTED_END.isoformat(),
            },
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def reversed_range(self):
        with self.client.post("/api/v1/bookings/",
            json={
                "resource_id": CONTESTED_RESOURCE_ID,
                "start_time": CONTESTED_END.isoformat(),
                "end_time": CONTESTED_START.isoformat(),
            },
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def empty_range(self):
        with self.client.post("/api/v1/bookings/",
            json={
                "resource_id": CONTESTED_RESOURCE_ID,
                "start_time": CONTESTED_START.isoformat(),
                "end_time": CONTESTED_START.isoformat(),
            },
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/v1/bookings/",
            data="not json at all",
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, [400, 422])

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post("/api/v1/bookings/",
            json={
                "resource_id": CONTESTED_RESOURCE_ID,
                "start_time": CONTESTED_START.isoformat(),
                "end_time": CONTESTED_END.isoformat(),
            },
            catch_response=True
        ) as resp:
            self._expect(resp, [401])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly availability reads, some bookings spread over the next 90 days.
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = register_organizer(self.client)

    @task(50)
    def browse_resources(self):
        self.client.get("/api/v1/resources/")

    @task(20)
    def view_availability(self):
        self.client.get(
            f"/api/v1/bookings/resource/{random.choice(RESOURCE_IDS)}",
            name="/api/v1/bookings/resource/{id}")

    @task(10)
    def book_random_slot(self):
        if not self.headers:
            return
        start = (datetime.now(timezone.utc) + timedelta(days=random.randint(1, 90))).replace(
            hour=random.randint(8, 19), minute=random.choice([0, 30]), second=0, microsecond=0
        )
        with self.client.post("/api/v1/bookings/",
            json={
                "resource_id": random.choice(RESOURCE_IDS),
                "start_time": start.isoformat(),
                "end_time": (start + timedelta(minutes=random.choice([30, 60, 90]))).isoformat(),
            },
            headers=self.headers,
            catch_response=True
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @task(3)
    def my_bookings(self):
        if self.headers:
            self.client.get("/api/v1/bookings/my", headers=self.headers)
