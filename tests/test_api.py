"""HTTP tests through FastAPI's TestClient."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from bookit.db.session import Database, close_db
from bookit.main import create_app
from bookit.models.experience import Experience
from bookit.models.promo_code import PromoCode


@pytest.fixture
def kayak(make_experience):
    return make_experience(title="Kayaking", location="Udupi", price=999)


@pytest.fixture
def slot(kayak, make_slot):
    return make_slot(kayak, available=4)


def payload(experience, slot, **kw):
    body = {
        "experienceId": experience.id,
        "slotId": slot.id,
        "fullName": "Asha Rao",
        "email": "asha@example.com",
    }
    body.update(kw)
    return body


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "OK"


class TestCreateBookingEndpoint:

    def test_created(self, client, kayak, slot, standard_promos, spots_left):
        r = client.post("/api/v1/bookings", json=payload(kayak, slot, quantity=2, promoCode="welcome20"))
        assert r.status_code == 201
        data = r.json()
        assert data["success"] is True
        b = data["booking"]
        assert b["bookingReference"].startswith("HUF")
        assert (b["subtotal"], b["discount"], b["taxes"], b["total"]) == (1998, 400, 160, 1758)
        assert b["promoCode"] == "welcome20"
        assert b["status"] == "confirmed"
        assert spots_left(slot.id) == 2

    def test_missing_fields(self, client, kayak, slot):
        r = client.post("/api/v1/bookings", json={"experienceId": kayak.id, "slotId": slot.id})
        assert r.status_code == 400
        assert r.json() == {"error": "Missing required fields", "kind": "INVALID_INPUT"}

    def test_malformed_quantity(self, client, kayak, slot):
        r = client.post("/api/v1/bookings", json=payload(kayak, slot, quantity="lots"))
        assert r.status_code == 400
        assert r.json()["kind"] == "INVALID_INPUT"

    def test_over_long_name_is_bad_request(self, client, kayak, slot, count_bookings):
        r = client.post("/api/v1/bookings", json=payload(kayak, slot, fullName="A" * 201))
        assert r.status_code == 400
        assert r.json()["kind"] == "INVALID_INPUT"
        assert count_bookings() == 0

    def test_unknown_slot(self, client, kayak, slot, count_bookings):
        r = client.post("/api/v1/bookings", json=payload(kayak, slot, slotId="nope"))
        assert r.status_code == 404
        assert r.json() == {"error": "Slot not found", "kind": "NOT_FOUND"}
        assert count_bookings() == 0

    def test_sold_out(self, client, kayak, slot, spots_left):
        r = client.post("/api/v1/bookings", json=payload(kayak, slot, quantity=5))
        assert r.status_code == 400
        assert r.json() == {"error": "Not enough spots available", "kind": "INSUFFICIENT_CAPACITY"}
        assert spots_left(slot.id) == 4

    def test_lookup_by_reference(self, client, kayak, slot):
        ref = client.post("/api/v1/bookings", json=payload(kayak, slot)).json()["booking"]["bookingReference"]
        r = client.get(f"/api/v1/bookings/{ref.lower()}")
        assert r.status_code == 200
        assert r.json()["bookingReference"] == ref
        assert client.get("/api/v1/bookings/HUF00000").status_code == 404


class TestPromoEndpoint:

    def test_valid(self, client, standard_promos):
        r = client.post("/api/v1/promo/validate", json={"code": "save10", "amount": 999})
        assert r.status_code == 200
        assert r.json() == {
            "valid": True,
            "code": "SAVE10",
            "discountType": "percentage",
            "discountValue": 10.0,
            "discountAmount": 100,
        }

    def test_inactive(self, client, standard_promos):
        r = client.post("/api/v1/promo/validate", json={"code": "OLD50", "amount": 999})
        assert r.status_code == 404
        assert r.json() == {"valid": False, "error": "Invalid or expired promo code"}

    def test_fixed_code_without_amount(self, client, standard_promos):
        r = client.post("/api/v1/promo/validate", json={"code": "FLAT100"})
        assert r.status_code == 200
        assert r.json()["discountAmount"] == 100

    def test_missing_code(self, client):
        r = client.post("/api/v1/promo/validate", json={"amount": 999})
        assert r.status_code == 400
        assert r.json()["kind"] == "INVALID_INPUT"


class TestCatalogEndpoints:

    def test_list_and_search(self, client, make_experience):
        make_experience(title="Kayaking", location="Udupi")
        make_experience(title="Coffee Trail", location="Coorg", description="Plantation walk")
        assert len(client.get("/api/v1/experiences").json()) == 2
        found = client.get("/api/v1/experiences", params={"search": "coorg"}).json()
        assert [e["title"] for e in found] == ["Coffee Trail"]
        found = client.get("/api/v1/experiences", params={"search": "PLANTATION"}).json()
        assert [e["title"] for e in found] == ["Coffee Trail"]

    def test_detail_includes_next_week_of_slots(self, client, kayak, make_slot):
        today = date.today()
        make_slot(kayak, on=today + timedelta(days=1), time="9:00 am - 1 pm")
        make_slot(kayak, on=today, time="11:00 am - 3 pm")
        make_slot(kayak, on=today + timedelta(days=30))
        make_slot(kayak, on=today - timedelta(days=1))
        r = client.get(f"/api/v1/experiences/{kayak.id}")
        assert r.status_code == 200
        data = r.json()
        assert data["price"] == 999
        assert [s["date"] for s in data["slots"]] == [today.isoformat(), (today + timedelta(days=1)).isoformat()]

    def test_detail_unknown(self, client):
        r = client.get("/api/v1/experiences/nope")
        assert r.status_code == 404
        assert r.json()["error"] == "Experience not found"


class TestInjectedDatabase:

    @pytest.fixture
    def own_database(self, tmp_path):
        # No global handle: every request must go through the one given to create_app()
        close_db()
        database = Database(f"sqlite:///{tmp_path / 'injected.db'}")
        database.create_all()
        with database.SessionLocal() as s:
            s.add(Experience(
                id="exp-1", title="Coffee Trail", location="Coorg", description="Plantation walk",
                price=1299, image_url="https://example.com/coffee.jpg", about="Estate tour.",
            ))
            s.add(PromoCode(id="promo-1", code="FLAT100", discount_type="fixed", discount_value=Decimal("100"), active=True))
            s.commit()
        yield database
        database.dispose()

    def test_routes_read_the_injected_database(self, own_database):
        with TestClient(create_app(database=own_database)) as c:
            found = c.get("/api/v1/experiences").json()
            assert [e["title"] for e in found] == ["Coffee Trail"]
            assert c.get("/api/v1/experiences/exp-1").status_code == 200
            r = c.post("/api/v1/promo/validate", json={"code": "flat100", "amount": 1299})
            assert r.status_code == 200
            assert r.json()["discountAmount"] == 100
