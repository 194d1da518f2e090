# tests/test_requests.py
import uuid

import pytest


def create_request(client, journalist, car_id, **extra):
    return client.post("/api/requests", json={"carId": car_id, **extra}, headers=journalist["headers"])


def set_status(client, owner, request_id, status, **extra):
    return client.put(f"/api/requests/{request_id}/status", json={"status": status, **extra},
                      headers=owner["headers"])


def test_create_request_copies_owner_and_starts_pending(client, owner, journalist, car):
    resp = create_request(client, journalist, car["id"], message="For my review column",
                          requestedDateTime="2026-11-02T10:00:00Z")
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "Pending"
    assert body["ownerId"] == owner["id"]
    assert body["journalistId"] == journalist["id"]
    assert body["carId"] == car["id"]
    assert body["message"] == "For my review column"

    # creating a request does not touch the listing's availability
    assert client.get(f"/api/cars/{car['id']}").json()["isAvailable"] is True


def test_unavailable_car_is_rejected(client, owner, journalist, car):
    client.patch(f"/api/cars/{car['id']}/toggle-availability", headers=owner["headers"])
    resp = create_request(client, journalist, car["id"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "This car is currently not available for test drives"


def test_cannot_request_own_car(app, client, db, journalist):
    # a journalist who somehow owns a listing still cannot request it
    from testdrive import crud
    from testdrive.models import FuelType, Transmission
    own = crud.create_car(db, {
        "owner_id": journalist["id"], "make": "Fiat", "model": "500", "year": 2015,
        "color": "White", "price": 20, "mileage": 80000, "transmission": Transmission.MANUAL,
        "fuel_type": FuelType.PETROL, "description": "City car", "location": "Pune",
    })
    resp = create_request(client, journalist, own.id)
    assert resp.status_code == 400
    assert resp.json()["message"] == "You cannot request a test drive for your own car"

    crud.update_car(db, own, {"is_available": False})
    resp = create_request(client, journalist, own.id)
    assert resp.status_code == 400


def test_unknown_and_malformed_car_ids(client, journalist):
    assert create_request(client, journalist, str(uuid.uuid4())).status_code == 404
    resp = create_request(client, journalist, "not-an-id")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid car ID format"


def test_only_journalists_create_requests(client, owner, other_owner, car):
    resp = create_request(client, other_owner, car["id"])
    assert resp.status_code == 403
    assert "Journalist" in resp.json()["message"]


def test_duplicate_active_request_conflicts_until_resolved(client, owner, journalist, car):
    first = create_request(client, journalist, car["id"]).json()
    dup = create_request(client, journalist, car["id"])
    assert dup.status_code == 409
    assert dup.json()["message"] == "You already have an active test drive request for this car."

    assert set_status(client, owner, first["id"], "Approved").status_code == 200
    assert create_request(client, journalist, car["id"]).status_code == 409

    assert set_status(client, owner, first["id"], "Completed").status_code == 200
    again = create_request(client, journalist, car["id"])
    assert again.status_code == 201


def test_request_allowed_again_after_rejection_or_withdrawal(client, owner, journalist, car):
    first = create_request(client, journalist, car["id"]).json()
    set_status(client, owner, first["id"], "Rejected")
    second = create_request(client, journalist, car["id"]).json()
    client.delete(f"/api/requests/{second['id']}", headers=journalist["headers"])
    assert create_request(client, journalist, car["id"]).status_code == 201


def test_different_journalists_may_request_same_car(client, journalist, other_journalist, car):
    assert create_request(client, journalist, car["id"]).status_code == 201
    assert create_request(client, other_journalist, car["id"]).status_code == 201


def test_incoming_and_outgoing_lists_newest_first(client, owner, journalist, make_car):
    older = make_car(owner, model="Corolla")
    newer = make_car(owner, model="Camry")
    r1 = create_request(client, journalist, older["id"]).json()
    r2 = create_request(client, journalist, newer["id"]).json()

    incoming = client.get("/api/requests/incoming", headers=owner["headers"])
    assert incoming.status_code == 200
    assert [r["id"] for r in incoming.json()] == [r2["id"], r1["id"]]
    assert incoming.json()[0]["journalist"]["name"] == "Jane Journalist"
    assert incoming.json()[0]["car"]["model"] == "Camry"

    outgoing = client.get("/api/requests/outgoing", headers=journalist["headers"])
    assert [r["id"] for r in outgoing.json()] == [r2["id"], r1["id"]]
    assert outgoing.json()[0]["owner"]["email"] == "olivia@example.com"
    assert outgoing.json()[0]["car"]["isAvailable"] is True


def test_list_endpoints_are_role_restricted(client, owner, journalist):
    assert client.get("/api/requests/incoming", headers=journalist["headers"]).status_code == 403
    assert client.get("/api/requests/outgoing", headers=owner["headers"]).status_code == 403


def test_get_by_id_only_for_participants(client, owner, other_owner, journalist, other_journalist, car):
    req = create_request(client, journalist, car["id"]).json()
    for participant in (journalist, owner):
        resp = client.get(f"/api/requests/{req['id']}", headers=participant["headers"])
        assert resp.status_code == 200
        assert resp.json()["car"]["description"] == "Well kept sports coupe"
        assert resp.json()["owner"]["id"] == owner["id"]
    for outsider in (other_owner, other_journalist):
        resp = client.get(f"/api/requests/{req['id']}", headers=outsider["headers"])
        assert resp.status_code == 403
    missing = client.get(f"/api/requests/{uuid.uuid4()}", headers=owner["headers"])
    assert missing.status_code == 404


def test_update_status_only_by_request_owner(client, owner, other_owner, journalist, car):
    req = create_request(client, journalist, car["id"]).json()
    # the journalist holds the wrong role; another owner is the wrong owner
    assert set_status(client, journalist, req["id"], "Approved").status_code == 403
    resp = set_status(client, other_owner, req["id"], "Approved")
    assert resp.status_code == 403
    assert resp.json()["message"] == "User not authorized to update this request"


def test_update_status_validates_value(client, owner, journalist, car):
    req = create_request(client, journalist, car["id"]).json()
    for bad in ("Pending", "Cancelled", None):
        resp = set_status(client, owner, req["id"], bad)
        assert resp.status_code == 400
        assert resp.json()["message"].startswith("Invalid status")


def test_owner_response_is_kept_unless_overwritten(client, owner, journalist, car):
    req = create_request(client, journalist, car["id"]).json()
    resp = set_status(client, owner, req["id"], "Approved", ownerResponse="See you Saturday")
    assert resp.json()["ownerResponse"] == "See you Saturday"
    assert resp.json()["journalist"]["email"] == "jane@example.com"
    resp = set_status(client, owner, req["id"], "Completed")
    assert resp.json()["ownerResponse"] == "See you Saturday"


def test_any_target_status_is_accepted_from_terminal_states(client, owner, journalist, car):
    req = create_request(client, journalist, car["id"]).json()
    assert set_status(client, owner, req["id"], "Rejected").json()["status"] == "Rejected"
    assert set_status(client, owner, req["id"], "Completed").json()["status"] == "Completed"


def test_check_active_round_trip(client, owner, journalist, car):
    req = create_request(client, journalist, car["id"]).json()
    resp = client.get(f"/api/requests/check/{car['id']}", headers=journalist["headers"])
    assert resp.status_code == 200
    assert resp.json()["id"] == req["id"]

    set_status(client, owner, req["id"], "Rejected")
    resp = client.get(f"/api/requests/check/{car['id']}", headers=journalist["headers"])
    assert resp.status_code == 404


def test_full_lifecycle_then_withdraw_fails(client, owner, journalist, car):
    req = create_request(client, journalist, car["id"]).json()
    assert set_status(client, owner, req["id"], "Approved").json()["status"] == "Approved"
    assert set_status(client, owner, req["id"], "Completed").json()["status"] == "Completed"
    resp = client.delete(f"/api/requests/{req['id']}", headers=journalist["headers"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot withdraw a request that is already Completed"


def test_withdraw_pending_deletes_request(client, journalist, car):
    req = create_request(client, journalist, car["id"]).json()
    resp = client.delete(f"/api/requests/{req['id']}", headers=journalist["headers"])
    assert resp.status_code == 200
    assert resp.json()["requestId"] == req["id"]
    assert resp.json()["carId"] == car["id"]
    assert client.get(f"/api/requests/{req['id']}", headers=journalist["headers"]).status_code == 404


@pytest.mark.parametrize("status", ["Approved", "Rejected"])
def test_withdraw_requires_pending(client, owner, journalist, car, status):
    req = create_request(client, journalist, car["id"]).json()
    set_status(client, owner, req["id"], status)
    resp = client.delete(f"/api/requests/{req['id']}", headers=journalist["headers"])
    assert resp.status_code == 400
    assert resp.json()["message"] == f"Cannot withdraw a request that is already {status}"


def test_withdraw_only_by_requesting_journalist(client, owner, journalist, other_journalist, car):
    req = create_request(client, journalist, car["id"]).json()
    assert client.delete(f"/api/requests/{req['id']}", headers=other_journalist["headers"]).status_code == 403
    # owners are stopped by the role check
    assert client.delete(f"/api/requests/{req['id']}", headers=owner["headers"]).status_code == 403
