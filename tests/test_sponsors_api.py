"""API tests for sponsors and partners."""

from fastapi.testclient import TestClient

from tests.factories import ids_of, sponsor_payload


def _create(client: TestClient, name: str, sponsor_type: str = "sponsor", **overrides) -> dict:
    response = client.post("/api/sponsors", json=sponsor_payload(name, sponsor_type, **overrides))
    assert response.status_code == 201
    return response.json()


def test_types_are_ordered_independently(client: TestClient) -> None:
    acme = _create(client, "Acme")
    globex = _create(client, "Globex", "partner")
    initech = _create(client, "Initech")
    assert (acme["order"], globex["order"], initech["order"]) == (0, 0, 1)

    grouped = client.get("/api/sponsors").json()
    assert ids_of(grouped["sponsors"]) == ids_of([acme, initech])
    assert ids_of(grouped["partners"]) == ids_of([globex])
    assert client.get("/api/sponsors/active").json() == grouped


def test_admin_listing_orders_types_then_inactive(client: TestClient) -> None:
    acme = _create(client, "Acme")
    globex = _create(client, "Globex", "partner")
    hidden = _create(client, "Hidden", active=False)

    listing = client.get("/api/sponsors/admin").json()
    assert ids_of(listing) == ids_of([acme, globex, hidden])


def test_changing_type_moves_between_sequences(client: TestClient) -> None:
    acme = _create(client, "Acme")
    initech = _create(client, "Initech")
    _create(client, "Globex", "partner")

    response = client.put(f"/api/sponsors/{acme['_id']}", json={"type": "partner"})
    assert response.status_code == 200
    assert response.json()["order"] == 1

    grouped = client.get("/api/sponsors").json()
    assert [(sponsor["_id"], sponsor["order"]) for sponsor in grouped["sponsors"]] == [(initech["_id"], 0)]
    assert [partner["order"] for partner in grouped["partners"]] == [0, 1]


def test_move_within_type(client: TestClient) -> None:
    first = _create(client, "First")
    second = _create(client, "Second")
    partner = _create(client, "Partner", "partner")

    response = client.patch(f"/api/sponsors/{second['_id']}/order", json={"order": 0})
    assert response.status_code == 200
    assert ids_of(response.json()) == ids_of([second, first, partner])


def test_move_target_is_bounded_by_own_type(client: TestClient) -> None:
    first = _create(client, "First")
    _create(client, "Partner A", "partner")
    _create(client, "Partner B", "partner")

    response = client.patch(f"/api/sponsors/{first['_id']}/order", json={"order": 1})
    assert response.status_code == 400


def test_batch_reorder_uses_scope_of_listed_records(client: TestClient) -> None:
    a = _create(client, "A", "partner")
    b = _create(client, "B", "partner")
    _create(client, "Sponsor")

    response = client.put("/api/sponsors/reorder/batch", json={"ids": [b["_id"], a["_id"]]})
    assert response.status_code == 200
    assert ids_of(response.json()) == [b["_id"], a["_id"]]


def test_batch_reorder_rejects_empty_list(client: TestClient) -> None:
    response = client.put("/api/sponsors/reorder/batch", json={"ids": []})
    assert response.status_code == 400


def test_invalid_type_and_website(client: TestClient) -> None:
    response = client.post(
        "/api/sponsors",
        json=sponsor_payload("Bad", "donor", website="not a url"),
    )
    assert response.status_code == 400
    fields = {detail["field"] for detail in response.json()["details"]}
    assert fields == {"type", "website"}
