import pytest

from factories import add_record


@pytest.mark.asyncio
async def test_root(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to the Record Store API"}


@pytest.mark.asyncio
async def test_register_login_profile(client):
    response = await client.post("/api/register", json={
        "firstName": "Ella",
        "lastName": "Fitzgerald",
        "username": "ella",
        "email": "ella@vinylmail.com",
        "password": "a-tisket",
        "city": "Newport News",
    })
    assert response.status_code == 201
    assert response.json() == {"message": "User registered successfully"}

    response = await client.post("/api/register", json={
        "firstName": "Ella",
        "lastName": "Again",
        "username": "ella",
        "email": "ella2@vinylmail.com",
        "password": "whatever",
    })
    assert response.status_code == 409

    response = await client.post("/api/login", json={"username": "ella", "password": "wrong"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"

    response = await client.post("/api/login", json={"username": "ella", "password": "a-tisket"})
    assert response.status_code == 200
    headers = {"Authorization": f"Bearer {response.json()['token']}"}

    response = await client.get("/api/profile", headers=headers)
    assert response.status_code == 200
    profile = response.json()
    assert profile["username"] == "ella"
    assert profile["firstName"] == "Ella"
    assert profile["role"] == "user"
    assert "passwordHash" not in profile

    response = await client.put("/api/profile", headers=headers, json={"city": "Beverly Hills"})
    assert response.status_code == 200
    assert response.json()["city"] == "Beverly Hills"


@pytest.mark.asyncio
async def test_register_rejects_bad_email(client):
    response = await client.post("/api/register", json={
        "firstName": "No",
        "lastName": "Mail",
        "username": "nomail",
        "email": "not-an-email",
        "password": "secret",
    })

    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid request"}


@pytest.mark.asyncio
async def test_authentication_is_required(client):
    assert (await client.get("/api/cart")).status_code == 401
    assert (await client.get("/api/profile")).status_code == 401

    response = await client.get("/api/cart", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid or expired token"}


@pytest.mark.asyncio
@pytest.mark.parametrize("method, path", [
    ("get", "/api/admin/musicians"),
    ("get", "/api/admin/ensembles"),
    ("get", "/api/admin/tracks"),
    ("delete", "/api/admin/records/1"),
    ("get", "/api/admin/reports/bestsellers"),
    ("get", "/api/admin/reports/ensemble-tracks/1"),
])
async def test_admin_routes_need_admin_role(client, user_headers, method, path):
    assert (await client.request(method, path)).status_code == 401

    response = await client.request(method, path, headers=user_headers)
    assert response.status_code == 403
    assert response.json() == {"detail": "Admin access required"}


@pytest.mark.asyncio
async def test_catalog_is_public(client, session):
    record_id = await add_record(session, "Ellington at Newport", label="Columbia")

    response = await client.get("/api/records")
    assert response.status_code == 200
    assert [record["id"] for record in response.json()] == [record_id]

    response = await client.get(f"/api/records/{record_id}")
    assert response.status_code == 200
    assert response.json()["label"] == "Columbia"

    response = await client.get("/api/records/999")
    assert response.status_code == 404
    assert response.json() == {"detail": "Record with id 999 not found"}


@pytest.mark.asyncio
async def test_ensemble_track_flows_into_record(client, admin_headers):
    response = await client.post("/api/admin/ensembles", headers=admin_headers, json={
        "name": "Quartet A",
        "type": "quartet",
        "tracks": [{"name": "Intro", "duration": 120}],
    })
    assert response.status_code == 201
    assert response.json()["message"] == "Ensemble added successfully"
    ensemble_id = response.json()["id"]

    response = await client.get("/api/admin/tracks", headers=admin_headers)
    [track] = response.json()
    assert track["ensembleId"] == ensemble_id

    response = await client.post("/api/admin/records", headers=admin_headers, json={
        "title": "Live Set",
        "retailPrice": 18.5,
        "stock": 4,
        "trackIds": [track["id"]],
    })
    assert response.status_code == 201
    record_id = response.json()["id"]

    response = await client.get(f"/api/records/{record_id}")
    record = response.json()
    assert record["title"] == "Live Set"
    assert record["soldCurrentYear"] == 0
    assert record["tracks"] == [{
        "id": track["id"],
        "name": "Intro",
        "duration": 120,
        "musicianId": None,
        "ensembleId": ensemble_id,
        "musicianName": None,
        "ensembleName": "Quartet A",
    }]

    response = await client.get(f"/api/admin/reports/ensemble-tracks/{ensemble_id}", headers=admin_headers)
    assert response.json() == {"ensembleId": ensemble_id, "trackCount": 1}

    response = await client.get(f"/api/admin/reports/ensemble-records/{ensemble_id}", headers=admin_headers)
    assert [r["id"] for r in response.json()] == [record_id]

    response = await client.post("/api/admin/ensembles", headers=admin_headers, json={"name": "Quartet A"})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_musician_admin(client, admin_headers):
    response = await client.post("/api/admin/ensembles", headers=admin_headers, json={"name": "Big Band"})
    ensemble_id = response.json()["id"]

    response = await client.post("/api/admin/musicians", headers=admin_headers, json={
        "firstName": "Count",
        "lastName": "Basie",
        "role": "pianist",
        "ensembleId": ensemble_id,
        "tracks": [{"name": "One O'Clock Jump", "duration": 180}],
    })
    assert response.status_code == 201
    musician_id = response.json()["id"]

    response = await client.get("/api/admin/musicians", headers=admin_headers)
    assert response.json()[0]["ensembleName"] == "Big Band"

    response = await client.post("/api/admin/musicians", headers=admin_headers, json={
        "firstName": "Nobody", "lastName": "Home", "ensembleId": 999,
    })
    assert response.status_code == 404

    response = await client.delete(f"/api/admin/musicians/{musician_id}", headers=admin_headers)
    assert response.json() == {"message": "Musician deleted successfully"}
    assert (await client.get("/api/admin/tracks", headers=admin_headers)).json() == []

    response = await client.delete(f"/api/admin/ensembles/{ensemble_id}", headers=admin_headers)
    assert response.status_code == 200
    assert (await client.get("/api/admin/ensembles", headers=admin_headers)).json() == []


@pytest.mark.asyncio
async def test_record_update_and_bestsellers(client, admin_headers):
    ids = []
    for title, sold in [("Ten", 10), ("Fifty", 50), ("Five", 5)]:
        response = await client.post("/api/admin/records", headers=admin_headers, json={"title": title})
        record_id = response.json()["id"]
        response = await client.put(f"/api/admin/records/{record_id}", headers=admin_headers, json={
            "title": title, "soldCurrentYear": sold,
        })
        assert response.status_code == 200
        ids.append(record_id)

    response = await client.get("/api/admin/reports/bestsellers", headers=admin_headers)
    assert [record["soldCurrentYear"] for record in response.json()] == [50, 10, 5]

    response = await client.post("/api/admin/records", headers=admin_headers, json={"title": ""})
    assert response.status_code == 400

    response = await client.delete(f"/api/admin/records/{ids[0]}", headers=admin_headers)
    assert response.json() == {"message": "Record deleted successfully"}
    response = await client.delete(f"/api/admin/records/{ids[0]}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cart_flow(client, session, user_headers):
    record_id = await add_record(session, "Time Out")

    response = await client.post("/api/cart", headers=user_headers, json={"recordId": record_id, "quantity": 2})
    assert response.status_code == 200
    assert response.json() == {"message": "Item added to cart"}
    await client.post("/api/cart", headers=user_headers, json={"recordId": record_id, "quantity": 1})

    response = await client.get("/api/cart", headers=user_headers)
    [item] = response.json()
    assert item["quantity"] == 3
    assert item["record"]["title"] == "Time Out"

    response = await client.put(f"/api/cart/{record_id}", headers=user_headers, json={"quantity": 5})
    assert response.json() == {"message": "Cart item quantity updated"}
    assert (await client.get("/api/cart", headers=user_headers)).json()[0]["quantity"] == 5

    response = await client.put(f"/api/cart/{record_id}", headers=user_headers, json={"quantity": 0})
    assert response.json() == {"message": "Item removed from cart"}
    assert (await client.get("/api/cart", headers=user_headers)).json() == []

    response = await client.delete(f"/api/cart/{record_id}", headers=user_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cart_errors(client, user_headers):
    response = await client.post("/api/cart", headers=user_headers, json={"recordId": 1, "quantity": 0})
    assert response.status_code == 400

    response = await client.post("/api/cart", headers=user_headers, json={"recordId": 42, "quantity": 1})
    assert response.status_code == 404

    response = await client.post("/api/cart", headers=user_headers, json={"quantity": 1})
    assert response.status_code == 400

    response = await client.put("/api/cart/42", headers=user_headers, json={"quantity": -1})
    assert response.status_code == 400
