import pytest
from sqlalchemy import event

from filmorate.api import dependencies
from filmorate.config.settings import settings


def film_payload(**fields):
    payload = {
        "name": "Matrix",
        "description": "A hacker learns the truth",
        "releaseDate": "1999-03-31",
        "duration": 136,
        "mpa": {"id": 4},
        "genres": [],
    }
    payload.update(fields)
    return payload


def user_payload(login, **fields):
    payload = {
        "email": f"{login}@example.com",
        "login": login,
        "name": login.capitalize(),
        "birthday": "1990-01-01",
    }
    payload.update(fields)
    return payload


def create_user(client, login, **fields):
    response = client.post("/users", json=user_payload(login, **fields))
    assert response.status_code == 200
    return response.json()


def create_film(client, **fields):
    response = client.post("/films", json=film_payload(**fields))
    assert response.status_code == 200
    return response.json()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["dependencies"]["database"] == "healthy"


def test_genres_catalog(client):
    response = client.get("/genres")

    assert response.status_code == 200
    assert [genre["id"] for genre in response.json()] == [1, 2, 3, 4, 5, 6]
    assert client.get("/genres/1").json() == {"id": 1, "name": "Комедия"}


def test_mpa_catalog(client):
    response = client.get("/mpa")

    assert response.status_code == 200
    assert [mpa["name"] for mpa in response.json()] == ["G", "PG", "PG-13", "R", "NC-17"]
    assert client.get("/mpa/3").json() == {"id": 3, "name": "PG-13"}


@pytest.mark.parametrize("path", ["/genres/99", "/mpa/99"])
def test_unknown_catalog_entry_is_404(client, path):
    response = client.get(path)

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_create_film(client):
    film = create_film(client, genres=[{"id": 2}, {"id": 1}, {"id": 2}])

    assert film["id"] is not None
    assert film["releaseDate"] == "1999-03-31"
    assert film["mpa"] == {"id": 4, "name": "R"}
    assert film["genres"] == [{"id": 1, "name": "Комедия"}, {"id": 2, "name": "Драма"}]
    assert film["likes"] == []
    assert client.get(f"/films/{film['id']}").json() == film


def test_release_date_before_first_screening_is_rejected(client):
    response = client.post("/films", json=film_payload(releaseDate="1895-12-27"))

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_first_screening_date_is_accepted(client):
    assert create_film(client, releaseDate="1895-12-28")["releaseDate"] == "1895-12-28"


@pytest.mark.parametrize("fields", [
    {"name": " "},
    {"duration": 0},
    {"description": "x" * 201},
    {"mpa": None},
    {"mpa": {"id": 99}},
    {"genres": [{"id": 99}]},
])
def test_invalid_film_is_rejected(client, fields):
    response = client.post("/films", json=film_payload(**fields))

    assert response.status_code == 400


def test_update_film(client):
    film = create_film(client, genres=[{"id": 2}, {"id": 3}])

    response = client.put("/films", json=film_payload(
        id=film["id"], name="Matrix Reloaded", genres=[{"id": 3}, {"id": 4}]
    ))

    assert response.status_code == 200
    assert response.json()["name"] == "Matrix Reloaded"
    assert [genre["id"] for genre in response.json()["genres"]] == [3, 4]


def test_update_unknown_film_is_404(client):
    response = client.put("/films", json=film_payload(id=999))

    assert response.status_code == 404


def test_unknown_film_is_404(client):
    response = client.get("/films/999")

    assert response.status_code == 404
    assert response.json()["detail"] == "Film with id 999 not found"


def test_like_flow(client):
    user = create_user(client, "fan")
    first = create_film(client, name="First")
    second = create_film(client, name="Second")

    assert client.put(f"/films/{second['id']}/like/{user['id']}").status_code == 200

    popular = client.get("/films/popular", params={"count": 1}).json()
    assert [film["id"] for film in popular] == [second["id"]]
    assert popular[0]["likes"] == [user["id"]]

    assert client.delete(f"/films/{second['id']}/like/{user['id']}").status_code == 200
    popular = client.get("/films/popular").json()
    assert [film["id"] for film in popular] == [first["id"], second["id"]]


def test_removing_missing_like_is_ok(client):
    user = create_user(client, "fan")
    film = create_film(client)

    response = client.delete(f"/films/{film['id']}/like/{user['id']}")

    assert response.status_code == 200


def test_like_from_unknown_user_is_404(client):
    film = create_film(client)

    assert client.put(f"/films/{film['id']}/like/999").status_code == 404


def test_delete_film(client):
    film = create_film(client)

    assert client.delete(f"/films/{film['id']}").status_code == 200
    assert client.get(f"/films/{film['id']}").status_code == 404
    assert client.get("/films").json() == []


def test_create_user_with_blank_name_uses_login(client):
    user = create_user(client, "neo", name="")

    assert user["name"] == "neo"
    assert user["friends"] == []


@pytest.mark.parametrize("fields", [
    {"email": "not-an-email"},
    {"login": "with space"},
    {"birthday": "2999-01-01"},
])
def test_invalid_user_is_rejected(client, fields):
    response = client.post("/users", json={**user_payload("neo"), **fields})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_friends_flow(client):
    owner = create_user(client, "owner")
    other = create_user(client, "other")
    common = create_user(client, "common")

    client.put(f"/users/{owner['id']}/friends/{common['id']}")
    client.put(f"/users/{other['id']}/friends/{common['id']}")
    client.put(f"/users/{owner['id']}/friends/{other['id']}")

    friends = client.get(f"/users/{owner['id']}/friends").json()
    assert [user["id"] for user in friends] == [other["id"], common["id"]]
    assert client.get(f"/users/{other['id']}/friends").json()[0]["id"] == common["id"]

    response = client.get(f"/users/{owner['id']}/friends/common/{other['id']}")
    assert [user["id"] for user in response.json()] == [common["id"]]

    assert client.delete(f"/users/{owner['id']}/friends/{other['id']}").status_code == 200
    assert client.delete(f"/users/{owner['id']}/friends/{other['id']}").status_code == 200
    assert [user["id"] for user in client.get(f"/users/{owner['id']}/friends").json()] == [common["id"]]


def test_add_unknown_friend_is_404(client):
    user = create_user(client, "lonely")

    assert client.put(f"/users/{user['id']}/friends/999").status_code == 404


def test_update_user(client):
    user = create_user(client, "neo")

    response = client.put("/users", json=user_payload("neo", id=user["id"], name="Thomas Anderson"))

    assert response.status_code == 200
    assert response.json()["name"] == "Thomas Anderson"


def test_unknown_route_is_404(client):
    assert client.get("/nothing-here").status_code == 404


def test_response_carries_request_id(client):
    response = client.get("/genres", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Request-ID"] == "abc123"
    assert "X-Process-Time" in response.headers


def test_metrics_endpoint(client):
    client.get("/genres")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text


def test_memory_backend(client, engine, monkeypatch):
    checkouts = []

    def on_checkout(dbapi_connection, connection_record, connection_proxy):
        checkouts.append(connection_record)

    monkeypatch.setattr(settings, "STORAGE_BACKEND", "memory")
    dependencies.get_memory_storages.cache_clear()
    event.listen(engine, "checkout", on_checkout)
    try:
        user = create_user(client, "fan")
        film = create_film(client)
        client.put(f"/films/{film['id']}/like/{user['id']}")

        popular = client.get("/films/popular").json()
        assert popular[0]["likes"] == [user["id"]]
        assert client.get("/health").json()["dependencies"] == {"storage": "memory"}

        client.delete(f"/users/{user['id']}")
        assert client.get(f"/films/{film['id']}").json()["likes"] == []

        # База в этом режиме не используется
        assert checkouts == []
    finally:
        event.remove(engine, "checkout", on_checkout)
        dependencies.get_memory_storages.cache_clear()
