from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from filmorate.api.dependencies import Storages
from filmorate.api.main import app
from filmorate.config.database import get_db, init_db
from filmorate.services.catalog_service.schemas import Genre, Mpa
from filmorate.services.catalog_service.storage import (
    genre_db_storage, mpa_db_storage, genre_memory_storage, mpa_memory_storage
)
from filmorate.services.film_service.schemas import Film
from filmorate.services.film_service.service import FilmService
from filmorate.services.film_service.storage import FilmDbStorage, InMemoryFilmStorage
from filmorate.services.user_service.schemas import User
from filmorate.services.user_service.service import UserService
from filmorate.services.user_service.storage import UserDbStorage, InMemoryUserStorage


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(params=["db", "memory"])
def storages(request, db):
    """Обе реализации хранилищ через один и тот же контракт."""
    if request.param == "memory":
        return Storages(
            films=InMemoryFilmStorage(),
            users=InMemoryUserStorage(),
            genres=genre_memory_storage(),
            mpa=mpa_memory_storage()
        )
    return Storages(
        films=FilmDbStorage(db),
        users=UserDbStorage(db),
        genres=genre_db_storage(db),
        mpa=mpa_db_storage(db)
    )


@pytest.fixture
def film_service(storages):
    return FilmService(storages.films, storages.users, storages.genres, storages.mpa)


@pytest.fixture
def user_service(storages):
    return UserService(storages.users, storages.films)


@pytest.fixture
def make_user(user_service):
    def _make_user(login, friends=(), **fields):
        return user_service.create(User(
            email=fields.pop("email", f"{login}@example.com"),
            login=login,
            name=fields.pop("name", login.capitalize()),
            birthday=fields.pop("birthday", date(1990, 1, 1)),
            friends=set(friends),
            **fields
        ))
    return _make_user


@pytest.fixture
def make_film(film_service):
    def _make_film(name="Film", mpa=1, genres=(), likes=(), **fields):
        return film_service.create(Film(
            name=name,
            description=fields.pop("description", f"{name} description"),
            release_date=fields.pop("release_date", date(2000, 1, 1)),
            duration=fields.pop("duration", 120),
            mpa=Mpa(id=mpa) if mpa is not None else None,
            genres=[Genre(id=genre_id) for genre_id in genres],
            likes=set(likes),
            **fields
        ))
    return _make_film


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
