from datetime import date, timedelta

import pytest
from pydantic import ValidationError as SchemaValidationError

from filmorate.services.user_service.schemas import User
from filmorate.services.user_service.storage import InMemoryUserStorage
from filmorate.shared.exceptions import NotFoundError, ValidationError


def ids(users):
    return [user.id for user in users]


def test_blank_name_defaults_to_login(make_user):
    user = make_user("neo", name="  ")

    assert user.name == "neo"


def test_login_with_spaces_is_rejected():
    with pytest.raises(SchemaValidationError):
        User(email="neo@example.com", login="the one", birthday=date(1990, 1, 1))


def test_future_birthday_is_rejected():
    with pytest.raises(SchemaValidationError):
        User(email="neo@example.com", login="neo", birthday=date.today() + timedelta(days=1))


def test_create_and_find(user_service, make_user):
    created = make_user("trinity", email="trinity@example.com")

    found = user_service.find_by_id(created.id)

    assert found == created
    assert found.email == "trinity@example.com"
    assert found.friends == set()


def test_create_with_unknown_friend_fails(user_service, make_user):
    with pytest.raises(NotFoundError):
        make_user("lonely", friends=[404])

    assert user_service.find_all() == []


def test_update_replaces_friend_set(user_service, make_user):
    first, second, third = (make_user(login) for login in ("a", "b", "c"))
    user = make_user("owner", friends=[first.id, second.id])

    updated = user_service.update(user.model_copy(update={"friends": {second.id, third.id}}))

    assert updated.friends == {second.id, third.id}
    assert user_service.find_by_id(user.id).friends == {second.id, third.id}


def test_update_without_id_fails(user_service, make_user):
    user = make_user("neo")

    with pytest.raises(ValidationError):
        user_service.update(user.model_copy(update={"id": None}))


def test_update_unknown_user_fails(user_service, make_user):
    user = make_user("neo")

    with pytest.raises(NotFoundError):
        user_service.update(user.model_copy(update={"id": user.id + 100}))


def test_friendship_is_directed(user_service, make_user):
    first = make_user("first")
    second = make_user("second")

    user_service.add_friend(first.id, second.id)

    assert ids(user_service.get_friends(first.id)) == [second.id]
    assert user_service.get_friends(second.id) == []


def test_add_friend_twice_keeps_one_edge(user_service, make_user):
    first = make_user("first")
    second = make_user("second")

    user_service.add_friend(first.id, second.id)
    user_service.add_friend(first.id, second.id)

    assert user_service.find_by_id(first.id).friends == {second.id}


def test_add_unknown_friend_fails(user_service, make_user):
    user = make_user("first")

    with pytest.raises(NotFoundError):
        user_service.add_friend(user.id, 404)
    with pytest.raises(NotFoundError):
        user_service.add_friend(404, user.id)


def test_remove_friend(user_service, make_user):
    first = make_user("first")
    second = make_user("second")
    user_service.add_friend(first.id, second.id)

    user_service.remove_friend(first.id, second.id)

    assert user_service.get_friends(first.id) == []


def test_remove_missing_friend_is_noop(user_service, make_user):
    first = make_user("first")
    second = make_user("second")

    user_service.remove_friend(first.id, second.id)

    assert user_service.get_friends(first.id) == []


def test_friends_are_ordered_by_id(user_service, make_user):
    friends = [make_user(f"friend{i}").id for i in range(3)]
    user = make_user("owner", friends=reversed(friends))

    assert ids(user_service.get_friends(user.id)) == friends


def test_get_friends_of_unknown_user_fails(user_service):
    with pytest.raises(NotFoundError):
        user_service.get_friends(404)


def test_common_friends(user_service, make_user):
    x, y, z, w = (make_user(login) for login in ("x", "y", "z", "w"))
    first = make_user("first", friends=[x.id, y.id, z.id])
    second = make_user("second", friends=[y.id, z.id, w.id])

    assert ids(user_service.get_common_friends(first.id, second.id)) == [y.id, z.id]


def test_common_friends_without_overlap(user_service, make_user):
    x, y = make_user("x"), make_user("y")
    first = make_user("first", friends=[x.id])
    second = make_user("second", friends=[y.id])

    assert user_service.get_common_friends(first.id, second.id) == []


def test_common_friends_with_unknown_user_fails(user_service, make_user):
    user = make_user("first")

    with pytest.raises(NotFoundError):
        user_service.get_common_friends(user.id, 404)


def test_delete_user_drops_incoming_edges(user_service, make_user):
    friend = make_user("friend")
    user = make_user("owner", friends=[friend.id])

    user_service.delete(friend.id)

    assert user_service.find_by_id(user.id).friends == set()
    assert user_service.get_friends(user.id) == []
    with pytest.raises(NotFoundError):
        user_service.find_by_id(friend.id)


def test_friends_without_user_record_are_skipped():
    storage = InMemoryUserStorage()
    friend = storage.create(User(email="f@example.com", login="friend"))
    gone = storage.create(User(email="g@example.com", login="gone"))
    owner = storage.create(User(email="o@example.com", login="owner", friends={friend.id, gone.id}))

    storage._users.pop(gone.id)

    assert ids(storage.get_friends(owner.id)) == [friend.id]
    assert storage.find_by_id(owner.id).friends == {friend.id, gone.id}
