from filmorate.shared.exceptions import DatabaseError, NotFoundError, ValidationError


def test_not_found_error():
    error = NotFoundError("Film", 5)

    assert error.status_code == 404
    assert error.message == "Film with id 5 not found"
    assert error.to_dict() == {
        "detail": "Film with id 5 not found",
        "code": "NOT_FOUND",
        "status_code": 404,
        "resource": "Film",
        "resource_id": 5,
    }


def test_validation_error_keeps_field_errors():
    error = ValidationError("Genre with id 99 not found", errors=[{"field": "genres", "id": 99}])

    assert error.status_code == 400
    assert error.to_dict()["errors"] == [{"field": "genres", "id": 99}]


def test_database_error_is_internal():
    error = DatabaseError("Failed to create film")

    assert error.status_code == 500
    assert error.to_dict()["code"] == "DATABASE_ERROR"
