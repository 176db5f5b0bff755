"""Unit tests for the UPDATE builder."""

import pytest

from querychain.builder import Update
from querychain.exceptions import QueryError
from tests.conftest import MockConnection


@pytest.fixture
def update(connection: MockConnection) -> Update:
    return Update(connection)


def test_update_with_null(update: Update) -> None:
    update.table("profiles").set({"gender": "male", "city": None}).where(lambda col: col("user_id").equal(100))
    assert update.build() == "UPDATE profiles SET gender = ?, city = NULL WHERE user_id = ?;"
    assert update.get_values() == ["male", 100]


def test_set_values_precede_condition_values(update: Update) -> None:
    update.table("users").where(lambda col: col("id").equal(1)).set({"name": "bob", "age": 30})
    assert update.build() == "UPDATE users SET name = ?, age = ? WHERE id = ?;"
    assert update.get_values() == ["bob", 30, 1]


def test_set_replaces_previous_row(update: Update) -> None:
    update.table("users").set({"name": "a"}).set({"email": "e"}).where(lambda col: col("id").equal(1))
    assert update.build() == "UPDATE users SET email = ? WHERE id = ?;"


def test_condition_state_machine(update: Update) -> None:
    update.table("users").set({"active": 0}).where(lambda col: col("role").equal("guest")).and_().paren()
    update.where(lambda col: col("last_login").is_null().or_().in_year(2020)).paren()
    assert update.build() == (
        "UPDATE users SET active = ? WHERE role = ? AND (last_login IS NULL OR YEAR(last_login) = ?);"
    )
    assert update.get_values() == [0, "guest", 2020]


def test_build_is_repeatable(update: Update) -> None:
    update.table("users").set({"a": None, "b": 2}).where(lambda col: col("id").equal(1))
    first = (update.build(), update.get_values())
    assert (update.build(), update.get_values()) == first


def test_reset(update: Update) -> None:
    update.table("users").set({"a": 1}).where(lambda col: col("id").equal(1))
    update.reset()
    assert update.get_values() == []
    with pytest.raises(QueryError, match="Invalid UPDATE table"):
        update.build()


@pytest.mark.parametrize(
    ("call", "message"),
    [
        (lambda u: u.build(), "Invalid UPDATE table"),
        (lambda u: u.table("users").build(), "Invalid UPDATE columns"),
        (lambda u: u.table("users").set({"a": 1}).build(), "UPDATE condition is required"),
        (lambda u: u.table(""), "Invalid UPDATE table:"),
        (lambda u: u.set([("a", 1)]), "Invalid UPDATE row"),
        (lambda u: u.set({"a": object()}), "Invalid UPDATE value"),
        (lambda u: u.set({"a": False}), "Invalid UPDATE value: False"),
        (lambda u: u.where("id = 1"), "Invalid UPDATE condition: id = 1"),
        (lambda u: u.and_(), "Invalid UPDATE condition"),
        (lambda u: u.or_(), "Invalid UPDATE condition"),
        (lambda u: u.close(), "Invalid UPDATE condition"),
    ],
)
def test_invalid_input(update: Update, call, message: str) -> None:
    with pytest.raises(QueryError, match=message):
        call(update)


@pytest.mark.anyio
async def test_exec(update: Update, connection: MockConnection) -> None:
    await update.table("users").set({"name": "n"}).where(lambda col: col("id").equal(9)).exec()
    connection.query.assert_awaited_once_with("UPDATE users SET name = ? WHERE id = ?;", ["n", 9])
