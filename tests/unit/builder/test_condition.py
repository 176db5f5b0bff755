"""Unit tests for the condition builder."""

import pytest

from querychain.builder import Condition, ConditionOwner, Operator, Ref, Select, ref
from querychain.dialects import get_dialect
from querychain.exceptions import ImproperConfigurationError, QueryError
from tests.conftest import MockConnection


def where_sql(callback, driver="mysql"):
    select = Select(MockConnection(driver)).from_("users").where(callback)
    return select.build(True).split(" WHERE ", 1)[1], select.get_values()


class TestComparisons:
    def test_equal(self) -> None:
        assert where_sql(lambda col: col("city").equal("Tokyo")) == ("city = ?", ["Tokyo"])

    def test_ordering_operators(self) -> None:
        sql, values = where_sql(
            lambda col: col("age")
            .greater_than(18)
            .and_()
            .less_than(65)
            .and_()
            .col("score")
            .greater_than_or_equal(1.5)
            .and_()
            .less_than_or_equal(9)
        )
        assert sql == "age > ? AND age < ? AND score >= ? AND score <= ?"
        assert values == [18, 65, 1.5, 9]

    def test_like_between_in(self) -> None:
        sql, values = where_sql(
            lambda col: col("email").like("%@example.com").and_().col("age").between(18, 30).and_().col("id").in_(1, 2, 3)
        )
        assert sql == "email LIKE ? AND age BETWEEN ? AND ? AND id IN (?, ?, ?)"
        assert values == ["%@example.com", 18, 30, 1, 2, 3]

    def test_is_null(self) -> None:
        assert where_sql(lambda col: col("deleted_at").is_null()) == ("deleted_at IS NULL", [])

    def test_ref_is_spliced_not_bound(self) -> None:
        sql, values = where_sql(lambda col: col("orders.user_id").equal(ref("users.id")))
        assert sql == "orders.user_id = users.id"
        assert values == []

    def test_in_mixes_refs_and_values(self) -> None:
        assert where_sql(lambda col: col("id").in_(ref("parent_id"), 7)) == ("id IN (parent_id, ?)", [7])

    def test_booleans_are_rejected(self) -> None:
        with pytest.raises(QueryError, match="Invalid value: True"):
            where_sql(lambda col: col("active").equal(True))

    def test_empty_string_is_rejected(self) -> None:
        with pytest.raises(QueryError, match="Invalid value"):
            where_sql(lambda col: col("name").equal(""))

    def test_like_requires_string(self) -> None:
        with pytest.raises(QueryError, match="Invalid value: 5"):
            where_sql(lambda col: col("name").like(5))

    def test_in_requires_values(self) -> None:
        with pytest.raises(QueryError, match="Values array cannot be empty"):
            where_sql(lambda col: col("id").in_())

    def test_comparison_requires_column(self) -> None:
        def callback(col, con):
            con.equal(1)

        with pytest.raises(QueryError, match="Invalid column: None"):
            where_sql(callback)

    def test_column_name_must_be_non_empty(self) -> None:
        with pytest.raises(QueryError, match="Invalid column name"):
            where_sql(lambda col: col(""))


class TestStructure:
    def test_negation_applies_once(self) -> None:
        sql, _ = where_sql(lambda col: col("a").not_().equal(1).and_().equal(2))
        assert sql == "NOT a = ? AND a = ?"

    def test_callback_receives_condition(self) -> None:
        def callback(col, con):
            assert isinstance(con, Condition)
            col("a").equal(1)
            con.or_().col("b").is_null()

        assert where_sql(callback) == ("a = ? OR b IS NULL", [1])

    def test_nested_groups(self) -> None:
        def callback(col, con):
            con.open().col("a").equal(1).or_().open().col("b").equal(2).and_().col("c").equal(3).close().close()

        assert where_sql(callback) == ("(a = ? OR (b = ? AND c = ?))", [1, 2, 3])

    def test_paren_toggles(self) -> None:
        def callback(col, con):
            con.paren().col("a").equal(1).or_().col("b").equal(2).paren()

        assert where_sql(callback)[0] == "(a = ? OR b = ?)"

    def test_paren_closes_an_open_group(self) -> None:
        def callback(col, con):
            con.open().col("a").equal(1).paren()

        assert where_sql(callback) == ("(a = ?)", [1])

    def test_paren_does_not_nest(self) -> None:
        with pytest.raises(QueryError, match="Empty parentheses"):
            where_sql(lambda col, con: con.paren().paren().col("a").equal(1))

    def test_raw(self) -> None:
        sql, values = where_sql(lambda col, con: con.raw("LOWER(name) = ?", "bob"))
        assert sql == "LOWER(name) = ?"
        assert values == ["bob"]

    def test_raw_rejects_empty_text(self) -> None:
        with pytest.raises(QueryError, match="Invalid condition"):
            where_sql(lambda col, con: con.raw(""))

    def test_raw_rejects_invalid_value(self) -> None:
        with pytest.raises(QueryError, match="Invalid condition value"):
            where_sql(lambda col, con: con.raw("a = ?", None))

    def test_owner_must_be_a_statement(self) -> None:
        with pytest.raises(QueryError, match="Invalid query instance"):
            Condition(object())  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("callback", "message"),
    [
        (lambda col, con: con.open().col("a").equal(1), "Unmatched parentheses"),
        (lambda col, con: con.open().and_().col("a").equal(1).close(), "cannot directly follow an opening"),
        (lambda col, con: con.open().col("a").equal(1).or_().close(), "cannot directly precede a closing"),
        (lambda col, con: con.col("a").equal(1).and_().and_().equal(2), "Consecutive AND/OR"),
        (lambda col, con: con.col("a").equal(1).and_().open().close(), "Empty parentheses"),
        (lambda col, con: con.col("a").equal(1).or_(), "cannot end with an operator"),
        (lambda col, con: con.and_().col("a").equal(1), "cannot start with an operator"),
        (lambda col: None, "Condition cannot be empty"),
    ],
)
def test_build_rejects_invalid_syntax(callback, message: str) -> None:
    with pytest.raises(QueryError, match=message):
        where_sql(callback)


class TestDateParts:
    @pytest.mark.parametrize(
        ("driver", "expected"),
        [
            ("mysql", "DATE(created_at) = ?"),
            ("postgresql", "created_at::DATE = ?"),
            ("sqlite", "DATE(created_at) = ?"),
        ],
    )
    def test_in_date(self, driver: str, expected: str) -> None:
        assert where_sql(lambda col: col("created_at").in_date("2024-01-31"), driver) == (expected, ["2024-01-31"])

    @pytest.mark.parametrize(
        ("driver", "expected"),
        [
            ("mysql", "TIME(created_at) = ?"),
            ("postgresql", "TO_CHAR(created_at, 'HH24:MI:SS') = ?"),
            ("sqlite", "STRFTIME('%H:%M:%S', created_at) = ?"),
        ],
    )
    def test_in_time(self, driver: str, expected: str) -> None:
        assert where_sql(lambda col: col("created_at").in_time("10:30:00"), driver)[0] == expected

    def test_units_for_postgres(self) -> None:
        sql, values = where_sql(
            lambda col: col("ts").in_year(2024).and_().in_month(2).and_().in_day(29).and_().in_hour(0),
            "postgresql",
        )
        assert sql == (
            "EXTRACT(YEAR FROM ts) = ? AND EXTRACT(MONTH FROM ts) = ? "
            "AND EXTRACT(DAY FROM ts) = ? AND EXTRACT(HOUR FROM ts) = ?"
        )
        assert values == [2024, 2, 29, 0]

    def test_units_for_sqlite(self) -> None:
        sql, _ = where_sql(lambda col: col("ts").in_minute(59).and_().in_second(0), "sqlite")
        assert sql == "STRFTIME('%M', ts) = ? AND STRFTIME('%S', ts) = ?"

    def test_units_for_mysql(self) -> None:
        sql, _ = where_sql(lambda col: col("ts").in_year(ref("start_year")).and_().in_month(12))
        assert sql == "YEAR(ts) = start_year AND MONTH(ts) = ?"

    @pytest.mark.parametrize(
        ("method", "value"),
        [
            ("in_year", 0),
            ("in_month", 13),
            ("in_day", 0),
            ("in_hour", 24),
            ("in_minute", 60),
            ("in_second", -1),
            ("in_month", "5"),
            ("in_day", True),
        ],
    )
    def test_out_of_range(self, method: str, value: object) -> None:
        with pytest.raises(QueryError, match="Invalid"):
            where_sql(lambda col: getattr(col("ts"), method)(value))

    def test_in_date_requires_string(self) -> None:
        with pytest.raises(QueryError, match="Invalid date"):
            where_sql(lambda col: col("ts").in_date(20240131))

    def test_unknown_driver_fails_on_first_date_part(self) -> None:
        select = Select(MockConnection("oracle")).from_("users")
        with pytest.raises(ImproperConfigurationError, match="Unsupported driver kind"):
            select.where(lambda col: col("ts").in_year(2024))


class TestSubqueries:
    def test_in_subquery(self) -> None:
        sql, values = where_sql(
            lambda col: col("id").in_subquery(
                lambda q: q.from_("orders").col("user_id").where(lambda col: col("total").greater_than(100))
            )
        )
        assert sql == "id IN (SELECT user_id FROM orders WHERE total > ?)"
        assert values == [100]

    def test_exists_needs_no_column(self) -> None:
        sql, values = where_sql(
            lambda col, con: con.exists(
                lambda q: q.from_("orders").where(lambda col: col("orders.user_id").equal(ref("users.id")))
            )
        )
        assert sql == "EXISTS (SELECT * FROM orders WHERE orders.user_id = users.id)"
        assert values == []

    def test_not_exists(self) -> None:
        sql, _ = where_sql(lambda col, con: con.not_().exists(lambda q: q.from_("bans")))
        assert sql == "NOT EXISTS (SELECT * FROM bans)"

    def test_any_and_all(self) -> None:
        sql, values = where_sql(
            lambda col: col("price")
            .any(Operator.MORE, lambda q: q.from_("products").col("price").where(lambda col: col("kind").equal("a")))
            .and_()
            .all(Operator.NOT_EQUAL, lambda q: q.from_("discounts").col("price"))
        )
        assert sql == (
            "price > ANY (SELECT price FROM products WHERE kind = ?) AND price != ALL (SELECT price FROM discounts)"
        )
        assert values == ["a"]

    def test_operator_must_be_enum_member(self) -> None:
        with pytest.raises(QueryError, match="Invalid operator"):
            where_sql(lambda col: col("price").any(">", lambda q: q.from_("products")))

    def test_subquery_must_be_callable(self) -> None:
        with pytest.raises(QueryError, match="Invalid subquery"):
            where_sql(lambda col: col("id").in_subquery("SELECT 1"))

    def test_owner_must_provide_a_select(self) -> None:
        class BrokenOwner(ConditionOwner):
            @property
            def dialect(self):
                return get_dialect("mysql")

            def new_subquery(self):
                return object()

        con = Condition(BrokenOwner())
        with pytest.raises(QueryError, match="Invalid subquery provider"):
            con.exists(lambda q: q.from_("orders"))


def test_ref_requires_non_empty_string() -> None:
    with pytest.raises(QueryError, match="Invalid column reference"):
        ref("")
    assert ref("users.id") == Ref("users.id")
    assert repr(ref("users.id")) == "Ref('users.id')"
