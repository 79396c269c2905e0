"""
Tests for the userdb error hierarchy.

Tests cover:
- ErrorCategory values
- ErrorContext serialization
- Default categories per subclass
- Fluent with_context and cause chaining
"""

import pytest

from userdb.core.errors import (
    ConfigError,
    ConnectionFailedError,
    ConstraintViolationError,
    DatabaseError,
    DataNotFoundError,
    ErrorCategory,
    ErrorContext,
    MigrationFailedError,
    QueryFailedError,
    UserDBError,
    ValidationError,
)


class TestErrorContext:
    def test_empty_context(self):
        assert ErrorContext().to_dict() == {}

    def test_typed_fields_only_when_set(self):
        ctx = ErrorContext(table="users", record_id=7)
        assert ctx.to_dict() == {"table": "users", "record_id": 7}

    def test_metadata_merged(self):
        ctx = ErrorContext(path="/tmp/db.sqlite")
        ctx.metadata["attempt"] = 2
        assert ctx.to_dict() == {"path": "/tmp/db.sqlite", "attempt": 2}


class TestUserDBError:
    def test_defaults(self):
        err = UserDBError("boom")
        assert err.message == "boom"
        assert str(err) == "boom"
        assert err.category == ErrorCategory.INTERNAL
        assert err.cause is None

    def test_category_override(self):
        err = UserDBError("boom", category=ErrorCategory.CONFIG)
        assert err.category == ErrorCategory.CONFIG

    def test_cause_is_chained(self):
        original = ValueError("bad")
        err = QueryFailedError("wrapped", cause=original)
        assert err.cause is original
        assert err.__cause__ is original

    def test_with_context_sets_typed_and_metadata(self):
        err = DataNotFoundError("missing").with_context(table="users", record_id=3, hint="x")
        assert err.context.table == "users"
        assert err.context.record_id == 3
        assert err.context.metadata == {"hint": "x"}

    def test_with_context_returns_self(self):
        err = QueryFailedError("q")
        assert err.with_context(table="profiles") is err

    def test_to_dict(self):
        err = ConstraintViolationError(
            "UNIQUE constraint failed: users.email", cause=RuntimeError("driver")
        ).with_context(table="users")
        d = err.to_dict()
        assert d["error_type"] == "ConstraintViolationError"
        assert d["category"] == "CONSTRAINT"
        assert d["context"] == {"table": "users"}
        assert d["cause"] == "driver"

    def test_repr(self):
        assert repr(ConnectionFailedError("no db")) == (
            "ConnectionFailedError('no db', category=CONNECTION)"
        )


class TestHierarchy:
    @pytest.mark.parametrize(
        ("cls", "category"),
        [
            (ConnectionFailedError, ErrorCategory.CONNECTION),
            (QueryFailedError, ErrorCategory.QUERY),
            (ConstraintViolationError, ErrorCategory.CONSTRAINT),
            (DataNotFoundError, ErrorCategory.NOT_FOUND),
            (ConfigError, ErrorCategory.CONFIG),
            (ValidationError, ErrorCategory.VALIDATION),
        ],
    )
    def test_default_categories(self, cls, category):
        assert cls("x").category == category

    def test_database_errors_share_base(self):
        for cls in (ConnectionFailedError, QueryFailedError, DataNotFoundError):
            assert issubclass(cls, DatabaseError)
            assert issubclass(cls, UserDBError)

    def test_constraint_is_a_query_failure(self):
        with pytest.raises(QueryFailedError):
            raise ConstraintViolationError("dup")


class TestMigrationFailedError:
    def test_names_the_migration(self):
        err = MigrationFailedError("createTables")
        assert err.migration == "createTables"
        assert err.message == "Migration failed: createTables"
        assert err.category == ErrorCategory.MIGRATION
        assert err.context.migration == "createTables"

    def test_custom_message_and_cause(self):
        cause = RuntimeError("table exists")
        err = MigrationFailedError("createTables", "schema clash", cause=cause)
        assert err.message == "schema clash"
        assert err.__cause__ is cause


class TestValidationError:
    def test_field_in_dict(self):
        err = ValidationError("name must not be empty", field="name")
        assert err.field == "name"
        assert err.to_dict()["field"] == "name"
        assert err.to_dict()["category"] == "VALIDATION"

    def test_not_a_database_error(self):
        assert not issubclass(ValidationError, DatabaseError)
