"""Unit tests for translating database constraint violations."""

from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from tablekeeper.core.constraints import ConstraintErrorTranslator
from tablekeeper.core.database import Base
from tablekeeper.core.exceptions import (
    EmailAlreadyTakenError,
    ForeignKeyViolationError,
    PendingRequestAlreadyExistsError,
    TableNotFoundError,
    UnknownConstraintError,
    UserAlreadyMemberOfTableError,
    UsernameAlreadyTakenError,
    UserNotFoundError,
    UserSessionIntentAlreadyExistsError,
    ValidationError,
)
from tablekeeper.shared.errors import ExceptionMapper

# Register every model on the metadata
import tablekeeper.main  # noqa: F401


class FakeDriverError(Exception):
    """Stand-in for asyncpg/psycopg exceptions carrying diagnostics."""

    def __init__(self, message: str, **attrs: object) -> None:
        super().__init__(message)
        for name, value in attrs.items():
            setattr(self, name, value)


def integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, orig)


def asyncpg_error(message: str, **attrs: object) -> IntegrityError:
    """SQLAlchemy's asyncpg adapter keeps the driver exception in __cause__."""
    adapted = Exception(message)
    adapted.__cause__ = FakeDriverError(message, **attrs)
    return integrity_error(adapted)


@pytest.fixture
def translator() -> ConstraintErrorTranslator:
    return ConstraintErrorTranslator(Base.metadata)


class TestPostgresUnique:
    @pytest.mark.parametrize(
        ("constraint", "expected"),
        [
            ("uq_users_username", UsernameAlreadyTakenError),
            ("uq_users_email", EmailAlreadyTakenError),
            ("uq_table_members_table_id_user_id", UserAlreadyMemberOfTableError),
            ("uq_session_intents_user_id_session_id", UserSessionIntentAlreadyExistsError),
            ("uq_table_requests_pending_user_id_table_id", PendingRequestAlreadyExistsError),
        ],
    )
    def test_constraint_name_from_asyncpg(self, translator, constraint, expected):
        exc = asyncpg_error(
            f'duplicate key value violates unique constraint "{constraint}"',
            sqlstate="23505",
            constraint_name=constraint,
        )

        assert isinstance(translator(exc), expected)

    def test_constraint_name_from_psycopg_diag(self, translator):
        orig = FakeDriverError(
            "duplicate key",
            pgcode="23505",
            diag=SimpleNamespace(constraint_name="uq_users_email", message_detail=None),
        )

        assert isinstance(translator(integrity_error(orig)), EmailAlreadyTakenError)

    def test_constraint_name_from_message_text(self, translator):
        orig = FakeDriverError(
            'duplicate key value violates unique constraint "uq_users_username"',
            pgcode="23505",
        )

        error = translator(integrity_error(orig))

        assert isinstance(error, UsernameAlreadyTakenError)
        assert error.status_code == 409

    def test_unmapped_constraint_is_internal_error(self, translator):
        exc = asyncpg_error("duplicate", sqlstate="23505", constraint_name="uq_something_new")

        error = translator(exc)

        assert isinstance(error, UnknownConstraintError)
        assert error.status_code == 500
        assert error.details == {}


class TestPostgresForeignKeys:
    def test_missing_user_reference(self, translator):
        exc = asyncpg_error(
            "insert or update violates foreign key constraint",
            sqlstate="23503",
            constraint_name="fk_table_members_user_id_users",
            detail='Key (user_id)=(0190...) is not present in table "users".',
        )

        assert isinstance(translator(exc), UserNotFoundError)

    def test_missing_table_reference(self, translator):
        exc = asyncpg_error(
            "insert or update violates foreign key constraint",
            sqlstate="23503",
            constraint_name="fk_table_requests_table_id_tables",
            detail='Key (table_id)=(0190...) is not present in table "tables".',
        )

        assert isinstance(translator(exc), TableNotFoundError)

    def test_other_foreign_key_violation_reports_table_and_field(self, translator):
        exc = asyncpg_error(
            "update or delete violates foreign key constraint",
            sqlstate="23503",
            constraint_name="fk_sessions_table_id_tables",
            detail='Key (id)=(0190...) is still referenced from table "sessions".',
        )

        error = translator(exc)

        assert isinstance(error, ForeignKeyViolationError)
        assert error.status_code == 400
        assert error.details == {"table": "sessions", "field": "table_id"}


class TestSqlite:
    def test_unique_resolved_by_column_signature(self, translator):
        orig = FakeDriverError("UNIQUE constraint failed: users.username")

        assert isinstance(translator(integrity_error(orig)), UsernameAlreadyTakenError)

    def test_partial_unique_index(self, translator):
        orig = FakeDriverError(
            "UNIQUE constraint failed: table_requests.user_id, table_requests.table_id"
        )

        assert isinstance(translator(integrity_error(orig)), PendingRequestAlreadyExistsError)

    def test_column_order_does_not_matter(self, translator):
        orig = FakeDriverError(
            "UNIQUE constraint failed: session_intents.session_id, session_intents.user_id"
        )

        assert isinstance(translator(integrity_error(orig)), UserSessionIntentAlreadyExistsError)

    def test_foreign_key_without_name(self, translator):
        orig = FakeDriverError("FOREIGN KEY constraint failed")

        error = translator(integrity_error(orig))

        assert isinstance(error, ForeignKeyViolationError)
        assert error.details == {}

    def test_not_null(self, translator):
        orig = FakeDriverError("NOT NULL constraint failed: users.email")

        error = translator(integrity_error(orig))

        assert isinstance(error, ValidationError)
        assert error.details == {"field": "email"}

    def test_check_constraint(self, translator):
        orig = FakeDriverError("CHECK constraint failed: ck_tables_player_slots_positive")

        error = translator(integrity_error(orig))

        assert isinstance(error, ValidationError)
        assert error.details == {"constraint": "ck_tables_player_slots_positive"}

    def test_unknown_message(self, translator):
        error = translator(integrity_error(FakeDriverError("something odd")))

        assert isinstance(error, UnknownConstraintError)


def test_translator_is_registered_for_integrity_errors():
    exc = integrity_error(FakeDriverError("UNIQUE constraint failed: users.email"))

    assert isinstance(ExceptionMapper.handler_for(exc), ConstraintErrorTranslator)
    assert isinstance(ExceptionMapper.map(exc, "UserRepository.add"), EmailAlreadyTakenError)
