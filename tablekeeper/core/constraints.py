"""
Перевод нарушений ограничений БД в доменные ошибки.

Уникальность username/email, членства и намерений, а также единственность
pending-заявки не проверяются заранее: их гарантирует хранилище, а этот
модуль превращает IntegrityError в типизированную ошибку.

Имя ограничения берётся из исключения драйвера (asyncpg, psycopg) или
из текста ошибки PostgreSQL. SQLite имён не сообщает, поэтому для него
ограничение восстанавливается по таблице и набору колонок из метаданных.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Index, MetaData, UniqueConstraint
from sqlalchemy.exc import IntegrityError

from tablekeeper.shared.errors import AppError, ExceptionMapper, ValidationError
from tablekeeper.shared.logging import log_unknown_constraint

from .exceptions import (
    EmailAlreadyTakenError,
    ForeignKeyViolationError,
    PendingRequestAlreadyExistsError,
    SessionIntentNotFoundError,
    SessionNotFoundError,
    TableNotFoundError,
    UnknownConstraintError,
    UserAlreadyMemberOfTableError,
    UsernameAlreadyTakenError,
    UserNotFoundError,
    UserSessionIntentAlreadyExistsError,
)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
CHECK_VIOLATION = "23514"

# Ошибки для нарушений уникальности по имени ограничения
UNIQUE_RULES: dict[str, type[AppError]] = {
    "uq_users_username": UsernameAlreadyTakenError,
    "uq_users_email": EmailAlreadyTakenError,
    "uq_table_members_table_id_user_id": UserAlreadyMemberOfTableError,
    "uq_session_intents_user_id_session_id": UserSessionIntentAlreadyExistsError,
    "uq_table_requests_pending_user_id_table_id": PendingRequestAlreadyExistsError,
}

# Ошибки "не найдено" по таблице, на которую ссылается внешний ключ
REFERENCED_NOT_FOUND: dict[str, type[AppError]] = {
    "users": UserNotFoundError,
    "tables": TableNotFoundError,
    "sessions": SessionNotFoundError,
    "session_intents": SessionIntentNotFoundError,
}

_PG_CONSTRAINT = re.compile(r'constraint "(?P<name>[^"]+)"')
_SQLITE_COLUMNS = re.compile(
    r"(?P<kind>UNIQUE|NOT NULL|CHECK) constraint failed: (?P<target>[^\n\[]+)"
)


@dataclass(frozen=True)
class ForeignKeyInfo:
    table: str
    field: str
    referred_table: str


@dataclass(frozen=True)
class Violation:
    """Распознанное нарушение ограничения."""

    kind: str  # unique | foreign_key | not_null | check | unknown
    constraint: str | None = None
    table: str | None = None
    columns: tuple[str, ...] = ()
    missing_reference: bool = False


class ConstraintErrorTranslator:
    """
    Обработчик IntegrityError для ExceptionMapper.

    Правила для внешних ключей и сигнатуры уникальных ограничений
    для SQLite строятся из метаданных при первом использовании.
    """

    def __init__(
        self,
        metadata: MetaData,
        unique_rules: dict[str, type[AppError]] | None = None,
        referenced_not_found: dict[str, type[AppError]] | None = None,
    ) -> None:
        self._metadata = metadata
        self._unique_rules = UNIQUE_RULES if unique_rules is None else unique_rules
        self._referenced = (
            REFERENCED_NOT_FOUND if referenced_not_found is None else referenced_not_found
        )
        self._foreign_keys: dict[str, ForeignKeyInfo] | None = None
        self._unique_signatures: dict[tuple[str, frozenset[str]], str] | None = None

    def __call__(self, exc: IntegrityError, func_name: str = "") -> AppError:
        return self.translate(exc, func_name)

    # ---------- построение правил ----------

    def _load_schema(self) -> None:
        foreign_keys: dict[str, ForeignKeyInfo] = {}
        signatures: dict[tuple[str, frozenset[str]], str] = {}

        for table in self._metadata.tables.values():
            for fk in table.foreign_key_constraints:
                if fk.name is None:
                    continue
                foreign_keys[str(fk.name)] = ForeignKeyInfo(
                    table=table.name,
                    field=fk.column_keys[0],
                    referred_table=fk.referred_table.name,
                )
            for constraint in table.constraints:
                if isinstance(constraint, UniqueConstraint) and constraint.name:
                    columns = frozenset(col.name for col in constraint.columns)
                    signatures[(table.name, columns)] = str(constraint.name)
            for index in table.indexes:
                if isinstance(index, Index) and index.unique and index.name:
                    columns = frozenset(col.name for col in index.columns)
                    signatures[(table.name, columns)] = str(index.name)

        self._foreign_keys = foreign_keys
        self._unique_signatures = signatures

    @property
    def foreign_keys(self) -> dict[str, ForeignKeyInfo]:
        if self._foreign_keys is None:
            self._load_schema()
        return self._foreign_keys  # type: ignore[return-value]

    @property
    def unique_signatures(self) -> dict[tuple[str, frozenset[str]], str]:
        if self._unique_signatures is None:
            self._load_schema()
        return self._unique_signatures  # type: ignore[return-value]

    # ---------- разбор исключения ----------

    @staticmethod
    def _driver_errors(exc: IntegrityError) -> list[Any]:
        """Исключение DBAPI и его причина (asyncpg хранит детали в __cause__)."""
        orig = exc.orig
        errors = [orig]
        cause = getattr(orig, "__cause__", None)
        if cause is not None:
            errors.append(cause)
        return [err for err in errors if err is not None]

    def inspect(self, exc: IntegrityError) -> Violation:
        """Определить тип нарушения и имя ограничения."""
        driver_errors = self._driver_errors(exc)

        sqlstate = None
        constraint = None
        detail = ""
        for err in driver_errors:
            sqlstate = sqlstate or getattr(err, "sqlstate", None) or getattr(err, "pgcode", None)
            constraint = constraint or getattr(err, "constraint_name", None)
            diag = getattr(err, "diag", None)
            if diag is not None:
                constraint = constraint or getattr(diag, "constraint_name", None)
                detail = detail or (getattr(diag, "message_detail", None) or "")
            detail = detail or (getattr(err, "detail", None) or "")

        message = " ".join(str(err) for err in driver_errors) or str(exc)
        if constraint is None:
            match = _PG_CONSTRAINT.search(message)
            if match:
                constraint = match.group("name")

        missing_reference = "is not present in table" in f"{detail} {message}"

        if sqlstate == UNIQUE_VIOLATION:
            return Violation("unique", constraint)
        if sqlstate == FOREIGN_KEY_VIOLATION:
            return Violation("foreign_key", constraint, missing_reference=missing_reference)
        if sqlstate in (NOT_NULL_VIOLATION, CHECK_VIOLATION):
            kind = "not_null" if sqlstate == NOT_NULL_VIOLATION else "check"
            column = getattr(driver_errors[-1], "column_name", None)
            return Violation(kind, constraint, columns=(column,) if column else ())

        return self._inspect_sqlite(message, constraint)

    def _inspect_sqlite(self, message: str, constraint: str | None) -> Violation:
        if "FOREIGN KEY constraint failed" in message:
            return Violation("foreign_key", constraint)

        match = _SQLITE_COLUMNS.search(message)
        if match is None:
            if "duplicate key" in message:
                return Violation("unique", constraint)
            return Violation("unknown", constraint)

        kind = match.group("kind")
        target = match.group("target").strip()

        if kind == "CHECK":
            return Violation("check", constraint or target)

        pairs = [part.strip().split(".", 1) for part in target.split(",")]
        table = pairs[0][0] if pairs and len(pairs[0]) == 2 else None
        columns = tuple(pair[1] for pair in pairs if len(pair) == 2)

        if kind == "NOT NULL":
            return Violation("not_null", constraint, table=table, columns=columns)

        if constraint is None and table is not None:
            constraint = self.unique_signatures.get((table, frozenset(columns)))
        return Violation("unique", constraint, table=table, columns=columns)

    # ---------- перевод ----------

    def translate(self, exc: IntegrityError, func_name: str = "") -> AppError:
        violation = self.inspect(exc)

        if violation.kind == "unique":
            error_cls = self._unique_rules.get(violation.constraint or "")
            if error_cls is not None:
                return error_cls()

        elif violation.kind == "foreign_key":
            fk = self.foreign_keys.get(violation.constraint or "")
            if fk is not None:
                error_cls = self._referenced.get(fk.referred_table)
                if violation.missing_reference and error_cls is not None:
                    return error_cls()
                return ForeignKeyViolationError(details={"table": fk.table, "field": fk.field})
            if violation.constraint is None:
                # SQLite не сообщает, какой ключ нарушен
                return ForeignKeyViolationError()

        elif violation.kind == "not_null":
            field = violation.columns[0] if violation.columns else None
            return ValidationError(
                message="Required field is missing",
                details={"field": field} if field else None,
            )

        elif violation.kind == "check":
            return ValidationError(
                message="Value violates a check constraint",
                details={"constraint": violation.constraint} if violation.constraint else None,
            )

        log_unknown_constraint(violation.constraint, func_name)
        return UnknownConstraintError()


def install_constraint_translator(
    metadata: MetaData,
) -> Callable[[IntegrityError, str], AppError]:
    """Зарегистрировать переводчик как обработчик IntegrityError."""
    translator = ConstraintErrorTranslator(metadata)
    ExceptionMapper.register(IntegrityError)(translator)
    return translator
