"""
Resource Access Gateway: one scoping pattern shared by every resource family.

Each concrete gateway declares:
- `model`: the mapped class it serves,
- `resource`: its ResourceType in the rule table,
- `relations`: how `relation.field` ownership paths reach a related table.

Given those, the base class can do the two things the evaluator needs from
the store:

1. Compile a `ScopeFilter` into a SQL predicate for collection queries:

       user_id              ->  payments.user_id = :actor
       property.admin_id    ->  payments.property_id IN (
                                    SELECT properties.id FROM properties
                                    WHERE properties.admin_id = :actor)

2. Load an `Ownership` snapshot for one record through a projection query
   that selects only the columns the actor's rule paths need.

Single-record operations always follow the same order: id shape check,
ownership projection (missing -> NotFound), evaluate (Deny -> Forbidden),
then the real read or write.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, ClassVar, Generic, NamedTuple, TypeVar

from sqlalchemy import Select, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Session

from estatehub.db.base import Base, is_object_id
from estatehub.errors import Conflict, Forbidden, InvalidInput, NotFound
from estatehub.gateway.pagination import PageResult, paginate
from estatehub.policy import Effect, Operation, Ownership, ResourceType, ScopingPolicy
from estatehub.security.context import Actor
from estatehub.settings import Settings, get_settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

# Fields that must never leave the service, whoever asks.
REDACTED_IDENTITY_FIELDS = frozenset({"password_hash", "password"})


class Relation(NamedTuple):
    """`local` on this table matches `remote_key` on `remote`."""

    local: InstrumentedAttribute[Any]
    remote: type[Base]
    remote_key: InstrumentedAttribute[Any]


def require_object_id(value: Any, field: str = "id") -> str:
    if not is_object_id(value):
        raise InvalidInput(f"{field} must be a 24-character hexadecimal id", field=field)
    return value.lower()


def redact_identity(record: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in record.items() if key not in REDACTED_IDENTITY_FIELDS}


def commit_or_conflict(db: Session, conflict_message: str = "Conflicting write") -> None:
    """Commit; a unique or check constraint violation becomes a Conflict."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity conflict: %s", conflict_message)
        raise Conflict(conflict_message) from e


class ResourceGateway(Generic[ModelT]):
    model: ClassVar[type[Base]]
    resource: ClassVar[ResourceType]
    label: ClassVar[str]
    relations: ClassVar[Mapping[str, Relation]] = {}

    # Soft-deleted rows are invisible to every operation when set.
    active_column: ClassVar[str | None] = None

    def __init__(
        self,
        db: Session,
        actor: Actor,
        policy: ScopingPolicy,
        settings: Settings | None = None,
    ) -> None:
        self.db = db
        self.actor = actor
        self.policy = policy
        self.settings = settings or get_settings()

    # ---- Path support ----------------------------------------------------------------

    @classmethod
    def _has_column(cls, model: type[Base], name: str) -> bool:
        return name in model.__table__.columns

    @classmethod
    def supports_path(cls, path: str) -> bool:
        head, _, tail = path.partition(".")
        if not tail:
            return cls._has_column(cls.model, head)
        relation = cls.relations.get(head)
        return relation is not None and cls._has_column(relation.remote, tail)

    # ---- Collection scoping ----------------------------------------------------------

    def _path_clause(self, path: str, actor_id: str):
        head, _, tail = path.partition(".")
        if not tail:
            return getattr(self.model, head) == actor_id
        relation = self.relations[head]
        owned = select(relation.remote_key).where(getattr(relation.remote, tail) == actor_id)
        return relation.local.in_(owned)

    def _live(self, stmt: Select[Any]) -> Select[Any]:
        """Hide soft-deleted records."""
        if self.active_column:
            stmt = stmt.where(getattr(self.model, self.active_column).is_(True))
        return stmt

    def _base_query(self) -> Select[Any]:
        return self._live(select(self.model))

    def scoped(self, stmt: Select[Any], operation: Operation = Operation.LIST) -> Select[Any]:
        """Merge the actor's scope into a collection query, or raise Forbidden."""

        decision = self.policy.evaluate(self.actor, self.resource, operation)
        if decision.effect is Effect.DENY:
            raise Forbidden()
        if decision.filter is None:
            return stmt
        scope = decision.filter
        return stmt.where(or_(*(self._path_clause(path, scope.actor_id) for path in scope.paths)))

    def page(self, stmt: Select[Any], page: int | None, page_size: int | None) -> PageResult:
        return paginate(
            self.db,
            self.scoped(stmt),
            page,
            page_size,
            default_page_size=self.settings.default_page_size,
            max_page_size=self.settings.max_page_size,
        )

    # ---- Ownership snapshots ---------------------------------------------------------

    def _rule_paths(self, operation: Operation) -> tuple[str, ...]:
        rule = self.policy.rule_for(self.actor, self.resource, operation)
        if rule is None or rule.unrestricted:
            return ()
        return tuple(sorted(rule.paths))

    def ownership_from_values(self, values: Mapping[str, Any], paths: Iterable[str]) -> Ownership:
        """Resolve paths against column values (a stored row, or a record about to be created)."""

        resolved: dict[str, frozenset[str]] = {}
        for path in paths:
            head, _, tail = path.partition(".")
            if not tail:
                value = values.get(head)
                if value is not None:
                    resolved[path] = frozenset({value})
                continue

            relation = self.relations[head]
            local_value = values.get(relation.local.key)
            if local_value is None:
                continue
            remote_field = getattr(relation.remote, tail)
            found = self.db.scalars(select(remote_field).where(relation.remote_key == local_value)).all()
            ids = frozenset(v for v in found if v is not None)
            if ids:
                resolved[path] = ids
        return Ownership(resolved)

    def load_ownership(self, record_id: str, paths: Iterable[str]) -> Ownership | None:
        """Projection fetch of one record's ownership columns. None when no such record."""

        paths = tuple(paths)
        columns: dict[str, InstrumentedAttribute[Any]] = {"id": self.model.id}
        for path in paths:
            head, _, tail = path.partition(".")
            column = getattr(self.model, head) if not tail else self.relations[head].local
            columns[column.key] = column

        stmt = self._live(select(*columns.values()).where(self.model.id == record_id))

        row = self.db.execute(stmt).mappings().first()
        if row is None:
            return None
        return self.ownership_from_values(row, paths)

    # ---- Authorization ---------------------------------------------------------------

    def _deny(self, operation: Operation, record_id: str | None = None) -> Forbidden:
        logger.info(
            "Forbidden actor=%s role=%s resource=%s op=%s record=%s",
            self.actor.id,
            self.actor.role.value,
            self.resource.value,
            operation.value,
            record_id,
        )
        return Forbidden()

    def authorize(self, operation: Operation, record_id: Any) -> str:
        """Check one existing record. Returns the normalized id."""

        record_id = require_object_id(record_id)
        ownership = self.load_ownership(record_id, self._rule_paths(operation))
        if ownership is None:
            raise NotFound(self.label)

        decision = self.policy.evaluate(self.actor, self.resource, operation, ownership)
        if not decision.allowed:
            raise self._deny(operation, record_id)
        return record_id

    def authorize_create(self, values: Mapping[str, Any]) -> None:
        """Check a record that does not exist yet, from the values it will be stored with."""

        ownership = self.ownership_from_values(values, self._rule_paths(Operation.CREATE))
        decision = self.policy.evaluate(self.actor, self.resource, Operation.CREATE, ownership)
        if not decision.allowed:
            raise self._deny(Operation.CREATE)

    def fetch(self, record_id: str) -> ModelT:
        record = self.db.get(self.model, record_id)
        if record is None:
            raise NotFound(self.label)
        return record  # type: ignore[return-value]

    def get(self, record_id: Any) -> ModelT:
        return self.fetch(self.authorize(Operation.READ, record_id))

    # ---- Writes ----------------------------------------------------------------------

    def commit(self, conflict_message: str = "Conflicting write") -> None:
        commit_or_conflict(self.db, conflict_message)
