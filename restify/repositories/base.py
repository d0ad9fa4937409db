"""
Repository base class.

A repository maps an HTTP-addressable URI key to a SQLAlchemy model and owns
the CRUD behavior the generated endpoints dispatch to. Subclasses declare the
backing `model` and optionally override keys, labels, authorization hooks,
validation schemas and actions.
"""
from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ValidationError
from sqlalchemy import func, inspect as sa_inspect, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from restify.exceptions import ModelNotFound, ValidationFailed
from restify.utils.strings import humanize, kebab, pluralize


class Repository:
    __abstract__ = True

    model: ClassVar[Any] = None
    uri: ClassVar[Optional[str]] = None
    route_prefix: ClassVar[Optional[str]] = None
    label_name: ClassVar[Optional[str]] = None
    globally_searchable: ClassVar[bool] = True
    global_search_limit: ClassVar[int] = 5
    search_fields: ClassVar[Tuple[str, ...]] = ()
    title_field: ClassVar[Optional[str]] = None
    schema: ClassVar[Optional[type[BaseModel]]] = None
    update_schema: ClassVar[Optional[type[BaseModel]]] = None
    mock: ClassVar[Optional["Repository"]] = None

    def __init__(self, resource: Any = None):
        self.resource = resource

    # ------------------------------------------------------------------
    # Descriptor
    # ------------------------------------------------------------------
    @classmethod
    def uri_key(cls) -> str:
        if cls.uri:
            return cls.uri
        name = cls.__name__
        if name.endswith("Repository") and name != "Repository":
            name = name[: -len("Repository")]
        return pluralize(kebab(name))

    @classmethod
    def prefix(cls) -> Optional[str]:
        return cls.route_prefix.strip("/") if cls.route_prefix else None

    @classmethod
    def route(cls) -> str:
        return cls.prefix() or cls.uri_key()

    @classmethod
    def label(cls) -> str:
        return cls.label_name or humanize(cls.uri_key())

    @classmethod
    def model_name(cls) -> Optional[str]:
        return cls.model.__name__ if cls.model is not None else None

    @classmethod
    def model_type(cls) -> Optional[str]:
        if cls.model is None:
            return None
        return f"{cls.model.__module__}.{cls.model.__qualname__}"

    @classmethod
    def new_model(cls):
        if cls.model is None:
            raise TypeError(f"{cls.__name__} does not declare a model")
        return cls.model()

    @classmethod
    def resolve_with(cls, model) -> "Repository":
        return cls(model)

    @classmethod
    def resolve(cls) -> "Repository":
        """The mock when one is set, else an instance bound to a fresh model."""
        if cls.is_mock():
            return cls.get_mock()
        return cls.resolve_with(cls.new_model())

    # Mocks are returned by the registry instead of a fresh instance.
    @classmethod
    def is_mock(cls) -> bool:
        return cls.__dict__.get("mock") is not None

    @classmethod
    def get_mock(cls) -> Optional["Repository"]:
        return cls.__dict__.get("mock")

    @classmethod
    def set_mock(cls, instance: "Repository") -> None:
        cls.mock = instance

    @classmethod
    def clear_mock(cls) -> None:
        cls.mock = None

    @classmethod
    def boot(cls, registry) -> None:
        """Hook invoked once when the repository is registered."""

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------
    @classmethod
    def authorized_to_use_repository(cls, request) -> bool:
        return True

    def authorized_to_show(self, request, resource) -> bool:
        return True

    def authorized_to_store(self, request) -> bool:
        return True

    def authorized_to_update(self, request, resource) -> bool:
        return True

    def authorized_to_delete(self, request, resource) -> bool:
        return True

    def actions(self, request) -> List[Any]:
        return []

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    @classmethod
    def columns(cls) -> List[str]:
        return [attr.key for attr in sa_inspect(cls.model).mapper.column_attrs]

    @classmethod
    def primary_key(cls) -> str:
        return sa_inspect(cls.model).mapper.primary_key[0].key

    @classmethod
    def coerce_key(cls, value: Any) -> Any:
        column = sa_inspect(cls.model).mapper.primary_key[0]
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            return value
        if isinstance(value, python_type):
            return value
        try:
            return python_type(value)
        except (TypeError, ValueError):
            raise ModelNotFound(cls.uri_key(), value)

    def find(self, db: Session, record_id: Any):
        record = db.get(self.model, self.coerce_key(record_id))
        if record is None:
            raise ModelNotFound(self.uri_key(), record_id)
        return record

    def find_many(self, db: Session, record_ids: Union[str, Sequence[Any]]) -> list:
        """Records for a list of primary keys, or every record for `"all"`."""
        column = getattr(self.model, self.primary_key())
        if record_ids == "all":
            return list(db.scalars(select(self.model).order_by(column)))
        if not isinstance(record_ids, (list, tuple)) or not all(
            isinstance(value, (int, str)) and not isinstance(value, bool) for value in record_ids
        ):
            raise ValidationFailed([{
                "loc": ["body", "repositories"],
                "msg": "Expected a list of ids or 'all'.",
                "type": "list_type",
            }])
        if not record_ids:
            return []
        keys = [self.coerce_key(value) for value in record_ids]
        return list(db.scalars(select(self.model).where(column.in_(keys))))

    def search_query(self, query, term: Optional[str]):
        """Narrow `query` to rows whose search fields contain `term` (case-insensitive)."""
        if not term or not self.search_fields:
            return query
        needle = f"%{term.lower()}%"
        clauses = [func.lower(getattr(self.model, field)).like(needle) for field in self.search_fields]
        return query.where(or_(*clauses))

    def index(self, db: Session, *, page: int = 1, per_page: int = 15, search: Optional[str] = None) -> Dict[str, Any]:
        base = self.search_query(select(self.model), search)
        total = db.scalar(select(func.count()).select_from(base.subquery())) or 0
        order_column = getattr(self.model, self.primary_key())
        rows = db.scalars(
            base.order_by(order_column).offset((page - 1) * per_page).limit(per_page)
        ).all()
        last_page = max(1, -(-total // per_page))
        return {
            "data": [self.serialize(row) for row in rows],
            "meta": {
                "current_page": page,
                "per_page": per_page,
                "total": total,
                "last_page": last_page,
            },
        }

    def global_search(self, db: Session, term: str) -> List[Dict[str, Any]]:
        if not self.search_fields:
            return []
        pk = self.primary_key()
        query = (
            self.search_query(select(self.model), term)
            .order_by(getattr(self.model, pk))
            .limit(self.global_search_limit)
        )
        title_field = self.title_field or pk
        return [
            {
                "repository": self.uri_key(),
                "label": self.label(),
                "id": getattr(row, pk),
                "title": getattr(row, title_field),
            }
            for row in db.scalars(query)
        ]

    def validate(self, payload: Dict[str, Any], *, updating: bool = False) -> Dict[str, Any]:
        schema = (self.update_schema or self.schema) if updating else self.schema
        if schema is None:
            return {key: value for key, value in payload.items() if key in self.fillable()}
        try:
            validated = schema.model_validate(payload)
        except ValidationError as exc:
            raise ValidationFailed(exc.errors(include_url=False, include_context=False))
        return validated.model_dump(exclude_unset=updating)

    def fillable(self) -> List[str]:
        pk = self.primary_key()
        return [column for column in self.columns() if column != pk]

    def fill(self, record, data: Dict[str, Any]):
        allowed = set(self.fillable())
        for key, value in data.items():
            if key in allowed:
                setattr(record, key, value)
        return record

    def store(self, db: Session, payload: Dict[str, Any]):
        record = self.fill(self.resource if self.resource is not None else self.new_model(), self.validate(payload))
        db.add(record)
        self._flush(db)
        return record

    def update(self, db: Session, record, payload: Dict[str, Any]):
        self.fill(record, self.validate(payload, updating=True))
        self._flush(db)
        return record

    @staticmethod
    def _flush(db: Session) -> None:
        # Constraint violations (e.g. a missing NOT NULL column) are bad input.
        try:
            db.flush()
        except IntegrityError as exc:
            db.rollback()
            raise ValidationFailed([{"msg": str(exc.orig), "type": "integrity_error"}])

    def destroy(self, db: Session, record) -> None:
        db.delete(record)
        db.flush()

    def serialize(self, record=None) -> Dict[str, Any]:
        record = record if record is not None else self.resource
        return {column: getattr(record, column) for column in self.columns()}
