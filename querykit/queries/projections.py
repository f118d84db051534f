"""Row mappers that turn selected columns into DTOs.

Three population strategies sit behind the ``RowMapper`` protocol:

- ``FieldProjection`` writes the values straight into the instance fields,
  skipping validation.
- ``SetterProjection`` builds an empty instance and assigns each value as an
  attribute, so the DTO needs a default for every field.
- ``ConstructorProjection`` passes every value to the constructor at once.

For the same rows all three yield DTOs with identical field values.

Usage:
    mapper = Projections.constructor(MemberDto, username=Member.username, age=Member.age)
    dtos = MemberQuery(db).order_by("id").project(mapper)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, Protocol, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class RowMapper(Protocol[T_co]):
    @property
    def columns(self) -> list[Any]: ...

    def map(self, row: Any) -> T_co: ...


class _Projection(ABC, Generic[T]):
    strategy: ClassVar[str]

    def __init__(self, dto_class: type[T], **columns: Any):
        if not columns:
            raise ValueError("A projection needs at least one column.")
        self.dto_class = dto_class
        self._columns = columns

    @property
    def field_names(self) -> list[str]:
        return list(self._columns)

    @property
    def columns(self) -> list[Any]:
        return [column.label(name) for name, column in self._columns.items()]

    def values(self, row: Any) -> dict[str, Any]:
        mapping = row._mapping
        return {name: mapping[name] for name in self._columns}

    @abstractmethod
    def map(self, row: Any) -> T: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.dto_class.__name__}, {', '.join(self._columns)})"


class FieldProjection(_Projection[T]):
    strategy = "fields"

    def map(self, row: Any) -> T:
        values = self.values(row)
        model_construct = getattr(self.dto_class, "model_construct", None)
        if model_construct is not None:
            return model_construct(**values)
        instance = self.dto_class.__new__(self.dto_class)
        instance.__dict__.update(values)
        return instance


class SetterProjection(_Projection[T]):
    strategy = "setter"

    def map(self, row: Any) -> T:
        instance = self.dto_class()
        for name, value in self.values(row).items():
            setattr(instance, name, value)
        return instance


class ConstructorProjection(_Projection[T]):
    strategy = "constructor"

    def map(self, row: Any) -> T:
        return self.dto_class(**self.values(row))


class Projections:
    STRATEGIES: ClassVar[dict[str, type[_Projection]]] = {
        FieldProjection.strategy: FieldProjection,
        SetterProjection.strategy: SetterProjection,
        ConstructorProjection.strategy: ConstructorProjection,
    }

    @staticmethod
    def fields(dto_class: type[T], **columns: Any) -> FieldProjection[T]:
        return FieldProjection(dto_class, **columns)

    @staticmethod
    def setter(dto_class: type[T], **columns: Any) -> SetterProjection[T]:
        return SetterProjection(dto_class, **columns)

    @staticmethod
    def constructor(dto_class: type[T], **columns: Any) -> ConstructorProjection[T]:
        return ConstructorProjection(dto_class, **columns)

    @classmethod
    def by_strategy(cls, strategy: str, dto_class: type[T], **columns: Any) -> _Projection[T]:
        projection_class = cls.STRATEGIES.get(strategy)
        if projection_class is None:
            allowed = ", ".join(sorted(cls.STRATEGIES))
            raise ValueError(f"Unknown projection strategy '{strategy}'. Expected one of: {allowed}.")
        return projection_class(dto_class, **columns)
