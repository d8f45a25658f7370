# core/predicates.py

"""
Composable row filters.

A Predicate is an AND of clauses. It can be evaluated against a row dict
(in-process checks, tests) or compiled onto a supabase-py / PostgREST query
builder. The two renderings must always agree.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Tuple


_POSTGREST_RESERVED = set(',.:()" ')


def _format_value(value: Any) -> str:
    """Quote a value for use inside a PostgREST or=(...) expression."""
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value)
    if any(ch in _POSTGREST_RESERVED for ch in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


class Clause:
    is_never = False

    def matches(self, row: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def apply(self, query):
        raise NotImplementedError

    def to_postgrest(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Eq(Clause):
    field: str
    value: Any

    def matches(self, row):
        return row.get(self.field) == self.value

    def apply(self, query):
        return query.eq(self.field, self.value)

    def to_postgrest(self):
        return f"{self.field}.eq.{_format_value(self.value)}"


@dataclass(frozen=True)
class In(Clause):
    field: str
    values: Tuple[Any, ...]

    @property
    def is_never(self):
        return len(self.values) == 0

    def matches(self, row):
        return row.get(self.field) in self.values

    def apply(self, query):
        return query.in_(self.field, list(self.values))

    def to_postgrest(self):
        inner = ",".join(_format_value(v) for v in self.values)
        return f"{self.field}.in.({inner})"


@dataclass(frozen=True)
class ILike(Clause):
    """Case-insensitive substring match."""

    field: str
    term: str

    def matches(self, row):
        value = row.get(self.field)
        if value is None:
            return False
        return self.term.lower() in str(value).lower()

    def apply(self, query):
        return query.ilike(self.field, f"%{self.term}%")

    def to_postgrest(self):
        return f"{self.field}.ilike.{_format_value('*' + self.term + '*')}"


@dataclass(frozen=True)
class AnyOf(Clause):
    """OR across several predicates."""

    options: Tuple["Predicate", ...]

    @property
    def is_never(self):
        return all(option.is_never for option in self.options)

    def matches(self, row):
        return any(option.matches(row) for option in self.options)

    def apply(self, query):
        live = [o for o in self.options if not o.is_never]
        return query.or_(",".join(o.to_postgrest() for o in live))

    def to_postgrest(self):
        live = [o for o in self.options if not o.is_never]
        return f"or({','.join(o.to_postgrest() for o in live)})"


@dataclass(frozen=True)
class Predicate:
    clauses: Tuple[Clause, ...] = field(default_factory=tuple)

    # ---------------------------------------------------------
    # Construction
    # ---------------------------------------------------------
    @classmethod
    def always(cls) -> "Predicate":
        return cls(())

    @classmethod
    def never(cls) -> "Predicate":
        return cls((In("id", ()),))

    @classmethod
    def eq(cls, field_name: str, value: Any) -> "Predicate":
        return cls((Eq(field_name, value),))

    @classmethod
    def one_of(cls, field_name: str, values: Iterable[Any]) -> "Predicate":
        return cls((In(field_name, tuple(sorted(set(values), key=str))),))

    @classmethod
    def contains(cls, field_name: str, term: str) -> "Predicate":
        return cls((ILike(field_name, term),))

    @classmethod
    def any_of(cls, *options: "Predicate") -> "Predicate":
        if any(not option.clauses for option in options):
            return cls.always()
        return cls((AnyOf(tuple(options)),))

    def __and__(self, other: "Predicate") -> "Predicate":
        return Predicate(self.clauses + other.clauses)

    # ---------------------------------------------------------
    # Evaluation
    # ---------------------------------------------------------
    @property
    def is_never(self) -> bool:
        return any(c.is_never for c in self.clauses)

    def matches(self, row: Dict[str, Any]) -> bool:
        return all(c.matches(row) for c in self.clauses)

    def apply(self, query):
        for clause in self.clauses:
            query = clause.apply(query)
        return query

    def to_postgrest(self) -> str:
        if len(self.clauses) == 1:
            return self.clauses[0].to_postgrest()
        return f"and({','.join(c.to_postgrest() for c in self.clauses)})"
