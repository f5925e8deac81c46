from __future__ import annotations

from typing import Any, List, Optional, Tuple


class QueryFilter:
    """Composable list of SQL predicates with their bound parameters.

    Each predicate uses `%s` placeholders; parameters are kept in the same
    order the predicates were added so the two can never drift apart.
    """

    def __init__(self) -> None:
        self._clauses: List[str] = []
        self._params: List[Any] = []

    def add(self, clause: str, *params: Any) -> "QueryFilter":
        if clause.count("%s") != len(params):
            raise ValueError(f"Placeholder/parameter mismatch in {clause!r}")
        self._clauses.append(clause)
        self._params.extend(params)
        return self

    def add_if(self, value: Optional[Any], clause: str) -> "QueryFilter":
        """Add `clause` bound to `value` unless the value is None."""
        if value is not None:
            self.add(clause, value)
        return self

    def __bool__(self) -> bool:
        return bool(self._clauses)

    @property
    def params(self) -> Tuple[Any, ...]:
        return tuple(self._params)

    def conditions(self) -> str:
        return " AND ".join(self._clauses)

    def where(self) -> str:
        if not self._clauses:
            return ""
        return "WHERE " + self.conditions()
