"""Formula dependency tracking.

Tracks which derived stats reference which names, so that editors can find
what to re-validate when a stat changes and refuse circular definitions.
"""

import logging
from collections import defaultdict, deque
from collections.abc import Iterable, Mapping

from progression.formula.scanner import extract_variables

logger = logging.getLogger(__name__)

CIRCULAR_REFERENCE = "Circular reference detected in formula dependencies"


def _key(name: str) -> str:
    return name.upper()


class FormulaDependencyGraph:
    """
    Track formula dependencies between named values.

    Names are compared case-insensitively and stored upper-cased.
    Maintains a bidirectional graph:
    - dependents: name -> names whose formulas reference it
    - requires: name -> names its own formula references
    """

    def __init__(self):
        """Initialize empty dependency graph."""
        # If A changes, every formula in dependents[A] needs re-evaluation
        self.dependents: dict[str, set[str]] = defaultdict(set)

        # To evaluate A, every name in requires[A] must be known first
        self.requires: dict[str, set[str]] = defaultdict(set)

    @classmethod
    def from_formulas(cls, formulas: Mapping[str, str]) -> "FormulaDependencyGraph":
        """
        Build a graph from a name -> formula mapping.

        Formulas that would close a cycle are left out and logged.
        """
        graph = cls()
        for name, formula in formulas.items():
            success, error = graph.add_formula(name, set(extract_variables(formula)))
            if not success:
                logger.debug("Skipped formula for %s: %s", name, error)
        return graph

    def add_formula(self, name: str, depends_on: Iterable[str]) -> tuple[bool, str | None]:
        """
        Add or replace the formula for ``name``.

        Args:
            name: Name the formula computes
            depends_on: Names the formula references

        Returns:
            Tuple of (success, error_message)
        """
        key = _key(name)
        deps = {_key(dep) for dep in depends_on}

        if self.detect_circular_reference(key, deps):
            return False, CIRCULAR_REFERENCE

        for old_dep in self.requires.get(key, set()):
            self.dependents[old_dep].discard(key)

        self.requires[key] = deps
        for dep in deps:
            self.dependents[dep].add(key)

        return True, None

    def remove_formula(self, name: str) -> None:
        """Remove the formula for ``name`` and every edge it owns."""
        key = _key(name)
        if key in self.requires:
            for dep in self.requires[key]:
                self.dependents[dep].discard(key)
            del self.requires[key]

        self.dependents.pop(key, None)

    def get_affected(self, changed: str) -> list[str]:
        """
        Get formulas that need re-evaluation when ``changed`` changes.

        Breadth-first over transitive dependents.
        """
        affected = []
        to_process = deque([_key(changed)])
        seen = set()

        while to_process:
            current = to_process.popleft()
            if current in seen:
                continue
            seen.add(current)

            for dependent in sorted(self.dependents.get(current, ())):
                if dependent not in seen:
                    affected.append(dependent)
                    to_process.append(dependent)

        return affected

    def get_evaluation_order(self, names: Iterable[str]) -> list[str]:
        """
        Order ``names`` so that each comes after the names it requires.

        Kahn's algorithm; ties are broken alphabetically so the order is
        stable. Returns an empty list if the names contain a cycle.
        """
        keys = {_key(name) for name in names}
        in_degree = {key: 0 for key in keys}

        for key in keys:
            for dep in self.requires.get(key, ()):
                if dep in keys:
                    in_degree[key] += 1

        queue = deque(sorted(key for key in keys if in_degree[key] == 0))
        result = []
        while queue:
            key = queue.popleft()
            result.append(key)

            for dependent in sorted(self.dependents.get(key, ())):
                if dependent in in_degree:
                    in_degree[dependent] -= 1
                    if in_degree[dependent] == 0:
                        queue.append(dependent)

        if len(result) != len(keys):
            return []
        return result

    def detect_circular_reference(self, name: str, depends_on: Iterable[str]) -> bool:
        """
        Check whether giving ``name`` these dependencies would create a cycle.

        Depth-first walk from the new dependencies back towards ``name``.
        """
        key = _key(name)
        to_check = [_key(dep) for dep in depends_on]
        visited = set()

        while to_check:
            current = to_check.pop()
            if current == key:
                return True
            if current in visited:
                continue
            visited.add(current)
            to_check.extend(self.requires.get(current, ()))

        return False

    def get_dependencies(self, name: str) -> set[str]:
        """Names the formula for ``name`` references directly."""
        return set(self.requires.get(_key(name), set()))

    def get_dependents(self, name: str) -> set[str]:
        """Formulas that reference ``name`` directly."""
        return set(self.dependents.get(_key(name), set()))

    def clear(self) -> None:
        """Clear all dependencies from the graph."""
        self.dependents.clear()
        self.requires.clear()

    def __repr__(self) -> str:
        return (
            f"FormulaDependencyGraph("
            f"formulas={len(self.requires)}, "
            f"edges={sum(len(deps) for deps in self.dependents.values())})"
        )
