"""Stat service: defaults, dependent lookup and formula validation."""

from collections.abc import Iterable, Mapping

from progression.core.config import settings
from progression.core.exceptions import FormulaEvaluationError
from progression.core.logging import LoggerMixin
from progression.formula.dependencies import FormulaDependencyGraph
from progression.formula.functions import is_function_name
from progression.formula.scanner import is_identifier
from progression.formula.validator import RESERVED_KEYWORDS, FormulaValidator, get_validator
from progression.models.formula import ValidationResult
from progression.models.stat import StatDefinition


def build_test_values(
    stats: Iterable[StatDefinition], preview_level: int, base_value: float = 0
) -> dict[str, float]:
    """
    Sample bindings for validating formulas at ``preview_level``.

    Base stats are valued at the preview level; derived stats are left
    unbound. ``Level`` and ``BaseValue`` are always bound.
    """
    values: dict[str, float] = {
        stat.name: stat.value_at_level(preview_level) for stat in stats if not stat.is_derived
    }
    values["Level"] = preview_level
    values["BaseValue"] = base_value
    return values


def derived_sample_values(
    stats: Iterable[StatDefinition],
    base_values: Mapping[str, float],
    validator: FormulaValidator,
    exclude: StatDefinition | None = None,
) -> dict[str, float]:
    """
    Sample values of the derived stats, other than ``exclude``.

    Derived stats are evaluated in dependency order so one may reference
    another. A stat whose formula fails, or sits on a cycle, stays unbound.
    """
    by_key = {s.name.upper(): s for s in stats if s.is_derived and s is not exclude}
    graph = FormulaDependencyGraph.from_formulas({s.name: s.formula for s in by_key.values()})

    values = dict(base_values)
    derived: dict[str, float] = {}
    for key in graph.get_evaluation_order(by_key):
        stat = by_key[key]
        try:
            value = validator.evaluate(stat.formula, values)
        except FormulaEvaluationError:
            continue
        values[stat.name] = value
        derived[stat.name] = value
    return derived


class StatService(LoggerMixin):
    """Service for stat definitions and their formulas."""

    def __init__(self, validator: FormulaValidator | None = None):
        self._validator = validator or get_validator()

    def get_default_stats(self) -> list[StatDefinition]:
        """Starter stat set for a new ruleset."""
        return [
            StatDefinition(
                name="STR",
                description="Physical strength, affects melee damage",
                base_value=10,
                growth_per_level=2,
                min_value=1,
                max_value=999,
            ),
            StatDefinition(
                name="VIT",
                description="Vitality, affects HP and stamina",
                base_value=8,
                growth_per_level=3,
                min_value=1,
                max_value=999,
            ),
            StatDefinition(
                name="INT",
                description="Intelligence, affects mana and magic damage",
                base_value=12,
                growth_per_level=2,
                min_value=1,
                max_value=999,
            ),
            StatDefinition(
                name="AGI",
                description="Agility, affects speed and evasion",
                base_value=10,
                growth_per_level=2,
                min_value=1,
                max_value=999,
            ),
            StatDefinition(
                name="HP",
                description="Health Points - derived from VIT",
                formula="VIT * 12 + Level * 5",
                min_value=1,
            ),
            StatDefinition(
                name="Mana",
                description="Magical energy - derived from INT",
                formula="INT * 10 + Level * 3",
                min_value=0,
            ),
            StatDefinition(
                name="PhysDmg",
                description="Physical damage - derived from STR",
                formula="STR * 2 + Level",
                min_value=1,
            ),
        ]

    def create_base_stat(self, name: str = "NEW_STAT") -> StatDefinition:
        return StatDefinition(
            name=name,
            description="New base stat",
            base_value=10,
            growth_per_level=1,
            min_value=1,
            max_value=999,
        )

    def create_derived_stat(self, name: str = "NEW_DERIVED") -> StatDefinition:
        return StatDefinition(
            name=name,
            description="New derived stat",
            formula="STR + INT",
            min_value=0,
        )

    def check_stat_name(
        self, name: str, all_stats: Iterable[StatDefinition], current: StatDefinition | None = None
    ) -> str | None:
        """
        Return why ``name`` cannot be used for a stat, or None if it can.

        A stat name must be an identifier, must not shadow a built-in function
        or reserved keyword and must be unique (ignoring case). ``current`` is
        the stat being renamed, which may keep its own name.
        """
        if not is_identifier(name):
            return (
                "Stat name must start with a letter or underscore "
                "and contain only letters, digits and underscores"
            )
        if is_function_name(name):
            return f"Stat name {name} is a built-in function"
        if name.lower() in {keyword.lower() for keyword in RESERVED_KEYWORDS}:
            return f"Stat name {name} is a reserved keyword"
        for other in all_stats:
            if other is not current and other.name.lower() == name.lower():
                return f"A stat named {other.name} already exists"
        return None

    def clone_stat(self, stat: StatDefinition) -> StatDefinition:
        """Copy a stat under a ``_Copy`` suffixed name."""
        return stat.model_copy(update={"name": f"{stat.name}_Copy"}, deep=True)

    def find_dependent_stats(
        self, stat: StatDefinition, all_stats: Iterable[StatDefinition]
    ) -> list[StatDefinition]:
        """
        Stats whose formula references ``stat`` by name.

        Matches whole identifiers, ignoring case: ``INT`` is found in
        ``INT * 2`` but not in ``POINTS * 2``.
        """
        target = stat.name.lower()
        return [
            other
            for other in all_stats
            if other.is_derived
            and any(name.lower() == target for name in self._validator.extract_variables(other.formula))
        ]

    def invalidate_dependents(
        self, stat: StatDefinition, all_stats: Iterable[StatDefinition]
    ) -> list[StatDefinition]:
        """
        Mark every formula referencing ``stat`` invalid, e.g. after it is deleted.

        Returns:
            The stats that were marked
        """
        dependents = self.find_dependent_stats(stat, all_stats)
        for dependent in dependents:
            dependent.is_formula_valid = False
            dependent.formula_validation_error = f"Unknown variable(s): {stat.name}"
            dependent.sample_value = None
        if dependents:
            self.logger.debug(
                "Invalidated %d formula(s) referencing %s", len(dependents), stat.name
            )
        return dependents

    def validate_stat_formula(
        self,
        stat: StatDefinition,
        all_stats: Iterable[StatDefinition],
        preview_level: int | None = None,
    ) -> ValidationResult:
        """
        Validate a stat's formula and record the verdict on the stat.

        Every stat name is a legal reference. Base stats are bound to their
        value at ``preview_level``; other derived stats are bound to their own
        sample values, computed in dependency order. ``BaseValue`` is the
        stat's own base value.

        Returns:
            Validation result
        """
        if preview_level is None:
            preview_level = settings.default_preview_level

        if not stat.is_derived:
            result = ValidationResult.ok()
        else:
            stats = list(all_stats)
            test_values = build_test_values(stats, preview_level, stat.base_value or 0)
            test_values.update(
                derived_sample_values(stats, test_values, self._validator, exclude=stat)
            )
            result = self._validator.validate(
                stat.formula, [s.name for s in stats], test_values
            )

        stat.is_formula_valid = result.is_valid
        stat.formula_validation_error = result.error_message
        stat.sample_value = result.sample_result
        return result

    def build_dependency_graph(self, all_stats: Iterable[StatDefinition]) -> FormulaDependencyGraph:
        """Dependency graph of derived stats over the names their formulas use."""
        return FormulaDependencyGraph.from_formulas(
            {stat.name: stat.formula for stat in all_stats if stat.is_derived}
        )

