"""
Pytest configuration and fixtures for progression engine tests.
"""

import pytest

from progression.core.config import get_settings
from progression.formula.evaluator import FormulaEvaluator
from progression.formula.validator import FormulaValidator
from progression.models.stat import StatDefinition
from progression.services.skills import SkillService
from progression.services.stats import StatService
from progression.services.xp_curve import XpCurveCalculator


@pytest.fixture
def evaluator() -> FormulaEvaluator:
    return FormulaEvaluator()


@pytest.fixture
def validator() -> FormulaValidator:
    return FormulaValidator()


@pytest.fixture
def stat_service(validator: FormulaValidator) -> StatService:
    return StatService(validator)


@pytest.fixture
def skill_service(validator: FormulaValidator) -> SkillService:
    return SkillService(validator)


@pytest.fixture
def xp_calculator(validator: FormulaValidator) -> XpCurveCalculator:
    return XpCurveCalculator(validator)


@pytest.fixture
def default_stats(stat_service: StatService) -> list[StatDefinition]:
    """Fresh copy of the starter stat set (STR, VIT, INT, AGI, HP, Mana, PhysDmg)."""
    return stat_service.get_default_stats()


@pytest.fixture
def clean_settings_cache():
    """Drop cached settings before and after a test that changes the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
