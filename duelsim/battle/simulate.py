"""
Entry point: run one battle from content ids.
"""

from typing import Any

from duelsim.character.fighter import FighterState
from duelsim.core.constants import TimeOfDay
from duelsim.core.content import ContentRepository
from duelsim.core.error_handling import require_non_empty_string
from duelsim.core.logging import log_info
from duelsim.core.rng import create_rng
from duelsim.core.settings import DEFAULT_SETTINGS, BattleSettings
from duelsim.environment.conditions import BattleConditions

from .battle_state import BattleResult
from .orchestrator import BattleOrchestrator


def _parse_time_of_day(value: Any) -> TimeOfDay:
    if isinstance(value, TimeOfDay):
        return value
    try:
        return TimeOfDay(str(value).lower())
    except ValueError:
        raise ValueError(
            f"time_of_day must be one of {[t.value for t in TimeOfDay]}, got {value!r}"
        ) from None


def simulate_battle(
    fighter_a_id: str,
    fighter_b_id: str,
    location_id: str,
    time_of_day: str | TimeOfDay,
    emotional_mode: bool = False,
    *,
    deterministic: bool = False,
    seed: int | None = None,
    settings: BattleSettings | None = None,
    repository: ContentRepository | None = None,
) -> BattleResult:
    """
    Simulates one duel.

    Args:
        fighter_a_id (str): Id of the first character.
        fighter_b_id (str): Id of the second character.
        location_id (str): Id of the location.
        time_of_day (str | TimeOfDay): "day" or "night".
        emotional_mode (bool): Whether relationships and personal stressors
            count.
        deterministic (bool): Reproducible draws; the seed defaults to 0.
        seed (int | None): Seed for the random source; implies determinism.
        settings (BattleSettings | None): Balance settings override.
        repository (ContentRepository | None): Content source; the bundled
            repository by default.

    Returns:
        BattleResult: The outcome. Errors inside the turn loop produce an
        emergency draw rather than an exception.

    Raises:
        UnknownContentError: If a character or location id is unknown.
        ValueError: If an id is empty, both ids are the same, or the time of
            day is invalid.

    """
    require_non_empty_string(fighter_a_id, "fighter_a_id")
    require_non_empty_string(fighter_b_id, "fighter_b_id")
    require_non_empty_string(location_id, "location_id")
    if fighter_a_id == fighter_b_id:
        raise ValueError(f"A fighter cannot duel itself: {fighter_a_id!r}")
    time = _parse_time_of_day(time_of_day)

    repository = repository or ContentRepository()
    settings = settings or DEFAULT_SETTINGS
    template_a = repository.get_character(fighter_a_id)
    template_b = repository.get_character(fighter_b_id)
    location = repository.get_location(location_id)
    rules = repository.rules_for_battle(fighter_a_id, fighter_b_id, location_id)

    conditions = BattleConditions(
        location=location, time_of_day=time, emotional_mode=emotional_mode
    )
    rng = create_rng(deterministic, seed)
    fighter_a = FighterState.from_template(template_a, fighter_b_id, settings)
    fighter_b = FighterState.from_template(template_b, fighter_a_id, settings)

    log_info(
        f"Simulating {template_a.name} vs {template_b.name}",
        {"location": location_id, "time": time.value, "seed": rng.seed},
    )
    orchestrator = BattleOrchestrator(
        fighter_a, fighter_b, conditions, rng, settings, curbstomp_rules=rules
    )
    return orchestrator.run()
