"""
Victim selection and survival rolls for curbstomp rules.

Every roll goes through the battle's random source and is recorded as a
DICE_ROLL event so a battle can be audited afterwards.
"""

from typing import TYPE_CHECKING

from duelsim.core.constants import LogEventType
from duelsim.core.events import BattleLog
from duelsim.core.rng import BattleRandom

from .rules import OPPONENT, PROTAGONIST, CurbstompRule, VictimSelection

if TYPE_CHECKING:
    from duelsim.character.fighter import FighterState


def log_roll(
    log: BattleLog | None,
    roll_type: str,
    rule_id: str,
    value: float,
    threshold: float | None,
    outcome: str,
    actor_id: str | None = None,
) -> None:
    if log is None:
        return
    log.add(
        LogEventType.DICE_ROLL,
        f"{roll_type} for '{rule_id}': {outcome}",
        actor_id=actor_id,
        details={
            "roll_type": roll_type,
            "rule_id": rule_id,
            "result": round(value, 6),
            "threshold": threshold,
            "outcome": outcome,
        },
    )


def _resolve_id(
    raw: str, protagonist: "FighterState", opponent: "FighterState"
) -> str | None:
    if raw == PROTAGONIST:
        return protagonist.id
    if raw == OPPONENT:
        return opponent.id
    if raw in (protagonist.id, opponent.id):
        return raw
    return None


def coin_flip_victim(
    protagonist: "FighterState",
    opponent: "FighterState",
    rng: BattleRandom,
    rule_id: str,
    log: BattleLog | None = None,
    roll_type: str = "victim_coin_flip",
) -> str:
    value = rng.random()
    victim = protagonist.id if value < 0.5 else opponent.id
    log_roll(log, roll_type, rule_id, value, 0.5, f"selected {victim}", protagonist.id)
    return victim


def select_victim(
    selection: VictimSelection,
    protagonist: "FighterState",
    opponent: "FighterState",
    rng: BattleRandom,
    rule_id: str,
    log: BattleLog | None = None,
) -> str | None:
    """
    Picks the victim of a rule.

    Returns:
        str | None: The victim id, or None when a direct probabilistic
        selection misses.

    """
    if selection.mode == "coin_flip":
        return coin_flip_victim(protagonist, opponent, rng, rule_id, log)

    if selection.mode == "distribution":
        value = rng.random()
        cumulative = 0.0
        for raw_id, probability in selection.probabilities.items():
            cumulative += probability
            if value < cumulative:
                victim = _resolve_id(raw_id, protagonist, opponent)
                if victim is not None:
                    log_roll(log, "victim_distribution", rule_id, value, None, f"selected {victim}", protagonist.id)
                    return victim
                break
        log_roll(log, "victim_distribution", rule_id, value, None, "unresolved", protagonist.id)
        return coin_flip_victim(
            protagonist, opponent, rng, rule_id, log, roll_type="victim_fallback"
        )

    victim = _resolve_id(selection.victim_id or PROTAGONIST, protagonist, opponent)
    if victim is None:
        return None
    if selection.probability is None:
        return victim
    hit, value = rng.roll(selection.probability)
    log_roll(
        log,
        "victim_probability",
        rule_id,
        value,
        selection.probability,
        "triggered" if hit else "not triggered",
        protagonist.id,
    )
    return victim if hit else None


def check_miraculous_survival(
    rule: CurbstompRule,
    protagonist: "FighterState",
    rng: BattleRandom,
    default_chance: float,
    log: BattleLog | None = None,
) -> bool:
    """Rolls the flat survival chance that cancels a lethal outcome."""
    chance = rule.survival_chance if rule.survival_chance is not None else default_chance
    survived, value = rng.roll(chance)
    log_roll(
        log,
        "miraculous_survival",
        rule.id,
        value,
        chance,
        "survived" if survived else "no miracle",
        protagonist.id,
    )
    return survived
