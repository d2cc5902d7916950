"""
Status effect engine.

Owns the lifecycle of the status effects of one battle: creating them with
battle-unique ids, applying them with refresh semantics, ticking them once
per turn through a handler registered for every effect type, expiring them,
and running the crisis and fusion checks that follow each tick. A stun lasts
for a number of lost segments instead of turns.
"""

from typing import TYPE_CHECKING, Callable

from duelsim.core.constants import EffectType, LogEventType
from duelsim.core.events import BattleLog, LogEvent
from duelsim.core.logging import log_debug
from duelsim.core.settings import DEFAULT_SETTINGS, BattleSettings

from .status_effect import ActiveStatusEffect, StatusEffectSpec

if TYPE_CHECKING:
    from duelsim.character.fighter import FighterState

# Floor for the incoming damage multiplier under stacked defense buffs.
MIN_INCOMING_MULTIPLIER = 0.1

CRISIS_DEFENSE_DOWN = StatusEffectSpec(
    effect_type=EffectType.DEFENSE_DOWN,
    duration=2,
    potency=20.0,
    name="Burn Crisis",
)

# Pairs of effects that fuse into a new effect when held together. The
# ingredients are consumed.
FUSION_RECIPES: list[tuple[frozenset[EffectType], StatusEffectSpec]] = [
    (
        frozenset({EffectType.BURN, EffectType.DEFENSE_DOWN}),
        StatusEffectSpec(effect_type=EffectType.STUN, duration=1, name="Armor Shattered"),
    ),
]


# =============================================================================
# Tick handlers
# =============================================================================


TickHandler = Callable[["FighterState", ActiveStatusEffect], dict[str, float]]


def _tick_burn(fighter: "FighterState", effect: ActiveStatusEffect) -> dict[str, float]:
    before = fighter.health
    fighter.health = before - effect.potency
    return {"health": fighter.health - before}


def _tick_heal(fighter: "FighterState", effect: ActiveStatusEffect) -> dict[str, float]:
    before = fighter.health
    fighter.health = before + effect.potency
    return {"health": fighter.health - before}


def _tick_slow(fighter: "FighterState", effect: ActiveStatusEffect) -> dict[str, float]:
    before = fighter.energy
    fighter.energy = before - effect.potency
    return {"energy": fighter.energy - before}


def _tick_passive(fighter: "FighterState", effect: ActiveStatusEffect) -> dict[str, float]:
    # Stun and the modifier effects act where moves resolve, not on tick.
    return {}


TICK_HANDLERS: dict[EffectType, TickHandler] = {
    EffectType.BURN: _tick_burn,
    EffectType.HEAL_OVER_TIME: _tick_heal,
    EffectType.SLOW: _tick_slow,
    EffectType.STUN: _tick_passive,
    EffectType.DEFENSE_UP: _tick_passive,
    EffectType.DEFENSE_DOWN: _tick_passive,
    EffectType.ATTACK_UP: _tick_passive,
    EffectType.CRIT_UP: _tick_passive,
}

# Effects whose duration counts skipped segments rather than turns. They are
# spent by `spend_skipped_segment`, never by the end-of-turn tick.
SEGMENT_EFFECTS = frozenset({EffectType.STUN})

_missing = [effect_type for effect_type in EffectType if effect_type not in TICK_HANDLERS]
if _missing:
    raise RuntimeError(f"No tick handler registered for: {_missing}")


# =============================================================================
# Damage helpers
# =============================================================================


def incoming_damage_multiplier(target: "FighterState") -> float:
    """Multiplier applied to damage the target receives."""
    multiplier = 1.0
    for effect in target.effects.active:
        if effect.effect_type == EffectType.DEFENSE_DOWN:
            multiplier *= 1.0 + effect.potency / 100.0
        elif effect.effect_type == EffectType.DEFENSE_UP:
            multiplier *= 1.0 - effect.potency / 100.0
    return max(MIN_INCOMING_MULTIPLIER, multiplier)


def outgoing_damage_multiplier(attacker: "FighterState") -> float:
    """Multiplier applied to damage the attacker deals."""
    multiplier = 1.0
    for effect in attacker.effects.active:
        if effect.effect_type == EffectType.ATTACK_UP:
            multiplier *= 1.0 + effect.potency / 100.0
    return multiplier


def crit_chance_bonus(attacker: "FighterState") -> float:
    return sum(
        effect.potency / 100.0
        for effect in attacker.effects.active
        if effect.effect_type == EffectType.CRIT_UP
    )


# =============================================================================
# Engine
# =============================================================================


class StatusEffectEngine:
    """
    Battle-scoped owner of effect ids and effect processing.
    """

    def __init__(
        self,
        settings: BattleSettings = DEFAULT_SETTINGS,
        log: BattleLog | None = None,
    ) -> None:
        self.settings = settings
        self.log = log
        self._next_id = 1

    def create(
        self, spec: StatusEffectSpec, source: str, turn: int
    ) -> ActiveStatusEffect:
        """Builds a live effect from its declaration."""
        effect_id = f"{spec.effect_type.value.lower()}-{self._next_id}"
        self._next_id += 1
        return ActiveStatusEffect(
            id=effect_id,
            name=spec.display_name,
            effect_type=spec.effect_type,
            category=spec.effect_type.default_category,
            duration=spec.duration,
            potency=spec.potency,
            source_ability=source,
            turn_applied=turn,
        )

    def apply(
        self,
        fighter: "FighterState",
        spec: StatusEffectSpec,
        source: str,
        turn: int,
    ) -> ActiveStatusEffect:
        """
        Applies an effect to a fighter. An effect of the same type already on
        the fighter is refreshed to the longer duration and the higher
        potency instead of stacking.
        """
        existing = fighter.effects.get(spec.effect_type)
        if existing is not None:
            existing.duration = max(existing.duration, spec.duration)
            existing.potency = max(existing.potency, spec.potency)
            self._emit(
                f"{existing.name} on {fighter.name} is refreshed",
                fighter,
                {"duration": existing.duration, "refreshed": True},
            )
            return existing
        effect = self.create(spec, source, turn)
        fighter.effects.add(effect)
        self._emit(
            f"{fighter.name} is afflicted by {effect.name}",
            fighter,
            {
                "effect_id": effect.id,
                "effect_type": effect.effect_type.value,
                "duration": effect.duration,
                "potency": effect.potency,
                "source": source,
            },
        )
        return effect

    def process_turn(self, fighter: "FighterState", turn: int) -> list[LogEvent]:
        """
        Ticks every active effect on a fighter exactly once, removes expired
        effects, then checks the crisis rule and the fusion recipes.

        Returns:
            list[LogEvent]: The events produced, if a log is attached.

        """
        start = len(self.log) if self.log is not None else 0
        for effect in list(fighter.effects.active):
            deltas = TICK_HANDLERS[effect.effect_type](fighter, effect)
            if effect.effect_type in SEGMENT_EFFECTS:
                continue
            expired = effect.turn_update()
            if deltas:
                self._emit(
                    f"{effect.name} affects {fighter.name}",
                    fighter,
                    {"effect_id": effect.id, "tick": effect.ticks_elapsed},
                    deltas,
                )
            if effect.effect_type == EffectType.BURN:
                self._check_burn_crisis(fighter, effect, turn)
            if expired:
                fighter.effects.remove(effect)
                self._emit(
                    f"{effect.name} on {fighter.name} wears off",
                    fighter,
                    {"effect_id": effect.id, "expired": True},
                )
        self._check_fusions(fighter, turn)
        if self.log is None:
            return []
        return self.log.events[start:]

    def spend_skipped_segment(
        self, fighter: "FighterState"
    ) -> ActiveStatusEffect | None:
        """
        Spends one segment of the fighter's stun after it cost them a segment.

        Returns:
            ActiveStatusEffect | None: The stun, if one was spent.

        """
        stun = fighter.effects.get(EffectType.STUN)
        if stun is None:
            return None
        if stun.turn_update():
            fighter.effects.remove(stun)
            self._emit(
                f"{stun.name} on {fighter.name} wears off",
                fighter,
                {"effect_id": stun.id, "expired": True},
            )
        return stun

    def _check_burn_crisis(
        self, fighter: "FighterState", burn: ActiveStatusEffect, turn: int
    ) -> None:
        # The crisis fires on the tick that reaches the threshold, once per burn.
        if burn.ticks_elapsed != self.settings.burn_crisis_turns:
            return
        log_debug("Burn crisis", {"fighter": fighter.id, "effect": burn.id})
        self.apply(fighter, CRISIS_DEFENSE_DOWN, "burn_crisis", turn)

    def _check_fusions(self, fighter: "FighterState", turn: int) -> None:
        for ingredients, product in FUSION_RECIPES:
            held = [fighter.effects.get(effect_type) for effect_type in ingredients]
            if any(effect is None for effect in held):
                continue
            for effect in held:
                fighter.effects.remove(effect)
            fused = self.create(product, "fusion", turn)
            fighter.effects.add(fused)
            if self.log is not None:
                self.log.add(
                    LogEventType.FUSION,
                    f"{' + '.join(e.name for e in held)} fuse into {fused.name}",
                    actor_id=fighter.id,
                    details={
                        "consumed": sorted(e.id for e in held),
                        "effect_id": fused.id,
                        "effect_type": fused.effect_type.value,
                    },
                )

    def _emit(
        self,
        text: str,
        fighter: "FighterState",
        details: dict,
        deltas: dict[str, float] | None = None,
    ) -> None:
        if self.log is not None:
            self.log.add(
                LogEventType.STATUS,
                text,
                actor_id=fighter.id,
                deltas=deltas,
                details=details,
            )
