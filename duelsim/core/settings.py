"""
Tunable engine constants.

Every number the engines compare against lives here so a battle can be run
with different balance settings without touching module state.
"""

from pydantic import BaseModel, Field


class BattleSettings(BaseModel):
    """Balance and flow settings for one battle."""

    # Turn loop.
    max_turns: int = Field(15, ge=1, description="Turn cap; reaching it is a draw.")
    energy_regen_per_turn: int = Field(
        5, ge=0, description="Energy restored to both fighters at the end of a turn."
    )
    recovery_energy: int = Field(
        10, ge=0, description="Energy restored by a segment spent recovering."
    )
    energy_starved_threshold: int = Field(
        5, ge=0, description="Below this energy a fighter spends its segment recovering."
    )

    # Momentum.
    momentum_min: int = Field(-5, description="Lower momentum bound.")
    momentum_max: int = Field(5, description="Upper momentum bound.")

    # Termination.
    desperation_health_floor: int = Field(
        10, ge=0, description="Health at or under which the desperation move unlocks."
    )
    stalemate_min_turn: int = Field(4, description="Earliest turn a stalemate can be called.")
    stalemate_streak: int = Field(
        3, description="Consecutive Defense/Utility segments each fighter needs."
    )
    stalemate_health_gap: int = Field(
        15, description="Maximum health gap for a stalemate."
    )
    decisive_health_gap: int = Field(
        60, description="Health gap that ends the battle for the leader."
    )

    # Phases.
    mid_phase_turn: int = Field(4, description="Turn at which Mid starts at the latest.")
    late_phase_turn: int = Field(8, description="Turn at which Late starts at the latest.")
    mid_phase_health: int = Field(60, description="Health under which Mid starts.")
    late_phase_health: int = Field(35, description="Health under which Late starts.")

    # Move resolution.
    base_crit_chance: float = Field(0.05, description="Crit chance at zero momentum.")
    crit_chance_per_momentum: float = Field(0.05, description="Crit chance per momentum point.")
    max_damage_per_hit: int = Field(50, description="Cap on pre-escalation damage.")
    collateral_cap: float = Field(30.0, description="Cap on collateral per move.")
    default_fragility: float = Field(0.5, description="Fragility of locations that omit it.")

    # Curbstomp.
    miracle_survival_chance: float = Field(
        0.15, ge=0.0, le=1.0, description="Default flat survival chance vs lethal rules."
    )
    overwhelming_min_turn: int = Field(3, description="Earliest turn for overwhelming checks.")
    overwhelming_health_ratio: float = Field(
        0.25, description="Defender/attacker health ratio marking overwhelming advantage."
    )
    overwhelming_momentum: int = Field(
        -3, description="Defender momentum at or under which the advantage counts."
    )

    # Status effects.
    burn_crisis_turns: int = Field(
        3, description="Consecutive Burn ticks that trigger the crisis debuff."
    )

    # AI.
    must_react_priority: int = Field(
        10, description="AI rules at or above this priority short-circuit weighting."
    )
    prediction_min_observations: int = Field(
        2, description="Transitions needed before a prediction is trusted."
    )
    prediction_confidence_threshold: float = Field(
        0.5, description="Confidence above which the counter bonus applies."
    )
    weak_result_cooldown: int = Field(
        2, description="Decisions a move is discouraged for after a Weak result."
    )


DEFAULT_SETTINGS = BattleSettings()
