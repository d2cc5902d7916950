"""
Constants and enumerations for the duel engine.

Defines the enumerations for move types, elements, effectiveness tiers,
mental and escalation states, battle phases, status effects, curbstomp
outcomes and log event types used throughout the engine.
"""

from enum import Enum


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").lower().capitalize()

    @property
    def color(self) -> str:
        return "dim white"

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies the enum color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class MoveType(NiceEnum):
    """Defines the category of a move."""

    OFFENSE = "Offense"
    DEFENSE = "Defense"
    UTILITY = "Utility"
    FINISHER = "Finisher"

    @property
    def deals_damage(self) -> bool:
        """Only offensive moves and finishers convert power into damage."""
        return self in (MoveType.OFFENSE, MoveType.FINISHER)

    @property
    def is_passive(self) -> bool:
        """Defensive and utility moves count toward stalemate streaks."""
        return self in (MoveType.DEFENSE, MoveType.UTILITY)

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this move type."""
        return {
            MoveType.OFFENSE: "⚔️",
            MoveType.DEFENSE: "🛡️",
            MoveType.UTILITY: "🔧",
            MoveType.FINISHER: "💥",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        return {
            MoveType.OFFENSE: "bold red",
            MoveType.DEFENSE: "bold blue",
            MoveType.UTILITY: "bold cyan",
            MoveType.FINISHER: "bold magenta",
        }.get(self, "dim white")


class Element(NiceEnum):
    """Defines the elemental nature of a move or a fighter."""

    FIRE = "fire"
    LIGHTNING = "lightning"
    WATER = "water"
    ICE = "ice"
    EARTH = "earth"
    METAL = "metal"
    AIR = "air"
    PHYSICAL = "physical"
    UTILITY = "utility"
    NONE = "none"

    @property
    def color(self) -> str:
        return {
            Element.FIRE: "bold red",
            Element.LIGHTNING: "bold blue",
            Element.WATER: "bold cyan",
            Element.ICE: "cyan",
            Element.EARTH: "bold yellow",
            Element.METAL: "white",
            Element.AIR: "bold white",
            Element.PHYSICAL: "bold magenta",
        }.get(self, "dim white")

    @property
    def is_sun_fed(self) -> bool:
        return self in (Element.FIRE, Element.LIGHTNING)

    @property
    def is_moon_fed(self) -> bool:
        return self in (Element.WATER, Element.ICE)


class EffectivenessLevel(NiceEnum):
    """Defines how well a move landed."""

    WEAK = "Weak"
    NORMAL = "Normal"
    STRONG = "Strong"
    CRITICAL = "Critical"

    @property
    def score(self) -> int:
        """Numeric value stored in the AI effectiveness memory."""
        return {
            EffectivenessLevel.WEAK: -1,
            EffectivenessLevel.NORMAL: 1,
            EffectivenessLevel.STRONG: 2,
            EffectivenessLevel.CRITICAL: 3,
        }[self]

    @property
    def is_good(self) -> bool:
        return self in (EffectivenessLevel.STRONG, EffectivenessLevel.CRITICAL)

    @property
    def color(self) -> str:
        return {
            EffectivenessLevel.WEAK: "dim white",
            EffectivenessLevel.NORMAL: "white",
            EffectivenessLevel.STRONG: "bold yellow",
            EffectivenessLevel.CRITICAL: "bold red",
        }.get(self, "dim white")


class MentalLevel(NiceEnum):
    """Ordered psychological tiers. The order is the transition order."""

    STABLE = "stable"
    STRESSED = "stressed"
    SHAKEN = "shaken"
    BROKEN = "broken"

    @property
    def rank(self) -> int:
        return list(MentalLevel).index(self)

    @property
    def color(self) -> str:
        return {
            MentalLevel.STABLE: "bold green",
            MentalLevel.STRESSED: "bold yellow",
            MentalLevel.SHAKEN: "bold red",
            MentalLevel.BROKEN: "bold magenta",
        }.get(self, "dim white")


class EscalationTier(NiceEnum):
    """Coarse physical-condition tiers, ordered from healthy to desperate."""

    FRESH = "fresh"
    WINDED = "winded"
    INJURED = "injured"
    EXHAUSTED = "exhausted"
    DESPERATE = "desperate"

    @property
    def rank(self) -> int:
        return list(EscalationTier).index(self)

    @property
    def is_vulnerable(self) -> bool:
        return self in (EscalationTier.EXHAUSTED, EscalationTier.DESPERATE)


class BattlePhase(NiceEnum):
    """Named battle phases. They only ever move forward."""

    EARLY = "Early"
    MID = "Mid"
    LATE = "Late"

    @property
    def rank(self) -> int:
        return list(BattlePhase).index(self)


class EffectType(NiceEnum):
    """Closed set of status effect types."""

    BURN = "BURN"
    STUN = "STUN"
    DEFENSE_UP = "DEFENSE_UP"
    DEFENSE_DOWN = "DEFENSE_DOWN"
    ATTACK_UP = "ATTACK_UP"
    HEAL_OVER_TIME = "HEAL_OVER_TIME"
    SLOW = "SLOW"
    CRIT_UP = "CRIT_UP"

    @property
    def default_category(self) -> "EffectCategory":
        if self in (
            EffectType.DEFENSE_UP,
            EffectType.ATTACK_UP,
            EffectType.HEAL_OVER_TIME,
            EffectType.CRIT_UP,
        ):
            return EffectCategory.BUFF
        return EffectCategory.DEBUFF

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this effect type."""
        return {
            EffectType.BURN: "🔥",
            EffectType.STUN: "💫",
            EffectType.DEFENSE_UP: "🛡️",
            EffectType.DEFENSE_DOWN: "🩸",
            EffectType.ATTACK_UP: "💪",
            EffectType.HEAL_OVER_TIME: "💚",
            EffectType.SLOW: "🐌",
            EffectType.CRIT_UP: "🎯",
        }.get(self, "❔")


class EffectCategory(NiceEnum):
    BUFF = "buff"
    DEBUFF = "debuff"

    @property
    def color(self) -> str:
        return "bold green" if self == EffectCategory.BUFF else "bold red"


class CollateralImpact(NiceEnum):
    """Declared environmental impact of a move."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CATASTROPHIC = "catastrophic"

    @property
    def factor(self) -> float:
        return {
            CollateralImpact.NONE: 0.0,
            CollateralImpact.LOW: 0.05,
            CollateralImpact.MEDIUM: 0.15,
            CollateralImpact.HIGH: 0.3,
            CollateralImpact.CATASTROPHIC: 0.5,
        }[self]


class EnvironmentLevel(NiceEnum):
    """Classification of the accumulated environment damage."""

    NONE = "none"
    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"
    CATASTROPHIC = "catastrophic"


class TimeOfDay(NiceEnum):
    DAY = "day"
    NIGHT = "night"


class OutcomeType(NiceEnum):
    """Outcomes a curbstomp rule can force."""

    INSTANT_WIN = "instant_win"
    INSTANT_LOSS = "instant_loss"
    ENVIRONMENTAL_KILL = "environmental_kill"
    BUFF = "buff"
    DEBUFF = "debuff"
    MOMENTUM_ADVANTAGE = "momentum_advantage"
    EXTERNAL_INTERVENTION = "external_intervention"

    @property
    def is_lethal(self) -> bool:
        return self in (
            OutcomeType.INSTANT_WIN,
            OutcomeType.INSTANT_LOSS,
            OutcomeType.ENVIRONMENTAL_KILL,
        )


class ApplicabilityKind(NiceEnum):
    """Who a curbstomp rule applies to."""

    CHARACTER = "character"
    PAIR = "pair"
    ELEMENT = "element"
    FACTION = "faction"
    LOCATION = "location"
    ALL = "all"


class Intent(NiceEnum):
    """High level strategic intent driving move weights."""

    PRESS_ADVANTAGE = "PressAdvantage"
    CAPITALIZE_ON_OPENING = "CapitalizeOnOpening"
    DESPERATE_GAMBIT = "DesperateGambit"
    CAUTIOUS_DEFENSE = "CautiousDefense"
    BREAK_THE_TURTLE = "BreakTheTurtle"
    CONSERVE_ENERGY = "ConserveEnergy"
    UNFOCUSED_RAGE = "UnfocusedRage"
    PANICKED_DEFENSE = "PanickedDefense"
    OPENING_MOVES = "OpeningMoves"
    STANDARD_EXCHANGE = "StandardExchange"


class SelectionMode(NiceEnum):
    SOFTMAX = "softmax"
    TOP_CLUSTER = "top_cluster"


class LogEventType(NiceEnum):
    """Type tags for the structured battle log."""

    BATTLE_START = "BATTLE_START"
    PHASE = "PHASE"
    MOVE = "MOVE"
    REACTIVE_DEFENSE = "REACTIVE_DEFENSE"
    ESCALATION = "ESCALATION"
    MENTAL_STATE = "MENTAL_STATE"
    MANIPULATION = "MANIPULATION"
    STATUS = "STATUS"
    FUSION = "FUSION"
    TACTICAL = "TACTICAL"
    CURBSTOMP = "CURBSTOMP"
    DICE_ROLL = "DICE_ROLL"
    RECOVERY = "RECOVERY"
    DESPERATION = "DESPERATION"
    TERMINAL = "TERMINAL"
    EMERGENCY = "EMERGENCY"


class TerminationReason(NiceEnum):
    """How a battle ended."""

    MUTUAL_KO = "mutual_ko"
    STALEMATE = "stalemate"
    FORCED_DRAW = "forced_draw"
    TURN_LIMIT = "turn_limit"
    KNOCKOUT = "knockout"
    DEFEAT_MARKED = "defeat_marked"
    DECISIVE_GAP = "decisive_gap"
    EMERGENCY = "emergency"

    @property
    def is_draw(self) -> bool:
        return self in (
            TerminationReason.MUTUAL_KO,
            TerminationReason.STALEMATE,
            TerminationReason.FORCED_DRAW,
            TerminationReason.TURN_LIMIT,
            TerminationReason.EMERGENCY,
        )
