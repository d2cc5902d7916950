"""
Demo entry point for the duel engine.

Runs one battle and prints its structured log with rich formatting. The
engine itself never renders anything; this script is only a viewer.

Usage::

    python -m duelsim azula zuko fire-nation-capital --time night --seed 3
"""

import argparse
import logging

from duelsim.battle import BattleResult, simulate_battle
from duelsim.core.constants import LogEventType, MoveType
from duelsim.core.content import ContentRepository
from duelsim.core.logging import log_error, setup_logging
from duelsim.core.utils import cprint, crule, make_bar

EVENT_STYLES: dict[LogEventType, str] = {
    LogEventType.BATTLE_START: "bold green",
    LogEventType.PHASE: "bold cyan",
    LogEventType.MOVE: "white",
    LogEventType.REACTIVE_DEFENSE: "bold blue",
    LogEventType.ESCALATION: "yellow",
    LogEventType.MENTAL_STATE: "magenta",
    LogEventType.MANIPULATION: "bold magenta",
    LogEventType.STATUS: "cyan",
    LogEventType.FUSION: "bold cyan",
    LogEventType.TACTICAL: "dim white",
    LogEventType.CURBSTOMP: "bold red",
    LogEventType.DICE_ROLL: "dim white",
    LogEventType.RECOVERY: "dim white",
    LogEventType.DESPERATION: "bold red",
    LogEventType.TERMINAL: "bold green",
    LogEventType.EMERGENCY: "bold red",
}


def print_result(result: BattleResult, show_rolls: bool = False) -> None:
    """Prints a battle log and the final state of both fighters."""
    turn = -1
    for event in result.log:
        if event.type == LogEventType.DICE_ROLL and not show_rolls:
            continue
        if event.turn != turn:
            turn = event.turn
            crule(f"Turn {turn}" if turn else "Pre-battle", style="bold yellow")
        style = EVENT_STYLES.get(event.type, "white")
        deltas = ", ".join(f"{k} {v:+g}" for k, v in event.deltas.items() if v)
        suffix = f" [dim]({deltas})[/]" if deltas else ""
        icon = ""
        if event.type == LogEventType.MOVE:
            icon = MoveType(event.details["move_type"]).emoji + " "
        cprint(f"  [{style}]{event.type.value:<16}[/] {icon}{event.text}{suffix}")

    crule("Result", style="bold green")
    if result.is_draw:
        cprint(f"Draw: {result.termination_reason.display_name}", style="bold yellow")
    else:
        cprint(
            f"{result.winner_id} defeats {result.loser_id} "
            f"({result.termination_reason.display_name}) after {result.turns_played} turns",
            style="bold green",
        )
    if result.error:
        cprint(f"Error: {result.error}", style="bold red")
    for snapshot in result.final_fighter_states.values():
        hp_bar = make_bar(int(snapshot.health), 100, color="green")
        en_bar = make_bar(int(snapshot.energy), 100, color="blue")
        state = f" ({snapshot.tactical_state.name})" if snapshot.tactical_state else ""
        cprint(
            f"  {snapshot.name:<12} HP {hp_bar} {snapshot.health:5.1f}  "
            f"EN {en_bar} {snapshot.energy:5.1f}  MO {snapshot.momentum:+d}  "
            f"{snapshot.mental_level.colored_name}  {snapshot.escalation.value}{state}"
        )
    if result.environment_state is not None:
        env = result.environment_state
        cprint(f"  Environment: {env.level.value} ({env.damage_level:.1f})")


def main(argv: list[str] | None = None) -> int:
    repository = ContentRepository()
    parser = argparse.ArgumentParser(prog="duelsim", description="Simulate one duel.")
    parser.add_argument("fighter_a", nargs="?", default="azula", choices=sorted(repository.characters))
    parser.add_argument("fighter_b", nargs="?", default="zuko", choices=sorted(repository.characters))
    parser.add_argument(
        "location", nargs="?", default="fire-nation-capital", choices=sorted(repository.locations)
    )
    parser.add_argument("--time", default="day", choices=["day", "night"])
    parser.add_argument("--emotional", action="store_true", help="Enable emotional mode.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible battle.")
    parser.add_argument("--rolls", action="store_true", help="Show every dice roll.")
    parser.add_argument("--verbose", action="store_true", help="Show engine debug logs.")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)
    crule("Duel Simulator", style="bold green")
    try:
        result = simulate_battle(
            args.fighter_a,
            args.fighter_b,
            args.location,
            args.time,
            args.emotional,
            seed=args.seed,
            repository=repository,
        )
    except ValueError as e:
        log_error(f"Cannot start the duel: {e}")
        return 2
    print_result(result, show_rolls=args.rolls)
    return 1 if result.error else 0


if __name__ == "__main__":
    raise SystemExit(main())
