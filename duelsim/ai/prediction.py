"""
Opponent move prediction from a first-order sequence model.
"""

from duelsim.character.memory import AIMemory


def predict_next_move(
    memory: AIMemory, min_observations: int = 2
) -> tuple[str | None, float]:
    """
    Predicts the opponent's next move from what followed its last move.

    Args:
        memory (AIMemory): The predicting fighter's memory.
        min_observations (int): Transitions needed before predicting.

    Returns:
        tuple[str | None, float]: The most likely move and its confidence
        (its count over the total observed transitions), or (None, 0.0).

    """
    last = memory.last_opponent_move
    if last is None:
        return None, 0.0
    row = memory.opponent_sequence_log.get(last)
    if not row:
        return None, 0.0
    total = sum(row.values())
    if total < min_observations:
        return None, 0.0
    # Ties resolve to the alphabetically first move so predictions are stable.
    best_name, best_count = min(row.items(), key=lambda item: (-item[1], item[0]))
    return best_name, best_count / total
