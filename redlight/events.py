"""Outbound game events and the listener interface the HUD implements."""

from dataclasses import dataclass

from .config import OUTCOME_ALL_ELIMINATED, OUTCOME_WINNERS, OUTCOME_NO_SURVIVORS


@dataclass(frozen=True)
class Outcome:
    """How a game ended.  ``winners`` holds 0-based player indices."""

    kind: str
    winners: tuple[int, ...] = ()

    @classmethod
    def all_eliminated(cls) -> "Outcome":
        return cls(OUTCOME_ALL_ELIMINATED)

    @classmethod
    def from_survivors(cls, survivors) -> "Outcome":
        survivors = tuple(survivors)
        if survivors:
            return cls(OUTCOME_WINNERS, survivors)
        return cls(OUTCOME_NO_SURVIVORS)


class GameListener:
    """Passive observer of a session.  Every hook is optional."""

    def on_phase_changed(self, phase: str):
        pass

    def on_player_eliminated(self, index: int):
        pass

    def on_round_changed(self, number: int):
        pass

    def on_game_over(self, outcome: Outcome):
        pass
