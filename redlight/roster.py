"""Player roster: who is still in the game."""


class Player:
    __slots__ = ("index", "eliminated")

    def __init__(self, index: int):
        self.index = index
        self.eliminated = False

    def __repr__(self):
        return f"Player({self.index}, eliminated={self.eliminated})"


class PlayerRoster:
    """One slot per configured player; players are flagged, never removed."""

    def __init__(self, num_players: int = 0):
        self.players: list[Player] = []
        self.rebuild(num_players)

    def rebuild(self, num_players: int):
        """Recreate every slot (player count changed between sessions)."""
        self.players = [Player(i) for i in range(num_players)]

    def reset(self):
        for p in self.players:
            p.eliminated = False

    def eliminate(self, index: int) -> bool:
        """Flag ``index`` as out.  Returns ``False`` if it already was."""
        player = self.players[index]
        if player.eliminated:
            return False
        player.eliminated = True
        return True

    def is_eliminated(self, index: int) -> bool:
        return self.players[index].eliminated

    def all_eliminated(self) -> bool:
        return all(p.eliminated for p in self.players)

    def survivors(self) -> tuple[int, ...]:
        return tuple(p.index for p in self.players if not p.eliminated)

    def __len__(self):
        return len(self.players)
