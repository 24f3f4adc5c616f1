"""
Host game boundary.

The reward engine never talks to the game directly. Everything it
needs from the host (sending chat, running commands, touching a
player's inventory) goes through a RewardHost implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from battle_rewards.rewards.models import ItemStack


@dataclass
class Player:
    """
    A connected player as seen by the reward engine.

    Attributes:
        uuid: Stable player identity
        name: Display name
        dimension: Identifier of the world partition the player is in
        position: Block coordinates (x, y, z)
    """
    uuid: str
    name: str
    dimension: str = "minecraft:overworld"
    position: tuple[int, int, int] = (0, 0, 0)

    @property
    def coords(self) -> str:
        """Coordinates formatted as x,y,z."""
        x, y, z = self.position
        return f"{x},{y},{z}"


class RewardHost(ABC):
    """
    Services the host game provides to the reward engine.

    Implementations should be fast and non-blocking; they are called
    from whatever thread delivered the battle notification.
    """

    @abstractmethod
    def send_message(self, player: Player, text: str) -> None:
        """Send a formatted chat message to a player."""

    @abstractmethod
    def execute_command(self, command: str, player: Player) -> None:
        """
        Run a fully substituted server command.

        Raise any exception to signal failure.
        """

    @abstractmethod
    def give_item(self, player: Player, stack: ItemStack) -> bool:
        """
        Insert an item stack into a player's inventory.

        Returns:
            False if the inventory had no room
        """

    @abstractmethod
    def drop_item(self, player: Player, stack: ItemStack) -> None:
        """Drop an item stack on the ground at the player's position."""

    def parse_item(self, payload: str) -> ItemStack:
        """
        Turn a configured item payload into an item stack.

        The default accepts the JSON object form understood by
        ItemStack.from_payload. Hosts with their own item format
        override this.

        Raises:
            ItemPayloadError: the payload is malformed
        """
        from battle_rewards.rewards.models import ItemStack

        return ItemStack.from_payload(payload)
