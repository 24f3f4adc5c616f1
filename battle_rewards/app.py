"""
Battle rewards application - wires the engine together.

Usage:
    bus = EventBus()
    rewards = BattleRewards(host=MyHost(), event_bus=bus,
                            config_path="config/battle_rewards.json")
    rewards.start()

    # The host publishes BattleEvent notifications on `bus`...

    rewards.stop()
"""

from __future__ import annotations

import logging
import random
import time
from pathlib import Path
from typing import Callable, Optional

from battle_rewards.battle.tracker import BattleTracker
from battle_rewards.errors import ConfigError, StartupError
from battle_rewards.host import RewardHost
from battle_rewards.rewards.cooldowns import CooldownTracker
from battle_rewards.rewards.defaults import default_config
from battle_rewards.rewards.dispatcher import RewardDispatcher
from battle_rewards.rewards.models import RewardConfig, Trigger
from battle_rewards.rewards.selector import RewardSelector
from battle_rewards.rewards.service import RewardService
from reward_engine.core import EngineEvent, EventBus, PeriodicTask
from reward_engine.resources import ConfigStore

logger = logging.getLogger(__name__)

VERSION = "1.3.0"
SCHEMA_NAME = "battle_rewards.schema.json"
DEFAULT_CONFIG_PATH = Path("config") / "battle_rewards.json"

# Sweep interval for finished/idle battles, seconds
SWEEP_INTERVAL = 1.0


class BattleRewards:
    """
    Battle reward engine.

    Owns the configuration, the cooldown store and the battle tracker,
    subscribes the tracker to host events and runs the sweeper.

    Raises:
        StartupError: the host collaborator is missing or the initial
            configuration cannot be loaded
    """

    def __init__(
        self,
        host: RewardHost,
        event_bus: Optional[EventBus] = None,
        config_path: Path | str = DEFAULT_CONFIG_PATH,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
        sweep_interval: float = SWEEP_INTERVAL,
    ):
        if not isinstance(host, RewardHost):
            raise StartupError(
                f"A RewardHost implementation is required, got {type(host).__name__}"
            )

        self.host = host
        self.events = event_bus or EventBus()
        self.config_store: ConfigStore[RewardConfig] = ConfigStore(
            config_path, RewardConfig, SCHEMA_NAME, default_factory=default_config,
        )

        try:
            config = self.config_store.load()
        except ConfigError as e:
            raise StartupError(f"Cannot start without a valid configuration: {e}") from e
        self._apply_debug(config)

        rng = rng or random.Random()
        self.cooldowns = CooldownTracker(clock=clock)
        self.selector = RewardSelector(self._current_config, rng=rng)
        self.dispatcher = RewardDispatcher(
            host, self.cooldowns, self._current_config, rng=rng, event_bus=self.events,
        )
        self.rewards = RewardService(self.selector, self.dispatcher)
        self.tracker = BattleTracker(self.rewards, clock=clock)
        self.sweeper = PeriodicTask(self.tracker.sweep, interval=sweep_interval, name="battle-sweeper")

        self._started = False

    @property
    def config(self) -> RewardConfig:
        """The active configuration."""
        return self.config_store.current

    @property
    def is_running(self) -> bool:
        return self._started

    def _current_config(self) -> RewardConfig:
        return self.config_store.current

    def start(self) -> None:
        """Subscribe to host events and start sweeping."""
        if self._started:
            return
        self.tracker.subscribe(self.events)
        self.sweeper.start()
        self._started = True
        logger.info(f"Battle Rewards v{VERSION} ready ({self.config.reward_count} rewards)")
        self.events.publish(EngineEvent.ENGINE_STARTED, version=VERSION)

    def stop(self) -> None:
        """Unsubscribe and stop the sweeper."""
        if not self._started:
            return
        self.tracker.unsubscribe(self.events)
        self.sweeper.stop()
        self._started = False
        self.events.publish(EngineEvent.ENGINE_STOPPED)

    def reload(self) -> bool:
        """
        Re-read the configuration file.

        The new rule set replaces the old one in a single swap. On
        failure the old rule set stays active.

        Returns:
            True if the new configuration is active
        """
        try:
            config = self.config_store.reload()
        except ConfigError as e:
            logger.error(f"Failed to reload configuration: {e}")
            self.events.publish(EngineEvent.CONFIG_RELOAD_FAILED, error=str(e))
            return False

        self._apply_debug(config)
        self.events.publish(EngineEvent.CONFIG_RELOADED, reward_count=config.reward_count)
        return True

    def status(self) -> str:
        """Version line for the base command."""
        return f"Battle Rewards v{VERSION}"

    def list_rewards(self) -> str:
        """Human-readable summary of configured rewards, grouped by trigger."""
        config = self.config
        lines = ["Battle Rewards", ""]
        for trigger in Trigger:
            lines.append(f"{trigger.value}:")
            rewards = config.rewards_for(trigger)
            if not rewards:
                lines.append("  (none)")
            for reward in sorted(rewards, key=lambda r: r.order):
                types = ", ".join(reward.battle_types)
                lines.append(
                    f"  - {reward.id} [{reward.type}] order {reward.order}, "
                    f"{reward.chance:g}% chance, {types}"
                )
            lines.append("")
        return "\n".join(lines).rstrip()

    def _apply_debug(self, config: RewardConfig) -> None:
        level = logging.DEBUG if config.debug_enabled else logging.INFO
        logging.getLogger("battle_rewards").setLevel(level)

    def __enter__(self) -> BattleRewards:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
