"""Membership list sync policy: global defaults with per-room / per-channel overrides."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from loguru import logger

from ircbridge.core.errors import BridgeConfigurationError, InvalidDirectionError, InvalidKindError


class SyncDirection(str, Enum):
    """Which way a membership event crosses the bridge."""

    MATRIX_TO_IRC = "matrixToIrc"
    IRC_TO_MATRIX = "ircToMatrix"


class SyncKind(str, Enum):
    """Initial sync on startup/join, or incremental sync of live events."""

    INITIAL = "initial"
    INCREMENTAL = "incremental"


class SyncScope(str, Enum):
    GLOBAL = "global"
    ROOM = "room"
    CHANNEL = "channel"


# Overrides for matrix -> IRC are keyed by room ID, IRC -> matrix by channel
_OVERRIDE_SCOPE = {
    SyncDirection.MATRIX_TO_IRC: SyncScope.ROOM,
    SyncDirection.IRC_TO_MATRIX: SyncScope.CHANNEL,
}


def _parse_kind(kind: SyncKind | str) -> SyncKind:
    try:
        return SyncKind(kind)
    except ValueError:
        raise InvalidKindError(kind) from None


def _parse_direction(direction: SyncDirection | str) -> SyncDirection:
    try:
        return SyncDirection(direction)
    except ValueError:
        raise InvalidDirectionError(direction) from None


@dataclass(frozen=True)
class SyncRule:
    """Sync switches for one direction, globally or for a single room/channel."""

    scope: SyncScope
    direction: SyncDirection
    initial: bool = False
    incremental: bool = False
    entity: str | None = None

    def value(self, kind: SyncKind) -> bool:
        return self.initial if kind is SyncKind.INITIAL else self.incremental

    @classmethod
    def from_block(
        cls,
        scope: SyncScope,
        direction: SyncDirection,
        block: dict[str, Any],
        entity: str | None = None,
    ) -> SyncRule:
        """Build a rule from a ``{initial: bool, incremental: bool}`` block."""
        return cls(
            scope=scope,
            direction=direction,
            initial=bool(block.get(SyncKind.INITIAL.value, False)),
            incremental=bool(block.get(SyncKind.INCREMENTAL.value, False)),
            entity=entity,
        )


@dataclass(frozen=True)
class MembershipPolicy:
    """Decides whether membership events should be synced for a network.

    Overrides are kept in configuration order. When several overrides target
    the same room or channel, the last one in the list wins.
    """

    enabled: bool = False
    flood_delay_ms: int = 10000
    defaults: tuple[SyncRule, ...] = ()
    overrides: tuple[SyncRule, ...] = ()

    def global_default(self, direction: SyncDirection, kind: SyncKind) -> bool:
        for rule in self.defaults:
            if rule.direction is direction:
                return rule.value(kind)
        return False

    def resolve(
        self,
        direction: SyncDirection | str,
        kind: SyncKind | str,
        entity: str | None = None,
    ) -> bool:
        """Return whether a ``kind`` membership sync in ``direction`` should happen.

        ``entity`` is a room ID for matrix -> IRC, a channel name for IRC -> matrix.
        Raises InvalidKindError if ``kind`` is not initial/incremental, then
        InvalidDirectionError if ``direction`` is not matrixToIrc/ircToMatrix.
        """
        kind = _parse_kind(kind)
        direction = _parse_direction(direction)
        if not self.enabled:
            return False
        should_sync = self.global_default(direction, kind)
        if not entity:
            return should_sync
        scope = _OVERRIDE_SCOPE[direction]
        for rule in self.overrides:
            if rule.scope is scope and rule.direction is direction and rule.entity == entity:
                should_sync = rule.value(kind)
        return should_sync

    @classmethod
    def from_config(cls, block: dict[str, Any] | None) -> MembershipPolicy:
        """Parse a ``membershipLists`` config block."""
        block = block or {}
        global_cfg = block.get("global") or {}
        defaults = tuple(
            SyncRule.from_block(SyncScope.GLOBAL, direction, global_cfg.get(direction.value) or {})
            for direction in SyncDirection
        )
        overrides: list[SyncRule] = []
        skipped = 0
        for list_key, entity_key, direction in (
            ("rooms", "room", SyncDirection.MATRIX_TO_IRC),
            ("channels", "channel", SyncDirection.IRC_TO_MATRIX),
        ):
            raw = block.get(list_key) or []
            if not isinstance(raw, list):
                raise BridgeConfigurationError(
                    f"membershipLists.{list_key} must be a list",
                    code="invalid_membership_lists",
                    details={"key": list_key, "type": type(raw).__name__},
                )
            for item in raw:
                if not isinstance(item, dict) or not item.get(entity_key):
                    skipped += 1
                    continue
                # Entries without a block for their direction never override
                sync_block = item.get(direction.value)
                if not isinstance(sync_block, dict):
                    continue
                overrides.append(
                    SyncRule.from_block(
                        _OVERRIDE_SCOPE[direction],
                        direction,
                        sync_block,
                        entity=str(item[entity_key]),
                    )
                )
        if skipped:
            logger.warning("Membership lists: skipped {} malformed override entries", skipped)
        return cls(
            enabled=bool(block.get("enabled", False)),
            flood_delay_ms=int(block.get("floodDelayMs", 10000)),
            defaults=defaults,
            overrides=tuple(overrides),
        )
