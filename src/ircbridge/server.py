"""One bridged IRC network: identity templates, nick minting and membership sync policy."""

from __future__ import annotations

from typing import Any

from loguru import logger

from ircbridge.config.schema import Config, is_valid_group_id
from ircbridge.core.errors import BridgeConfigurationError
from ircbridge.identity import IdentityResolver, NetworkIdentity, derive_nick
from ircbridge.membership import MembershipPolicy, SyncDirection, SyncKind


class IrcServer:
    """A single IRC network from the config, bridged to one homeserver.

    All state is derived from configuration at construction and never
    mutated, so instances can be shared freely.
    """

    def __init__(self, domain: str, config: dict[str, Any], homeserver_domain: str) -> None:
        self.domain = domain
        self.homeserver_domain = homeserver_domain
        self._config = config
        self.identity = NetworkIdentity(domain=domain, homeserver_domain=homeserver_domain)
        self.resolver = IdentityResolver(
            self.identity,
            user_template=config["matrixClients"]["userTemplate"],
            display_name_template=config["matrixClients"]["displayName"],
            alias_template=config["dynamicChannels"]["aliasTemplate"],
        )
        self.nick_template: str = config["ircClients"]["nickTemplate"]
        self.membership = MembershipPolicy.from_config(config.get("membershipLists"))
        self._group_id_valid = is_valid_group_id(self.get_group_id())

    def __repr__(self) -> str:
        return f"IrcServer({self.domain!r}, homeserver={self.homeserver_domain!r})"

    # -- network info -----------------------------------------------------

    def get_network_id(self) -> str:
        """Unique ID of this network across the bridge; defaults to the domain."""
        return self._config.get("networkId") or self.domain

    def get_readable_name(self) -> str:
        return self._config.get("name") or ""

    def get_group_id(self) -> Any:
        return self._config["dynamicChannels"].get("groupId")

    def are_groups_enabled(self) -> bool:
        return self._group_id_valid

    def get_hard_coded_room_ids(self) -> list[str]:
        """Every room ID mapped to any channel, deduplicated, in config order."""
        room_ids: dict[str, None] = {}
        for rooms in self._config.get("mappings", {}).values():
            for room_id in rooms:
                room_ids.setdefault(room_id, None)
        return list(room_ids)

    def is_excluded_channel(self, channel: str) -> bool:
        return channel in self._config["dynamicChannels"]["exclude"]

    def is_in_whitelist(self, user_id: str) -> bool:
        return user_id in self._config["dynamicChannels"]["whitelist"]

    def has_invite_rooms(self) -> bool:
        dynamic = self._config["dynamicChannels"]
        return bool(dynamic["enabled"]) and dynamic["joinRule"] == "invite"

    def creates_dynamic_aliases(self) -> bool:
        """Whether rooms for channels are created on demand with an alias."""
        dynamic = self._config["dynamicChannels"]
        return bool(dynamic["enabled"] and dynamic["createAlias"])

    def creates_public_aliases(self) -> bool:
        """Whether dynamic rooms are joinable through their alias alone."""
        return self.creates_dynamic_aliases() and self._config["dynamicChannels"]["joinRule"] == "public"

    def allows_pms(self) -> bool:
        return bool(self._config["privateMessages"]["enabled"])

    # -- users ------------------------------------------------------------

    def claims_user_id(self, user_id: str) -> bool:
        return self.resolver.claims_account(user_id)

    def get_nick_from_user_id(self, user_id: str) -> str | None:
        return self.resolver.extract_local_from_account(user_id)

    def get_user_id_from_nick(self, nick: str) -> str:
        return self.resolver.render_account_id(nick)

    def get_user_localpart(self, nick: str) -> str:
        return self.resolver.account_local_part(nick)

    def get_display_name_from_nick(self, nick: str) -> str:
        return self.resolver.render_display_name(nick)

    def get_user_regex(self) -> str:
        return self.resolver.user_regex()

    def get_nick(self, user_id: str, display_name: str | None = None) -> str:
        """Mint an IRC nick for a Matrix user connecting to this network."""
        return derive_nick(user_id, display_name, self.nick_template)

    # -- aliases ----------------------------------------------------------

    def claims_alias(self, alias: str) -> bool:
        return self.resolver.claims_alias(alias)

    def get_channel_from_alias(self, alias: str) -> str | None:
        return self.resolver.extract_local_from_alias(alias)

    def get_alias_from_channel(self, channel: str) -> str:
        return self.resolver.render_alias(channel)

    def get_alias_regex(self) -> str:
        return self.resolver.alias_regex()

    # -- membership lists -------------------------------------------------

    def is_membership_lists_enabled(self) -> bool:
        return self.membership.enabled

    def get_member_list_flood_delay_ms(self) -> int:
        return self.membership.flood_delay_ms

    def should_sync_membership_to_irc(self, kind: SyncKind | str, room_id: str | None = None) -> bool:
        return self.membership.resolve(SyncDirection.MATRIX_TO_IRC, kind, room_id)

    def should_sync_membership_to_matrix(self, kind: SyncKind | str, channel: str | None = None) -> bool:
        return self.membership.resolve(SyncDirection.IRC_TO_MATRIX, kind, channel)

    # -- validation -------------------------------------------------------

    def validate_templates(self) -> None:
        """Raise BridgeConfigurationError if a template cannot round-trip a sample value."""
        failures = self.resolver.self_test()
        if failures:
            raise BridgeConfigurationError(
                f"{self.domain}: templates do not round-trip: {', '.join(failures)}",
                code="template_round_trip",
                details={"server": self.domain, "templates": failures},
            )


def build_servers(config: Config) -> list[IrcServer]:
    """Build and validate an IrcServer for every configured network."""
    servers: list[IrcServer] = []
    homeserver = config.homeserver_domain
    for domain, server_cfg in config.servers.items():
        server = IrcServer(domain, server_cfg, homeserver)
        group_id = server.get_group_id()
        if group_id is not None and str(group_id).strip() and not server.are_groups_enabled():
            logger.warning(
                "{} has an incorrectly configured groupId for dynamicChannels and will not set groups.",
                domain,
            )
        server.validate_templates()
        servers.append(server)
    logger.info("Loaded {} IRC servers for homeserver {}", len(servers), homeserver)
    return servers


def find_server_for_user_id(servers: list[IrcServer], user_id: str) -> IrcServer | None:
    """First server whose user namespace claims ``user_id``."""
    return next((s for s in servers if s.claims_user_id(user_id)), None)


def find_server_for_alias(servers: list[IrcServer], alias: str) -> IrcServer | None:
    """First server whose alias namespace claims ``alias``."""
    return next((s for s in servers if s.claims_alias(alias)), None)
