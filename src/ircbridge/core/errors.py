"""Bridge domain exceptions."""

from __future__ import annotations


class BridgeError(Exception):
    """Base for bridge domain errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_error = original_error


class BridgeConfigurationError(BridgeError):
    """Config validation or load failure."""


class AllCharactersInvalidError(BridgeError):
    """No legal IRC nick character survived sanitising a user ID and display name."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            "Could not get nick for user, all characters were invalid",
            code="all_characters_invalid",
            details={"user_id": user_id},
        )


class InvalidKindError(BridgeError):
    """Membership sync kind outside {initial, incremental}."""

    def __init__(self, kind: object) -> None:
        super().__init__(
            f"Bad kind: {kind}",
            code="invalid_kind",
            details={"kind": kind},
        )


class InvalidDirectionError(BridgeError):
    """Membership sync direction outside {matrixToIrc, ircToMatrix}."""

    def __init__(self, direction: object) -> None:
        super().__init__(
            f"Bad direction: {direction}",
            code="invalid_direction",
            details={"direction": direction},
        )
