"""Exception hierarchy for the scrim bot.

Every error that can reach a user carries its reply text as the exception
message, so interaction handlers can answer with ``str(exc)`` directly.
"""

from __future__ import annotations


class ScrimError(Exception):
    """Base class for recoverable, user-facing errors."""


class InputValidationError(ScrimError):
    """User input was malformed or out of bounds."""


class SessionExpiredError(ScrimError):
    def __init__(self) -> None:
        super().__init__("Session expired. Please start over with `/scrim`.")


class EmptyCatalogError(ScrimError):
    def __init__(self) -> None:
        super().__init__("No maps available. Please contact an admin to add maps.")


class ChannelNotConfiguredError(ScrimError):
    def __init__(self) -> None:
        super().__init__("Scrim channel not configured. Please contact an admin.")


class ScrimNotActiveError(ScrimError):
    def __init__(self) -> None:
        super().__init__("This scrim is no longer active.")


class SelfInterestError(ScrimError):
    def __init__(self) -> None:
        super().__init__("You cannot show interest in your own scrim request.")


class NotAllowedError(ScrimError):
    """The acting user may not perform this change."""


class DuplicateScrimError(ScrimError):
    def __init__(self, message_id: int) -> None:
        super().__init__(f"A scrim for message {message_id} already exists.")
        self.message_id = message_id


class MessagingError(Exception):
    """A call to the chat platform failed."""


class RecipientUnreachableError(MessagingError):
    """A direct message could not be delivered to a user."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} cannot receive direct messages")
        self.user_id = user_id
