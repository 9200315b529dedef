"""
Custom exceptions for flashdeck.
"""


class FlashdeckError(Exception):
    """Base exception for all flashdeck exceptions."""
    pass


class ConfigurationError(FlashdeckError, ValueError):
    """Raised when settings or the strategy table are invalid."""
    pass


class CardValidationError(FlashdeckError):
    """Raised when a card's content cannot be presented."""
    pass


class SessionError(FlashdeckError):
    """Raised when a session operation is not allowed in the current state."""
    pass
