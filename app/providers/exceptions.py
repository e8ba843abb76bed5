"""Custom exceptions for the court booking service."""


class ConfigurationError(Exception):
    """Raised at startup when required site settings are missing."""


class CourtBookingError(Exception):
    """Raised when a step of the booking website workflow fails."""


class AuthenticationError(CourtBookingError):
    """Raised when every login attempt has failed."""


class PartnerAttachmentError(CourtBookingError):
    """Raised when the partner cannot be added to the booking dialog."""


class SaveControlNotFoundError(CourtBookingError):
    """Raised when the booking dialog has no Save button."""
