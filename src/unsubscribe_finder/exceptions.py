"""Custom exceptions for Unsubscribe Finder."""


class UnsubscribeFinderError(Exception):
    """Base exception for all Unsubscribe Finder errors."""


class InvalidInputError(UnsubscribeFinderError):
    """Exception raised for missing or malformed request parameters."""


class CredentialsMissingError(UnsubscribeFinderError):
    """Exception raised when a user has no stored delegated mailbox access."""


class AuthExpiredError(UnsubscribeFinderError):
    """Exception raised when the mailbox provider rejects the user's credential."""


class UpstreamError(UnsubscribeFinderError):
    """Exception raised for any other mailbox provider failure."""


class GmailAPIError(UpstreamError):
    """Exception raised for Gmail API related errors."""


class MalformedPayloadError(UpstreamError):
    """Exception raised when a message payload cannot be decoded."""


class PayloadTooDeepError(UpstreamError):
    """Exception raised when multipart nesting exceeds the configured depth."""


class RateLimitExceededError(UnsubscribeFinderError):
    """Exception raised when a user makes too many requests in one window."""


class ConfigurationError(UnsubscribeFinderError):
    """Exception raised for configuration related errors."""
