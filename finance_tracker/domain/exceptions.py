"""Domain-specific exceptions"""

from typing import Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class AuthenticationMissingError(DomainException):
    """No bearer credential was presented"""

    pass


class AuthenticationInvalidError(DomainException):
    """Identity provider rejected the credential"""

    pass


class IdentityProviderError(DomainException):
    """Identity provider is unreachable or returned an unexpected response"""

    pass


class AuthorizationDeniedError(DomainException):
    """Credential is valid but does not own the resource"""

    pass


class TransactionNotFoundError(DomainException):
    """Transaction id does not exist"""

    pass


class ParseFailureError(DomainException):
    """Model output could not be decoded into a transaction"""

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


class UpstreamRateLimitedError(DomainException):
    """LLM kept rate limiting after all retries"""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class UpstreamQuotaExhaustedError(DomainException):
    """LLM account quota is exhausted; retrying will not help"""

    pass


class LLMServiceError(DomainException):
    """LLM call failed for any other reason"""

    pass


class APIRequestError(DomainException):
    """Finance tracker API answered with an unexpected status"""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code
