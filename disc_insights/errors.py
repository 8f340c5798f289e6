# disc_insights/errors.py
"""
Application error types.

Only connectivity and rate-limit errors carry a message meant for end users
(in Portuguese); everything else is logged and mapped to an error code.
"""
from typing import Optional

OFFLINE_MESSAGE = (
    "Não foi possível conectar ao servidor. Verifique sua conexão com a internet e tente novamente."
)
RATE_LIMIT_MESSAGE_TEMPLATE = (
    "Limite de requisições da análise por IA atingido. Tente novamente em {seconds} segundos."
)
TOO_MANY_ATTEMPTS_MESSAGE = (
    "Muitas tentativas. Por favor, aguarde alguns minutos antes de tentar novamente."
)


class AppError(Exception):
    """Base class for application errors."""
    def __init__(self, message="Application error occurred", code="APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ConnectivityError(AppError):
    """Raised when a backing service stays unreachable after retries."""
    def __init__(self, message=OFFLINE_MESSAGE, code="NET_001"):
        super().__init__(message, code)


class RateLimitedError(AppError):
    """Raised when the completion interface signals a rate limit."""
    def __init__(self, retry_after: int, message: Optional[str] = None, code="AI_429"):
        self.retry_after = max(int(retry_after), 1)
        super().__init__(message or RATE_LIMIT_MESSAGE_TEMPLATE.format(seconds=self.retry_after), code)


class CompletionError(AppError):
    """Raised when the completion interface fails for reasons other than rate limiting."""
    def __init__(self, message="Completion request failed", code="AI_001"):
        super().__init__(message, code)


class MalformedAnalysisError(AppError):
    """Raised when a completion cannot be parsed into an analysis record."""
    def __init__(self, message="Completion did not match the analysis schema", code="AI_002"):
        super().__init__(message, code)
