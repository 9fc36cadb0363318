"""
Enhanced Error Handler - Error types, categorization and retry logic
Every failure path of the assistant ends up as answer text; this module
decides which text, whether to retry, and what the API reports.
"""
from typing import Dict, Optional, Callable, Any
import asyncio
import time
import traceback
from enum import Enum


class AssistantError(Exception):
    """Base class for assistant errors"""


class ConfigurationError(AssistantError):
    """Embedding provider missing or misconfigured"""


class EmbeddingProviderError(AssistantError):
    """Embedding call failed or timed out"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class InvalidQuestionError(AssistantError):
    """Empty, whitespace-only or oversized question"""


class ErrorCategory(Enum):
    """Error categories"""
    USER_ERROR = "user_error"  # Malformed question
    CONFIGURATION = "configuration"  # Provider unavailable or unconfigured
    RETRYABLE = "retryable"  # Transient provider errors (network, timeout)
    RATE_LIMIT = "rate_limit"  # Provider throttling (should wait)
    AUTH_ERROR = "auth_error"  # Bad API key
    SYSTEM_ERROR = "system_error"  # Anything else


class EnhancedErrorHandler:
    """Enhanced error handling with categorization and retry logic"""

    def __init__(self, max_retries: int = 3, retry_delay: float = 1.0, include_debug: bool = False):
        """
        Initialize error handler

        Args:
            max_retries: Maximum attempts per call
            retry_delay: Initial retry delay in seconds
            include_debug: Include exception details in API error responses
        """
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.include_debug = include_debug
        self.error_counts = {}  # Track error frequencies

    def categorize_error(self, error: Exception) -> ErrorCategory:
        """
        Categorize error type

        Args:
            error: Exception to categorize

        Returns:
            Error category
        """
        if isinstance(error, InvalidQuestionError):
            return ErrorCategory.USER_ERROR
        if isinstance(error, ConfigurationError):
            return ErrorCategory.CONFIGURATION

        status = getattr(error, 'status', None)
        if status == 429:
            return ErrorCategory.RATE_LIMIT
        if status in (401, 403):
            return ErrorCategory.AUTH_ERROR
        if isinstance(error, asyncio.TimeoutError) or (status is not None and status >= 500):
            return ErrorCategory.RETRYABLE

        error_message = str(error).lower()

        if any(keyword in error_message for keyword in ['rate limit', '429', 'too many requests', 'quota']):
            return ErrorCategory.RATE_LIMIT

        if any(keyword in error_message for keyword in ['api key', 'unauthorized', 'forbidden', '401', '403']):
            return ErrorCategory.AUTH_ERROR

        if any(keyword in error_message for keyword in ['timeout', 'timed out', 'connection', 'network', 'unavailable']):
            return ErrorCategory.RETRYABLE

        return ErrorCategory.SYSTEM_ERROR

    def should_retry(self, error: Exception, attempt: int) -> bool:
        """
        Determine if error should be retried

        Args:
            error: Exception that occurred
            attempt: Current attempt number (1-indexed)

        Returns:
            True if should retry
        """
        if attempt >= self.max_retries:
            return False

        category = self.categorize_error(error)
        return category in [ErrorCategory.RETRYABLE, ErrorCategory.RATE_LIMIT]

    def get_retry_delay(self, attempt: int, error: Exception) -> float:
        """Exponential backoff, doubled for rate limits"""
        category = self.categorize_error(error)

        if category == ErrorCategory.RATE_LIMIT:
            return self.retry_delay * (2 ** attempt) * 2
        return self.retry_delay * (2 ** attempt)

    async def retry_with_backoff(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute an async function with retry logic

        Args:
            func: Async function to execute
            *args, **kwargs: Function arguments

        Returns:
            Function result

        Raises:
            Last exception if all retries fail
        """
        last_error = None

        for attempt in range(1, self.max_retries + 1):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                last_error = e

                if not self.should_retry(e, attempt):
                    raise

                delay = self.get_retry_delay(attempt, e)
                await asyncio.sleep(delay)

        raise last_error

    def record_error(self, error: Exception) -> ErrorCategory:
        """Count an error and return its category"""
        category = self.categorize_error(error)
        error_key = f"{category.value}:{type(error).__name__}"
        self.error_counts[error_key] = self.error_counts.get(error_key, 0) + 1
        return category

    def format_error_response(self, error: Exception, context: Optional[Dict] = None) -> Dict:
        """
        Format error for API response

        Args:
            error: Exception
            context: Optional context information

        Returns:
            Formatted error response
        """
        category = self.record_error(error)

        user_messages = {
            ErrorCategory.USER_ERROR: "Please provide a valid question.",
            ErrorCategory.CONFIGURATION: "The embedding provider is not configured.",
            ErrorCategory.RETRYABLE: "Service temporarily unavailable. Please try again in a moment.",
            ErrorCategory.RATE_LIMIT: "Too many requests. Please wait a moment and try again.",
            ErrorCategory.AUTH_ERROR: "The embedding provider rejected the configured API key.",
            ErrorCategory.SYSTEM_ERROR: "Internal server error"
        }

        response = {
            'error': True,
            'error_type': category.value,
            'message': user_messages.get(category, "An error occurred."),
            'error_id': f"{category.value}_{int(time.time())}"
        }

        if context:
            response['context'] = context

        if self.include_debug:
            response['debug'] = {
                'error_class': type(error).__name__,
                'error_message': str(error),
                'traceback': traceback.format_exc()[:1000]
            }

        return response

    def get_error_stats(self) -> Dict:
        """Get error statistics"""
        return {
            'error_counts': dict(self.error_counts),
            'total_errors': sum(self.error_counts.values())
        }
