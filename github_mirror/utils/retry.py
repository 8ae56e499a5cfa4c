"""Retry decorator for handling GitHub GraphQL rate limits.

GraphQL requests can be throttled in three different ways: githubkit's primary
and secondary rate limit exceptions, a plain 403/429 response, or a successful
HTTP response whose GraphQL error list contains a ``RATE_LIMITED`` error. All
three are retried here with exponential backoff; every other failure is raised
immediately so that the caller can report it.
"""

import asyncio
import functools
import time
from typing import Any, Callable, TypeVar

import structlog
from githubkit.exception import GraphQLFailed, PrimaryRateLimitExceeded, RequestFailed, SecondaryRateLimitExceeded

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

GRAPHQL_RATE_LIMITED_ERROR_TYPE = "RATE_LIMITED"


def is_graphql_rate_limited(error: GraphQLFailed) -> bool:
    """Return True if any error in a failed GraphQL response is a rate limit error."""
    errors = getattr(error.response, "errors", None) or []
    return any(getattr(e, "type", None) == GRAPHQL_RATE_LIMITED_ERROR_TYPE for e in errors)


def _wait_time_from_headers(headers: Any, default: float) -> float:
    """Derive a wait time from retry-after or x-ratelimit-reset headers."""
    retry_after = headers.get("retry-after")
    if retry_after:
        try:
            return float(retry_after)
        except ValueError:
            logger.warning("Invalid retry-after header value", retry_after=retry_after)
            return default

    rate_limit_reset = headers.get("x-ratelimit-reset")
    if rate_limit_reset:
        try:
            reset_timestamp = int(rate_limit_reset)
        except ValueError:
            logger.warning("Invalid x-ratelimit-reset header value", rate_limit_reset=rate_limit_reset)
            return default
        current_timestamp = int(time.time())
        if reset_timestamp > current_timestamp:
            return reset_timestamp - current_timestamp + 1
    return default


def retry_on_rate_limit(
    max_retries: int = 10,
    initial_delay: float = 10.0,
    max_delay: float = 300.0,
    exponential_base: float = 2.0,
) -> Callable[[F], F]:
    """Decorator for retrying async GraphQL calls when they encounter GitHub rate limits.

    Args:
        max_retries: Maximum number of retry attempts (default: 10)
        initial_delay: Initial delay in seconds between retries (default: 10.0)
        max_delay: Maximum delay in seconds between retries (default: 300.0)
        exponential_base: Base for exponential backoff calculation (default: 2.0)

    Returns:
        Decorated function with retry logic

    Example:
        @retry_on_rate_limit()
        async def execute(self, text: str, variables: dict[str, Any]) -> dict[str, Any]:
            return await self.client.async_graphql(text, variables)
    """

    def decorator(func: F) -> F:
        if not asyncio.iscoroutinefunction(func):
            raise RuntimeError(f"Function {func.__name__} decorated with @retry_on_rate_limit must be async.")

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay

            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except (PrimaryRateLimitExceeded, SecondaryRateLimitExceeded) as e:
                    if attempt == max_retries:
                        logger.error(
                            "Max retries reached for GitHub rate limit error",
                            function=func.__name__,
                            attempt=attempt + 1,
                            error_type=type(e).__name__,
                        )
                        raise
                    if getattr(e, "retry_after", None):
                        wait_time = min(e.retry_after.total_seconds(), max_delay)
                    else:
                        wait_time = min(delay, max_delay)
                except GraphQLFailed as e:
                    if not is_graphql_rate_limited(e):
                        raise
                    if attempt == max_retries:
                        logger.error("Max retries reached for GraphQL rate limit error", function=func.__name__, attempt=attempt + 1)
                        raise
                    wait_time = min(delay, max_delay)
                except RequestFailed as e:
                    status_code = e.response.status_code
                    if status_code not in (403, 429):
                        raise
                    if attempt == max_retries:
                        logger.error(
                            "Max retries reached for rate limit error",
                            function=func.__name__,
                            attempt=attempt + 1,
                            status_code=status_code,
                            error=str(e),
                        )
                        raise
                    wait_time = min(_wait_time_from_headers(e.response.headers, delay), max_delay)

                logger.warning(
                    f"GitHub rate limit hit, retrying in {wait_time} seconds",
                    function=func.__name__,
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    wait_time=wait_time,
                )
                await asyncio.sleep(wait_time)
                delay = min(delay * exponential_base, max_delay)

        return async_wrapper  # type: ignore

    return decorator
