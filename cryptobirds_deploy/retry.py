"""Bounded retries for transient JSON-RPC transport failures."""
from __future__ import annotations

import logging
from typing import Callable, Tuple, Type, TypeVar

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# Reverts, estimation failures and nonce errors are deliberately absent.
TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    ConnectionError,
    TimeoutError,
)


class RetryPolicy:
    """Exponential backoff with jitter, capped at ``max_attempts`` tries."""

    def __init__(
        self,
        max_attempts: int = 3,
        initial_wait: float = 1.0,
        max_wait: float = 10.0,
        *,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.initial_wait = initial_wait
        self.max_wait = max(max_wait, initial_wait)
        self._sleep = sleep

    def _retrying(self) -> Retrying:
        kwargs = {}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return Retrying(
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(initial=self.initial_wait, max=self.max_wait, jitter=self.initial_wait),
            before_sleep=before_sleep_log(_LOGGER, logging.WARNING),
            reraise=True,
            **kwargs,
        )

    def call(self, operation: Callable[..., T], *args, **kwargs) -> T:
        """Run ``operation``, retrying only on :data:`TRANSIENT_ERRORS`."""

        return self._retrying()(operation, *args, **kwargs)


NO_RETRY = RetryPolicy(max_attempts=1)

__all__ = ["NO_RETRY", "RetryPolicy", "TRANSIENT_ERRORS"]
