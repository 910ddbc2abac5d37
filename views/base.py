# views/base.py
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

from services.errors import ApiError

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
SUCCESS = "success"
ERROR = "error"


class RequestSequence:
    """Monotonic request ids; only the latest issued id may apply its response."""

    def __init__(self):
        self._latest = 0

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_latest(self, request_id: int) -> bool:
        return request_id == self._latest


@dataclass
class ViewStatus:
    status: str = IDLE
    error: Optional[str] = None


async def fetch_all(*calls: Callable[[], Any]) -> list:
    """Run blocking client calls concurrently; the first failure fails the batch."""
    return await asyncio.gather(*(asyncio.to_thread(call) for call in calls))


class BaseView(ABC):
    """Page-local state with load/success/error transitions."""

    def __init__(self, client, notifier=None):
        self._client = client
        self._notifier = notifier
        self._requests = RequestSequence()
        self.state = ViewStatus()

    @abstractmethod
    def _fetchers(self) -> list[Callable[[], Any]]:
        """Blocking client calls that make up one load."""
        ...

    @abstractmethod
    def _apply(self, results: list) -> None:
        """Store the results of a successful, current load."""
        ...

    async def load(self) -> bool:
        """Fetch this page's data. Returns False if the load failed or went stale."""
        request_id = self._requests.issue()
        self.state = ViewStatus(status=LOADING)
        try:
            results = await fetch_all(*self._fetchers())
        except ApiError as e:
            if not self._requests.is_latest(request_id):
                logger.info("Discarding stale error for request %d", request_id)
                return False
            logger.error("API Error: %s", e)
            self.state = ViewStatus(status=ERROR, error=str(e))
            return False

        if not self._requests.is_latest(request_id):
            logger.info("Discarding stale response for request %d", request_id)
            return False
        self._apply(results)
        self.state = ViewStatus(status=SUCCESS)
        return True

    def _alert(self, message: str) -> None:
        if self._notifier is not None:
            self._notifier.send_error(message)
        else:
            logger.error(message)
