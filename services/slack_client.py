import logging
import sys
from typing import Optional

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """Alerts printed to the terminal (fallback and interactive default)."""

    def send(self, message: str) -> bool:
        print(f"[Dashboard] {message}", file=sys.stdout)
        return True

    def send_error(self, error: str) -> bool:
        print(f"[Dashboard error] {error}", file=sys.stderr)
        return True


class SlackNotifier:
    """Dashboard alerts posted to a Slack channel.

    Without a usable WebClient every call goes to the console instead. With
    ``suppress_repeats`` an alert identical to the last one posted is skipped,
    so a watch loop reports a missing employee once rather than every refresh.
    """

    def __init__(self, token: str, channel: str, suppress_repeats: bool = False):
        self._channel = channel
        self._suppress_repeats = suppress_repeats
        self._last_posted: Optional[str] = None
        self._client = None
        self._fallback = ConsoleNotifier()

        if token:
            try:
                from slack_sdk import WebClient
                self._client = WebClient(token=token)
            except Exception as e:
                logger.warning("Slack client unavailable, using console: %s", e)

    def _post(self, text: str) -> bool:
        if self._suppress_repeats and text == self._last_posted:
            logger.debug("Skipping repeated alert: %s", text)
            return True
        try:
            self._client.chat_postMessage(channel=self._channel, text=text)
        except Exception as e:
            logger.error("Slack post to %s failed: %s", self._channel, e)
            return False
        self._last_posted = text
        return True

    def send(self, message: str) -> bool:
        if self._client is None:
            return self._fallback.send(message)
        return self._post(f":busts_in_silhouette: {message}")

    def send_error(self, error: str) -> bool:
        if self._client is None:
            return self._fallback.send_error(error)
        return self._post(f"❌ Attendance dashboard: {error}")


def create_notifier(config: dict, token: str = ""):
    """Slack when enabled and a bot token is present, else the console."""
    slack_config = config["slack"]
    if slack_config["enabled"] and token:
        return SlackNotifier(
            token=token,
            channel=slack_config.get("notify_channel", ""),
            suppress_repeats=slack_config.get("suppress_repeats", False),
        )
    return ConsoleNotifier()
