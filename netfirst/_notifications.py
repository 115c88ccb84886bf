from __future__ import annotations

import abc
import logging
from typing import Any, Awaitable, Callable, List, Mapping, Optional

from netfirst._exceptions import NotificationUnavailable

logger = logging.getLogger("netfirst.notifications")

SHOW_NOTIFICATION_MESSAGE = "show-notification"


class Notification:
    def __init__(self, title: str, options: Optional[Mapping[str, Any]] = None) -> None:
        self.title = title
        self.options = dict(options or {})
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def __repr__(self) -> str:
        return f"<Notification {self.title!r}>"


class BaseWindowClient(abc.ABC):
    """An open application window the worker can see."""

    url: str

    @property
    def can_focus(self) -> bool:
        return True

    @abc.abstractmethod
    async def focus(self) -> "BaseWindowClient":
        raise NotImplementedError()


class BaseClients(abc.ABC):
    """Platform capability to enumerate, open and take control of windows."""

    @abc.abstractmethod
    async def match_all(self, type: str = "window") -> List[BaseWindowClient]:
        raise NotImplementedError()

    @abc.abstractmethod
    async def open_window(self, url: str) -> Optional[BaseWindowClient]:
        """
        Open a new window at ``url``.

        Returns:
            The new window, or None when the platform did not open one.
        """
        raise NotImplementedError()

    @abc.abstractmethod
    async def claim(self) -> None:
        """Make the current worker the controller of every open client."""
        raise NotImplementedError()


NotificationDisplay = Callable[[str, Mapping[str, Any]], Awaitable[Any]]


class NotificationBridge:
    """
    Displays notifications on request and reacts to clicks on them.

    Args:
        display: Platform callable that shows a notification, or None when the
            platform has no such capability.
        clients: Window capability used when a notification is clicked.
        entry_path: Path of the application's entry document.
    """

    def __init__(
        self,
        display: Optional[NotificationDisplay] = None,
        clients: Optional[BaseClients] = None,
        entry_path: str = "/admin.html",
    ) -> None:
        self.display = display
        self.clients = clients
        self.entry_path = entry_path

    async def show(self, title: str, options: Mapping[str, Any]) -> None:
        if self.display is None:
            raise NotificationUnavailable("The platform cannot display notifications")
        await self.display(title, options)

    async def handle_message(self, data: Any) -> None:
        if not isinstance(data, Mapping) or data.get("type") != SHOW_NOTIFICATION_MESSAGE:
            logger.debug(f"Ignoring message {data!r}")
            return

        try:
            await self.show(data.get("title", ""), data.get("options") or {})
        except NotificationUnavailable as exc:
            logger.error(f"Could not display notification: {exc}")

    async def handle_push(self, data: Any = None) -> None:
        logger.info("Push received")

    async def handle_click(self, notification: Notification) -> Optional[BaseWindowClient]:
        logger.info(f"Notification clicked: {notification.title!r}")
        notification.close()

        if self.clients is None:
            logger.warning("No window capability, cannot open the application")
            return None

        for client in await self.clients.match_all(type="window"):
            if self.entry_path in client.url and client.can_focus:
                return await client.focus()

        window = await self.clients.open_window(self.entry_path)
        if window is None:
            logger.warning(f"Could not open a window at {self.entry_path}")
        return window
