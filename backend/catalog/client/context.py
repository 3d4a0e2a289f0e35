"""Session context handed to dialogs and views instead of ambient globals."""
import enum
import inspect
import logging
from typing import Any, Callable, List, Optional

from pydantic import BaseModel

logger = logging.getLogger("catalog.dialogs")


class Severity(str, enum.Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Notification(BaseModel):
    title: str
    description: str
    severity: Severity = Severity.DEFAULT


class SessionContext:
    """Current user identity plus the page's refresh, notify and confirm hooks.

    ``on_refresh`` may be a plain function or a coroutine function; it is
    called once after every successful mutation so the hosting page can
    re-fetch its lists. ``on_confirm`` answers yes/no prompts and defaults
    to yes. Every notification is kept in ``notifications`` as well as
    forwarded to ``on_notify``.
    """

    def __init__(
        self,
        user_id: Optional[str],
        on_refresh: Optional[Callable[[], Any]] = None,
        on_notify: Optional[Callable[[Notification], Any]] = None,
        on_confirm: Optional[Callable[[str], bool]] = None,
    ):
        self.user_id = user_id
        self.on_refresh = on_refresh
        self.on_notify = on_notify
        self.on_confirm = on_confirm
        self.notifications: List[Notification] = []
        self.refresh_count = 0

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    def is_author(self, owner_id: Optional[str]) -> bool:
        return self.is_authenticated and owner_id is not None and str(owner_id) == str(self.user_id)

    async def request_refresh(self) -> None:
        self.refresh_count += 1
        if self.on_refresh is None:
            return
        result = self.on_refresh()
        if inspect.isawaitable(result):
            await result

    def notify(self, title: str, description: str, severity: Severity = Severity.DEFAULT) -> Notification:
        notification = Notification(title=title, description=description, severity=severity)
        self.notifications.append(notification)
        if severity == Severity.DESTRUCTIVE:
            logger.warning("%s %s", title, description)
        else:
            logger.info("%s %s", title, description)
        if self.on_notify is not None:
            self.on_notify(notification)
        return notification

    def confirm(self, message: str) -> bool:
        if self.on_confirm is None:
            return True
        return bool(self.on_confirm(message))
