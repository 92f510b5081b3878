from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from wizard.flow.view import ViewNode


class Host(ABC):
    """What the engine needs from its surroundings: address bar, display, dialogs, clipboard."""

    location: str = ""

    @abstractmethod
    def replace_url(self, url: str) -> None:
        """Change the address without reloading."""

    @abstractmethod
    def mount(self, view: Optional[ViewNode]) -> None:
        """Replace the displayed view; None blanks it."""

    @abstractmethod
    def alert(self, message: str) -> None:
        ...

    @abstractmethod
    async def write_clipboard(self, text: str) -> None:
        ...

    @abstractmethod
    def leave(self, url: str) -> None:
        """Navigate away from the flow entirely (e.g. to a hosted checkout page)."""


@dataclass
class MemoryHost(Host):
    """Host that records every effect; drives server-rendered pages and tests."""
    location: str = "http://localhost/"
    view: Optional[ViewNode] = None
    alerts: List[str] = field(default_factory=list)
    clipboard: Optional[str] = None
    leftTo: Optional[str] = None

    def replace_url(self, url: str) -> None:
        self.location = url

    def mount(self, view: Optional[ViewNode]) -> None:
        self.view = view

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    async def write_clipboard(self, text: str) -> None:
        self.clipboard = text

    def leave(self, url: str) -> None:
        self.leftTo = url
