"""
Mutable view tree produced by the step renderer.

A ``ViewNode`` plays the part of a DOM element: handlers mutate nodes in
place (error text, disabled buttons, busy labels) and ``click()`` runs a
node's handler to completion. ``to_html()`` serialises a tree for the
server-rendered pages.
"""
import html
import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Union

Handler = Callable[[], Union[None, Awaitable[None]]]

VOID_TAGS = {"input"}


@dataclass(eq=False)
class ViewNode:
    tag: str
    text: str = ""
    className: str = ""
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List["ViewNode"] = field(default_factory=list)
    onClick: Optional[Handler] = field(default=None, repr=False)
    disabled: bool = False

    def append(self, child: "ViewNode") -> "ViewNode":
        self.children.append(child)
        return child

    @property
    def value(self) -> str:
        return self.attrs.get("value", "")

    @value.setter
    def value(self, v: Any) -> None:
        self.attrs["value"] = "" if v is None else str(v)

    # --- queries -----------------------------------------------------------
    def walk(self) -> Iterator["ViewNode"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def find_all(self, tag: Optional[str] = None, className: Optional[str] = None) -> List["ViewNode"]:
        return [
            n for n in self.walk()
            if (tag is None or n.tag == tag) and (className is None or n.className == className)
        ]

    def find(self, tag: Optional[str] = None, className: Optional[str] = None) -> Optional["ViewNode"]:
        found = self.find_all(tag, className)
        return found[0] if found else None

    def find_by_attr(self, name: str, value: str) -> Optional["ViewNode"]:
        for n in self.walk():
            if n.attrs.get(name) == value:
                return n
        return None

    def find_button(self, label: str) -> Optional["ViewNode"]:
        for n in self.walk():
            if n.tag == "button" and n.text == label:
                return n
        return None

    def text_content(self) -> str:
        return "".join(n.text for n in self.walk())

    # --- interaction -------------------------------------------------------
    async def click(self) -> None:
        """Run this node's click handler (if any and not disabled) to completion."""
        if self.onClick is None or self.disabled:
            return
        result = self.onClick()
        if inspect.isawaitable(result):
            await result

    # --- serialisation -----------------------------------------------------
    def to_html(self) -> str:
        attrs = dict(self.attrs)
        if self.className:
            attrs["class"] = self.className
        if self.tag == "select":
            selected = attrs.pop("value", "")
            for option in self.children:
                if option.attrs.get("value", "") == selected and selected:
                    option.attrs["selected"] = "selected"
                else:
                    option.attrs.pop("selected", None)
        if self.disabled:
            attrs["disabled"] = "disabled"
        rendered = "".join(f' {k}="{html.escape(str(v), quote=True)}"' for k, v in attrs.items())
        if self.tag in VOID_TAGS:
            return f"<{self.tag}{rendered}>"
        inner = html.escape(self.text) + "".join(c.to_html() for c in self.children)
        return f"<{self.tag}{rendered}>{inner}</{self.tag}>"
