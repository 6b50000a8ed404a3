"""In-memory widget tree and its PresentationAdapter.

A small HTML-like element tree used by the CLI, the YAML loader and the
tests. It follows browser conventions where they matter to discovery:
- widgets are ``input``, ``textarea`` and ``select`` elements
- labels bind through ``for="<id>"`` or by wrapping the widget
- an error element binds explicitly through ``data-formguard-error-for``
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from formguard.types import PresentationState, WidgetConstraints, WidgetKind

WIDGET_TAGS = ("input", "textarea", "select")
ERROR_FOR_ATTRIBUTE = "data-formguard-error-for"
ERROR_CLASS = "formguard-error"

_INPUT_KINDS = {
    "checkbox": WidgetKind.CHECKBOX,
    "radio": WidgetKind.RADIO,
    "number": WidgetKind.NUMBER,
}


@dataclass(eq=False)
class MemoryElement:
    """A node in the in-memory tree.

    Attributes:
        tag: Lower-case tag name
        attrs: Attribute name -> value (boolean attributes map to "")
        children: Child elements in document order
        text: Text content (used by labels and error elements)
        value: Current value of a widget
        checked: Checked flag of checkbox/radio widgets
        state: Last presentation state written by the engine
    """

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list["MemoryElement"] = field(default_factory=list)
    text: str = ""
    value: str | None = None
    checked: bool = False
    state: PresentationState = PresentationState.NEUTRAL
    parent: "MemoryElement | None" = field(default=None, repr=False)
    listeners: list[Callable[[], None]] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        for child in self.children:
            child.parent = self

    def get(self, attr: str) -> str | None:
        return self.attrs.get(attr)

    def has(self, attr: str) -> bool:
        return attr in self.attrs

    def append(self, child: "MemoryElement") -> "MemoryElement":
        child.parent = self
        self.children.append(child)
        return child

    def insert_after(self, new: "MemoryElement") -> "MemoryElement":
        """Insert ``new`` as the sibling immediately following this element."""
        if self.parent is None:
            raise ValueError(f"<{self.tag}> has no parent to insert into")
        siblings = self.parent.children
        new.parent = self.parent
        siblings.insert(siblings.index(self) + 1, new)
        return new

    def iter(self) -> Iterator["MemoryElement"]:
        """Yield all descendants in document (pre-)order."""
        for child in self.children:
            yield child
            yield from child.iter()

    def ancestors(self) -> Iterator["MemoryElement"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def next_sibling(self) -> "MemoryElement | None":
        if self.parent is None:
            return None
        siblings = self.parent.children
        position = siblings.index(self) + 1
        return siblings[position] if position < len(siblings) else None

    def set_value(self, value: str | None) -> None:
        self.value = value
        self._notify()

    def set_checked(self, checked: bool) -> None:
        self.checked = checked
        self._notify()

    def _notify(self) -> None:
        for listener in list(self.listeners):
            listener()


def _attr_name(key: str) -> str:
    # for_ -> for, class_ -> class, data_formguard_error_for -> data-formguard-error-for
    return key.rstrip("_").replace("_", "-")


def element(
    tag: str,
    *children: MemoryElement,
    text: str = "",
    value: str | None = None,
    checked: bool = False,
    **attrs: Any,
) -> MemoryElement:
    """Build an element.

    Keyword attributes use underscores for dashes; a trailing underscore
    escapes Python keywords (``for_``, ``class_``). ``True`` marks a
    boolean attribute, ``False``/``None`` omit it.
    """
    tag = tag.lower()
    resolved: dict[str, str] = {}
    for key, raw in attrs.items():
        if raw is None or raw is False:
            continue
        resolved[_attr_name(key)] = "" if raw is True else str(raw)

    if value is None and tag in WIDGET_TAGS:
        kind = resolved.get("type", "").lower()
        value = "on" if kind in ("checkbox", "radio") else ""

    return MemoryElement(
        tag=tag,
        attrs=resolved,
        children=list(children),
        text=text,
        value=value,
        checked=checked,
    )


def form(*children: MemoryElement, **attrs: Any) -> MemoryElement:
    """Build a ``<form>`` container."""
    return element("form", *children, **attrs)


def _parse_bound(raw: str | None) -> float | None:
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError:
        return None


class MemoryAdapter:
    """PresentationAdapter over MemoryElement trees."""

    def is_container(self, node: Any) -> bool:
        return isinstance(node, MemoryElement) and node.tag == "form"

    def widgets(self, container: MemoryElement) -> list[MemoryElement]:
        return [node for node in container.iter() if node.tag in WIDGET_TAGS]

    def name_of(self, widget: MemoryElement) -> str | None:
        return widget.get("name") or None

    def id_of(self, widget: MemoryElement) -> str | None:
        return widget.get("id") or None

    def kind_of(self, widget: MemoryElement) -> WidgetKind:
        if widget.tag == "select":
            return WidgetKind.OTHER
        if widget.tag == "textarea":
            return WidgetKind.TEXT
        return _INPUT_KINDS.get((widget.get("type") or "").lower(), WidgetKind.TEXT)

    def value_of(self, widget: MemoryElement) -> str | None:
        return widget.value

    def is_checked(self, widget: MemoryElement) -> bool:
        return widget.checked

    def constraints_of(self, widget: MemoryElement) -> WidgetConstraints:
        return WidgetConstraints(
            required=widget.has("required"),
            min=_parse_bound(widget.get("min")),
            max=_parse_bound(widget.get("max")),
        )

    def label_for_id(self, container: MemoryElement, widget_id: str) -> MemoryElement | None:
        for node in container.iter():
            if node.tag == "label" and node.get("for") == widget_id:
                return node
        return None

    def wrapping_label(self, widget: MemoryElement) -> MemoryElement | None:
        for node in widget.ancestors():
            if node.tag == "label":
                return node
        return None

    def bound_error_target(self, container: MemoryElement, name: str) -> MemoryElement | None:
        for node in container.iter():
            if node.get(ERROR_FOR_ATTRIBUTE) == name:
                return node
        return None

    def next_sibling(self, node: MemoryElement) -> MemoryElement | None:
        return node.next_sibling()

    def create_error_target(self, after: MemoryElement, name: str) -> MemoryElement:
        target = element(
            "div",
            class_=ERROR_CLASS,
            aria_live="polite",
            data_formguard_error_for=name,
        )
        return after.insert_after(target)

    def write_message(self, target: MemoryElement, text: str) -> None:
        target.text = text
        target.attrs["style"] = "display: block" if text else "display: none"

    def set_state(self, widget: MemoryElement, state: PresentationState) -> None:
        widget.state = state

    def on_change(self, widget: MemoryElement, callback: Callable[[], None]) -> None:
        widget.listeners.append(callback)
