"""The PresentationAdapter protocol, the engine's view of a widget tree.

Discovery, evaluation and the session never touch widgets directly; every
read and write goes through this interface. ``formguard.memory`` provides an
in-memory implementation.
"""

from typing import Any, Callable, Protocol, runtime_checkable

from formguard.types import PresentationState, WidgetConstraints, WidgetKind


@runtime_checkable
class PresentationAdapter(Protocol):
    """Interface every widget-tree adapter must implement.

    Widgets, labels and error targets are opaque handles owned by the
    adapter. The engine only compares them by identity.
    """

    # Enumeration

    def is_container(self, node: Any) -> bool: ...

    def widgets(self, container: Any) -> list[Any]: ...

    # Widget reads

    def name_of(self, widget: Any) -> str | None: ...

    def id_of(self, widget: Any) -> str | None: ...

    def kind_of(self, widget: Any) -> WidgetKind: ...

    def value_of(self, widget: Any) -> str | None: ...

    def is_checked(self, widget: Any) -> bool: ...

    def constraints_of(self, widget: Any) -> WidgetConstraints: ...

    # Label and error target resolution

    def label_for_id(self, container: Any, widget_id: str) -> Any | None: ...

    def wrapping_label(self, widget: Any) -> Any | None: ...

    def bound_error_target(self, container: Any, name: str) -> Any | None: ...

    def next_sibling(self, node: Any) -> Any | None: ...

    def create_error_target(self, after: Any, name: str) -> Any:
        """Insert a new error element right after ``after`` and bind it to ``name``."""
        ...

    # Presentation writes

    def write_message(self, target: Any, text: str) -> None: ...

    def set_state(self, widget: Any, state: PresentationState) -> None: ...

    # Change notifications

    def on_change(self, widget: Any, callback: Callable[[], None]) -> None: ...
