"""
The page as the locator and highlighter see it.

A live browser DOM, a headless page or an in-memory HTML snapshot can all
serve as a ``FormDocument``; the matching code only talks to these protocols.
"""

from typing import Callable, List, Optional, Protocol

InputListener = Callable[[str], None]
Detach = Callable[[], None]


class Tooltip(Protocol):
    @property
    def attached(self) -> bool: ...

    def remove(self) -> None: ...


class FormControl(Protocol):
    """An input, textarea or select element."""

    @property
    def tag_name(self) -> str: ...

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def placeholder(self) -> str: ...

    @property
    def type(self) -> str: ...

    @property
    def required(self) -> bool: ...

    @property
    def value(self) -> str: ...

    def add_class(self, class_name: str) -> None: ...

    def remove_class(self, class_name: str) -> None: ...

    def has_class(self, class_name: str) -> bool: ...

    def scroll_into_view(self) -> None: ...

    def add_input_listener(self, listener: InputListener) -> Detach:
        """Call ``listener`` with the new value on every edit; returns a detach function."""
        ...

    def enclosing_label(self) -> Optional["Label"]: ...


class Label(Protocol):
    @property
    def text(self) -> str: ...

    @property
    def html_for(self) -> str: ...

    def nested_control(self) -> Optional[FormControl]: ...


class FormElement(Protocol):
    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def action(self) -> str: ...

    @property
    def method(self) -> str: ...


class FormDocument(Protocol):
    @property
    def title(self) -> str: ...

    @property
    def url(self) -> str: ...

    def control_by_id(self, element_id: str) -> Optional[FormControl]: ...

    def input_by_name(self, name: str) -> Optional[FormControl]: ...

    def controls(self) -> List[FormControl]:
        """Every form control in document order."""
        ...

    def labels(self) -> List[Label]: ...

    def label_for(self, element_id: str) -> Optional[Label]: ...

    def forms(self) -> List[FormElement]: ...

    def show_tooltip(self, anchor: FormControl, text: str, class_name: str) -> Tooltip: ...

    def on_unload(self, callback: Callable[[], None]) -> None: ...
