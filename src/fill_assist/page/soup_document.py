"""
In-memory ``FormDocument`` backed by BeautifulSoup.

Used to run the locator and scanner over HTML snapshots and as the synthetic
page in tests. There is no layout engine, so scrolling is only recorded and
user edits are simulated with ``SoupControl.fill``.
"""

from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from fill_assist.core.logging import get_logger

logger = get_logger(__name__)

CONTROL_TAGS = ["input", "textarea", "select"]


def _attr(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


class SoupTooltip:
    def __init__(self, tag: Tag) -> None:
        self.tag = tag

    @property
    def attached(self) -> bool:
        return self.tag.parent is not None

    @property
    def text(self) -> str:
        return self.tag.get_text()

    def remove(self) -> None:
        if self.attached:
            self.tag.extract()


class SoupControl:
    def __init__(self, document: "SoupDocument", tag: Tag) -> None:
        self._document = document
        self.tag = tag
        self._listeners: List[Callable[[str], None]] = []

    def __repr__(self) -> str:
        return f"<SoupControl {self.tag_name} id={self.id!r} name={self.name!r}>"

    @property
    def tag_name(self) -> str:
        return self.tag.name

    @property
    def id(self) -> str:
        return _attr(self.tag, "id")

    @property
    def name(self) -> str:
        return _attr(self.tag, "name")

    @property
    def placeholder(self) -> str:
        return _attr(self.tag, "placeholder")

    @property
    def type(self) -> str:
        if self.tag.name == "textarea":
            return "textarea"
        if self.tag.name == "select":
            return "select-multiple" if self.tag.has_attr("multiple") else "select-one"
        return (_attr(self.tag, "type") or "text").lower()

    @property
    def required(self) -> bool:
        return self.tag.has_attr("required")

    @property
    def value(self) -> str:
        if self.tag.name == "textarea":
            return self.tag.get_text()
        if self.tag.name == "select":
            option = self.tag.find("option", selected=True) or self.tag.find("option")
            if option is None:
                return ""
            return _attr(option, "value") or option.get_text(strip=True)
        return _attr(self.tag, "value")

    def add_class(self, class_name: str) -> None:
        classes = list(self.tag.get("class") or [])
        if class_name not in classes:
            classes.append(class_name)
        self.tag["class"] = classes

    def remove_class(self, class_name: str) -> None:
        classes = [c for c in (self.tag.get("class") or []) if c != class_name]
        if classes:
            self.tag["class"] = classes
        elif self.tag.has_attr("class"):
            del self.tag["class"]

    def has_class(self, class_name: str) -> bool:
        return class_name in (self.tag.get("class") or [])

    def scroll_into_view(self) -> None:
        self._document.scrolled_to = self

    def add_input_listener(self, listener: Callable[[str], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def detach() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return detach

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def fill(self, value: str) -> None:
        """Simulate the user typing ``value`` into the control."""
        if self.tag.name == "textarea":
            self.tag.string = value
        else:
            self.tag["value"] = value
        for listener in list(self._listeners):
            listener(value)

    def enclosing_label(self) -> Optional["SoupLabel"]:
        parent = self.tag.find_parent("label")
        return SoupLabel(self._document, parent) if parent is not None else None


class SoupLabel:
    def __init__(self, document: "SoupDocument", tag: Tag) -> None:
        self._document = document
        self.tag = tag

    @property
    def text(self) -> str:
        return self.tag.get_text()

    @property
    def html_for(self) -> str:
        return _attr(self.tag, "for")

    def nested_control(self) -> Optional[SoupControl]:
        return self._document._control(self.tag.find(CONTROL_TAGS))


class SoupForm:
    def __init__(self, tag: Tag) -> None:
        self.tag = tag

    @property
    def id(self) -> str:
        return _attr(self.tag, "id")

    @property
    def name(self) -> str:
        return _attr(self.tag, "name")

    @property
    def action(self) -> str:
        return _attr(self.tag, "action")

    @property
    def method(self) -> str:
        return _attr(self.tag, "method").lower()


class SoupDocument:
    """A parsed HTML page that behaves like a (very small) live DOM."""

    def __init__(self, html: str, url: str = "", parser: str = "html.parser") -> None:
        self.soup = BeautifulSoup(html, parser)
        self._url = url
        # One handle per tag so listeners and identity survive repeated scans
        self._handles: Dict[int, SoupControl] = {}
        self._unload_callbacks: List[Callable[[], None]] = []
        self.scrolled_to: Optional[SoupControl] = None

    def _control(self, tag: Optional[Tag]) -> Optional[SoupControl]:
        if tag is None:
            return None
        handle = self._handles.get(id(tag))
        if handle is None or handle.tag is not tag:
            handle = SoupControl(self, tag)
            self._handles[id(tag)] = handle
        return handle

    @property
    def title(self) -> str:
        if self.soup.title is None:
            return ""
        return self.soup.title.get_text(strip=True)

    @property
    def url(self) -> str:
        return self._url

    def control_by_id(self, element_id: str) -> Optional[SoupControl]:
        return self._control(self.soup.find(CONTROL_TAGS, attrs={"id": element_id}))

    def input_by_name(self, name: str) -> Optional[SoupControl]:
        return self._control(self.soup.find("input", attrs={"name": name}))

    def controls(self) -> List[SoupControl]:
        return [self._control(tag) for tag in self.soup.find_all(CONTROL_TAGS)]

    def labels(self) -> List[SoupLabel]:
        return [SoupLabel(self, tag) for tag in self.soup.find_all("label")]

    def label_for(self, element_id: str) -> Optional[SoupLabel]:
        tag = self.soup.find("label", attrs={"for": element_id})
        return SoupLabel(self, tag) if tag is not None else None

    def forms(self) -> List[SoupForm]:
        return [SoupForm(tag) for tag in self.soup.find_all("form")]

    def show_tooltip(self, anchor: SoupControl, text: str, class_name: str) -> SoupTooltip:
        tag = self.soup.new_tag("div", attrs={"class": class_name})
        tag.string = text
        if anchor.id:
            tag["data-anchor"] = anchor.id
        container = self.soup.body or self.soup
        container.append(tag)
        return SoupTooltip(tag)

    def tooltips(self, class_name: str) -> List[SoupTooltip]:
        return [SoupTooltip(tag) for tag in self.soup.find_all(class_=class_name)]

    def on_unload(self, callback: Callable[[], None]) -> None:
        self._unload_callbacks.append(callback)

    def unload(self) -> None:
        """Simulate navigating away from the page."""
        callbacks, self._unload_callbacks = self._unload_callbacks, []
        logger.debug(f"Unloading page {self._url or '<snapshot>'}: {len(callbacks)} callbacks")
        for callback in callbacks:
            callback()
