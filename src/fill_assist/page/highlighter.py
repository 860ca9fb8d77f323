"""
Highlight the field the assistant is talking about.

At most one control is highlighted at a time. A value hint shows a tooltip
that removes itself after a few seconds; the first edit of the highlighted
control emits a ``FieldFilled`` notification and clears the highlight shortly
after. The notification may never come if the user ignores the field.
"""

import asyncio
from functools import partial
from typing import Callable, List, Optional

from fill_assist.config.settings import settings
from fill_assist.core.errors import DocumentUnavailableError
from fill_assist.core.logging import get_logger
from fill_assist.core.schemas import FieldFilled

from .document import Detach, FormControl, FormDocument, Tooltip
from .locator import locate_field

logger = get_logger(__name__)


class FieldHighlighter:
    def __init__(
        self,
        document: Optional[FormDocument],
        on_field_filled: Optional[Callable[[FieldFilled], None]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        highlight_class: str = settings.highlight.highlight_class,
        tooltip_class: str = settings.highlight.tooltip_class,
        tooltip_timeout: float = settings.highlight.tooltip_timeout_seconds,
        clear_delay: float = settings.highlight.clear_after_fill_seconds,
    ) -> None:
        if document is None:
            raise DocumentUnavailableError()
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as error:
                raise DocumentUnavailableError(
                    "No event loop available for highlight timers"
                ) from error
        self.document = document
        self.on_field_filled = on_field_filled
        self.highlight_class = highlight_class
        self.tooltip_class = tooltip_class
        self.tooltip_timeout = tooltip_timeout
        self.clear_delay = clear_delay
        self._loop = loop
        self._active: Optional[FormControl] = None
        self._tooltip: Optional[Tooltip] = None
        self._detach: Optional[Detach] = None
        self._timers: List[asyncio.Handle] = []
        document.on_unload(self.teardown)

    @property
    def active(self) -> Optional[FormControl]:
        return self._active

    @property
    def tooltip(self) -> Optional[Tooltip]:
        return self._tooltip

    def _call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self._timers.append(self._loop.call_later(delay, callback))

    def highlight(
        self, field_name: str, field_value: Optional[str] = None
    ) -> Optional[FormControl]:
        """Highlight the control matching ``field_name``; None if the page has no such field."""
        self.clear_highlight()

        control = locate_field(self.document, field_name)
        if control is None:
            logger.debug(f"Field not found, nothing highlighted: {field_name!r}")
            return None

        self._active = control
        control.add_class(self.highlight_class)
        control.scroll_into_view()

        if field_value:
            self._tooltip = self.document.show_tooltip(
                control, f"Ready to paste: {field_value}", self.tooltip_class
            )
            self._call_later(self.tooltip_timeout, partial(self._expire_tooltip, self._tooltip))

        self._watch(control, field_name)
        logger.info(f"Highlighted field {field_name!r}")
        return control

    def _watch(self, control: FormControl, field_name: str) -> None:
        def on_input(value: str) -> None:
            detach()
            if self._detach is detach:
                self._detach = None
            notification = FieldFilled(field_name=field_name, field_value=value)
            logger.info(f"Field filled by user: {field_name!r}")
            if self.on_field_filled is not None:
                self.on_field_filled(notification)
            self._call_later(self.clear_delay, partial(self._clear_if_active, control))

        detach = control.add_input_listener(on_input)
        self._detach = detach

    def _expire_tooltip(self, tooltip: Tooltip) -> None:
        tooltip.remove()
        if self._tooltip is tooltip:
            self._tooltip = None

    def _clear_if_active(self, control: FormControl) -> None:
        if self._active is control:
            self.clear_highlight()

    def clear_highlight(self) -> None:
        for timer in self._timers:
            timer.cancel()
        self._timers = []
        if self._detach is not None:
            self._detach()
            self._detach = None
        if self._tooltip is not None:
            self._tooltip.remove()
            self._tooltip = None
        if self._active is not None:
            self._active.remove_class(self.highlight_class)
            self._active = None

    def teardown(self) -> None:
        """Drop all visual state; called when the page unloads."""
        self.clear_highlight()
