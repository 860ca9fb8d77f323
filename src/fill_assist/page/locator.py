"""
Heuristic form-field locator.

Given a human-supplied field name ("DLI number", "school-code", ...) find the
single control on the page it refers to. Strategies are tried in order and the
first hit wins; there is no scoring across strategies, and within the fuzzy
strategies the first control in document order wins.
"""

import re
from typing import Optional

from fill_assist.core.logging import get_logger

from .document import FormControl, FormDocument

logger = get_logger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(text: Optional[str]) -> str:
    """Lowercase and drop everything that is not an ASCII letter or digit."""
    return _NON_ALNUM.sub("", (text or "").lower())


def _match_attributes(document: FormDocument, needle: str) -> Optional[FormControl]:
    for control in document.controls():
        if (
            needle in normalize(control.id)
            or needle in normalize(control.name)
            or needle in normalize(control.placeholder)
        ):
            logger.debug(f"Found by attributes: id={control.id!r} name={control.name!r}")
            return control
    return None


def _match_labels(document: FormDocument, needle: str) -> Optional[FormControl]:
    for label in document.labels():
        if needle not in normalize(label.text):
            continue
        if label.html_for:
            control = document.control_by_id(label.html_for)
            if control is not None:
                logger.debug(f"Found by label for={label.html_for!r}")
                return control
        control = label.nested_control()
        if control is not None:
            logger.debug("Found control nested in label")
            return control
    return None


def locate_field(document: FormDocument, field_name: str) -> Optional[FormControl]:
    """Return the control best matching ``field_name``, or None.

    1. exact id
    2. exact ``name`` of an ``<input>``
    3. normalized substring of a control's id, name or placeholder
    4. normalized substring of a ``<label>``'s text, resolved through
       ``for`` or a nested control

    The document is re-scanned on every call.
    """
    if not field_name:
        return None

    control = document.control_by_id(field_name)
    if control is not None:
        logger.debug(f"Found by id: {field_name!r}")
        return control

    control = document.input_by_name(field_name)
    if control is not None:
        logger.debug(f"Found by name attribute: {field_name!r}")
        return control

    needle = normalize(field_name)
    if not needle:
        # An empty needle is a substring of everything
        logger.debug(f"Nothing to match after normalizing {field_name!r}")
        return None

    control = _match_attributes(document, needle) or _match_labels(document, needle)
    if control is None:
        logger.debug(f"No match found for: {field_name!r}")
    return control
