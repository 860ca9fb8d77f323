"""Snapshot of the forms and fillable fields on a page."""

from fill_assist.core.logging import get_logger
from fill_assist.core.schemas import FieldInfo, FormInfo, PageData

from .document import FormControl, FormDocument

logger = get_logger(__name__)

# Controls the user never types into
SKIPPED_TYPES = frozenset({"hidden", "submit", "button", "reset"})


def _label_text(document: FormDocument, control: FormControl) -> str:
    if control.id:
        label = document.label_for(control.id)
        if label is not None:
            return label.text.strip()
    parent = control.enclosing_label()
    return parent.text.strip() if parent is not None else ""


def describe_control(document: FormDocument, control: FormControl) -> FieldInfo:
    return FieldInfo(
        type=control.type,
        name=control.name,
        id=control.id,
        placeholder=control.placeholder,
        label=_label_text(document, control),
        required=control.required,
        value=control.value,
    )


def extract_page_data(document: FormDocument) -> PageData:
    forms = [
        FormInfo(
            id=form.id or f"form-{index}",
            name=form.name,
            action=form.action,
            method=form.method or "get",
        )
        for index, form in enumerate(document.forms())
    ]
    fields = [
        describe_control(document, control)
        for control in document.controls()
        if control.type not in SKIPPED_TYPES
    ]
    logger.info(f"Extracted {len(fields)} fields from {len(forms)} forms")
    return PageData(title=document.title, url=document.url, forms=forms, fields=fields)
