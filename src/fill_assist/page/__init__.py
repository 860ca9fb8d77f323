"""Page-side helpers: locate, highlight and scan form fields."""

from .highlighter import FieldHighlighter
from .locator import locate_field, normalize
from .scanner import describe_control, extract_page_data
from .soup_document import SoupDocument

__all__ = [
    "FieldHighlighter",
    "SoupDocument",
    "describe_control",
    "extract_page_data",
    "locate_field",
    "normalize",
]
