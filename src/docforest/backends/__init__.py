"""Document rendering backends."""

from docforest.backends.base import DocumentBackend
from docforest.backends.html import HtmlBackend
from docforest.backends.markdown import MarkdownBackend

__all__ = [
    "DocumentBackend",
    "HtmlBackend",
    "MarkdownBackend",
    "create_backend",
]


def create_backend(output_format: str, code_syntax: str = "swift") -> DocumentBackend:
    """Create the backend for an output format ("markdown" or "html")."""
    if output_format == "html":
        return HtmlBackend(code_syntax)
    if output_format == "markdown":
        return MarkdownBackend(code_syntax)
    raise ValueError(f"Invalid output format: '{output_format}'. Must be 'markdown' or 'html'.")
