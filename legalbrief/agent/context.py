"""Serialization of reference documents into a prompt context block."""

from collections.abc import Sequence

from legalbrief.models import ReferenceDocument

MAX_DOCUMENT_CHARS = 14_000


class ContextFormatter:
    """Renders documents as one delimited <CASE_FILES> block.

    Each document's text is trimmed and capped at max_chars; the header keeps
    the original length so the model knows when content was cut.
    """

    def __init__(self, max_chars: int = MAX_DOCUMENT_CHARS) -> None:
        self.max_chars = max_chars

    def _render(self, document: ReferenceDocument) -> str:
        if document.is_binary:
            mime_type = document.binary_payload.mime_type
            return (
                f"--- FILE: {document.name} ({mime_type} attachment) ---\n"
                f"[binary {mime_type} content not shown]\n"
                "--- END ---"
            )

        original = document.text_content
        content = original.strip()[: self.max_chars]
        return f"--- FILE: {document.name} ({len(original)} chars) ---\n{content}\n--- END ---"

    def format(self, documents: Sequence[ReferenceDocument]) -> str:
        """Format documents in order.

        Returns:
            The context block, or an empty string when there are no documents.
        """
        if not documents:
            return ""

        formatted = "\n\n".join(self._render(doc) for doc in documents)
        return f"\n\n<CASE_FILES>\n{formatted}\n</CASE_FILES>\n"
