"""Shared interface for field structurers."""

from typing import Protocol

from certscan.classification.document_type import DocumentTypeInfo

RawFieldMap = dict[str, str]


class FieldStructurer(Protocol):
    """Turns recognized text into a map of named credential fields.

    Implementations must not raise on empty or garbled text; missing
    fields are simply left out of the map.
    """

    def structure_text(
        self, raw_text: str, type_info: DocumentTypeInfo | None = None
    ) -> RawFieldMap: ...
