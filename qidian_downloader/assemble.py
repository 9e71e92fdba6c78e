"""Fold extracted chapters into a :class:`Document`."""

from typing import Optional, Sequence

from .models import CatalogEntry, ContentFragment, Document, Section, Subsection


class DocumentBuilder:
    """Grows a Document one chapter at a time, in catalog order."""

    def __init__(self, title: str, author: str):
        self._document = Document(title=title, author=author)
        self._section_index: Optional[int] = None

    def add(self, entry: CatalogEntry, fragment: ContentFragment) -> None:
        if self._section_index != entry.section_index:
            self._document.sections.append(Section(title=entry.section_title))
            self._section_index = entry.section_index
        self._document.sections[-1].subsections.append(
            Subsection(title=fragment.title or entry.title, content_html=fragment.rendered_content)
        )

    def build(self) -> Document:
        return self._document


def assemble(
    title: str,
    author: str,
    catalog: Sequence[CatalogEntry],
    fragments: Sequence[ContentFragment],
) -> Document:
    """Group *fragments* (aligned 1:1 with *catalog*) into sections."""
    if len(catalog) != len(fragments):
        raise ValueError(f"{len(fragments)} fragments for {len(catalog)} catalog entries")
    builder = DocumentBuilder(title, author)
    for entry, fragment in zip(catalog, fragments):
        builder.add(entry, fragment)
    return builder.build()
