"""Write a downloaded :class:`Document` to disk as HTML or EPUB."""

import logging
import os
from html import escape as hesc
from pathlib import Path

from ebooklib import epub
from slugify import slugify

from .config import LOCALE
from .models import Document

logger = logging.getLogger(__name__)

FORMATS = ("html", "epub")
CSS = "body{font-family:serif;line-height:1.6} h1,h2{font-family:sans-serif;page-break-after:avoid}"


def output_name(document: Document, fmt: str) -> str:
    return f"{slugify(document.title, allow_unicode=True) or 'novel'}.{fmt}"


def document_to_html(document: Document) -> str:
    """One HTML page: an <h1> per volume, an <h2> plus text per chapter."""
    body = "".join(
        f"<h1>{hesc(s.title)}</h1>\n"
        + "".join(f"<h2>{hesc(ss.title)}</h2>\n{ss.content_html}\n" for ss in s.subsections)
        for s in document.sections
    )
    return f"""<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" lang="{LOCALE.lower()}" xml:lang="{LOCALE.lower()}">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0, user-scalable=yes" />
  <meta name="author" content="{hesc(document.author)}" />
  <title>{hesc(document.title)}</title>
</head>
<body>
{body}</body>
</html>
"""


def build_epub(document: Document) -> epub.EpubBook:
    book = epub.EpubBook()
    book.set_identifier(f"qidian-{slugify(document.title, allow_unicode=True) or 'novel'}")
    book.set_title(document.title)
    book.set_language(LOCALE.lower())
    book.add_author(document.author)

    css = epub.EpubItem(uid="style_nav", file_name="style/style.css", media_type="text/css", content=CSS)
    book.add_item(css)

    spine = ["nav"]
    toc = []
    idx = 0
    for s_idx, section in enumerate(document.sections, 1):
        chapters = []
        for ss in section.subsections:
            idx += 1
            file_name = f"{str(idx).zfill(4)}.xhtml"
            chap = epub.EpubHtml(title=ss.title, file_name=file_name, lang=LOCALE.lower())
            chap.content = f"<h2>{hesc(ss.title)}</h2>\n{ss.content_html}"
            chap.add_item(css)
            book.add_item(chap)
            spine.append(chap)
            chapters.append(chap)
        toc.append((epub.Section(section.title), chapters))

    book.toc = tuple(toc)
    book.spine = spine
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    return book


def write_document(document: Document, out_dir: Path, fmt: str = "html") -> Path:
    """Write *document* into *out_dir*; returns the path of the new file.

    The file is written under a temporary name and moved into place, so a
    failed write never leaves a truncated book behind.
    """
    if fmt not in FORMATS:
        raise ValueError(f"unknown output format {fmt!r}")
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / output_name(document, fmt)
    tmp_path = out_path.with_name(out_path.name + ".part")
    try:
        if fmt == "html":
            tmp_path.write_text(document_to_html(document), encoding="utf-8")
        else:
            epub.write_epub(str(tmp_path), build_epub(document), {})
        os.replace(tmp_path, out_path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    logger.info("[success] %s created at: %s", fmt.upper(), out_path)
    return out_path
