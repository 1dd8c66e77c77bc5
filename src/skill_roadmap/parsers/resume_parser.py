"""Load résumé files into ResumeDocument objects."""

from __future__ import annotations

import re
from pathlib import Path

from skill_roadmap.errors import InvalidResumeError
from skill_roadmap.models.resume import ResumeDocument, ResumeMetadata, parse_resume_document

# Icons that résumé exports put in front of contact details
ICON_PATTERN = (
    r"[\U0001f4e7\U0001f4de\U0001f4cd\U0001f4bc\U0001f4c5\U0001f393"
    r"\U0001f3e2\U0001f4dd\U0001f4c4\U0001f517\U0001f310\U0001f4f1"
    r"☎✉✆✂]\s*"
)

FILE_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".json": "application/json",
}


def load_resume(file_path: str | Path) -> ResumeDocument:
    """Read a résumé file and return a ResumeDocument.

    ``.json`` files are structured résumés; ``.pdf``, ``.docx``, ``.txt``
    and ``.md`` become a document whose ``content`` holds the cleaned text.
    """
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix not in FILE_TYPES:
        raise InvalidResumeError(f"Unsupported file format: {path.suffix}")
    if not path.exists():
        raise InvalidResumeError(f"Résumé file not found: {path}")

    metadata = ResumeMetadata(
        original_file_name=path.name,
        file_size=path.stat().st_size,
        file_type=FILE_TYPES[suffix],
    )
    if suffix == ".json":
        document = parse_resume_document(path.read_bytes())
        if document.metadata is None:
            document = document.model_copy(update={"metadata": metadata})
        return document.model_copy(update={"file_path": document.file_path or str(path)})

    if suffix == ".pdf":
        text = _parse_pdf(path)
    elif suffix == ".docx":
        text = _parse_docx(path)
    else:
        text = path.read_text(encoding="utf-8")
    return ResumeDocument(
        title=path.stem,
        content=clean_text(text),
        file_path=str(path),
        metadata=metadata,
    )


def clean_text(text: str) -> str:
    """Strip export artifacts: BOMs, zero-width characters, icons, odd bullets."""
    text = text.lstrip("\ufeff")
    text = re.sub(r"[\u200b\u200c\u200d\u00ad\u2060\ufeff]", "", text)
    text = re.sub(ICON_PATTERN, "", text)

    # ●, •, ◦, ◆, ■, ▪, ★, ○ bullets become "- "
    text = re.sub(r"^(\s*)[●•◦◆■▪★○]\s*", r"\1- ", text, flags=re.MULTILINE)
    text = re.sub(r"^(\s*)\*\s{2,}", r"\1- ", text, flags=re.MULTILINE)

    lines = []
    for line in text.splitlines():
        stripped = line.lstrip()
        indent = " " * len(line[: len(line) - len(stripped)].replace("\t", "    "))
        stripped = re.sub(r"[ \t]{2,}", " ", stripped).rstrip()
        lines.append(f"{indent}{stripped}" if stripped else "")
    text = "\n".join(lines)

    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _parse_pdf(path: Path) -> str:
    import fitz  # pymupdf

    try:
        doc = fitz.open(str(path))
    except (RuntimeError, ValueError) as exc:
        raise InvalidResumeError(f"Could not open PDF {path.name}: {exc}") from exc
    try:
        return "\n".join(page.get_text() for page in doc)
    finally:
        doc.close()


def _parse_docx(path: Path) -> str:
    from docx import Document
    from docx.opc.exceptions import PackageNotFoundError

    try:
        doc = Document(str(path))
    except (PackageNotFoundError, ValueError, KeyError) as exc:
        raise InvalidResumeError(f"Could not open DOCX {path.name}: {exc}") from exc
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
