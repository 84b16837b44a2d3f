from __future__ import annotations

from typing import Optional

from lumedit.core.settings import EditorSettings
from lumedit.export.ies_writer import generate_ies_text
from lumedit.models.document import IESDocument
from lumedit.parser.ies_parser import parse_ies_text


def parse(text: str, file_name: str = "") -> IESDocument:
    return parse_ies_text(text, file_name)


def write(doc: IESDocument, settings: Optional[EditorSettings] = None) -> str:
    return generate_ies_text(doc, settings=settings)
