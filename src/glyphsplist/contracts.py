"""Public report models for glyphsplist."""

from typing import List, Optional
from pydantic import BaseModel


class ValidationIssue(BaseModel):
    """A problem found while loading a document."""
    code: str  # an ErrorCode value, e.g. "UNEXPECTED_CHAR", "MISSING_FIELD"
    message: str
    location: Optional[str] = None  # "line 3, column 7" for parse errors, "glyphs[2].layers[0].width" for conversion errors


class ValidationReport(BaseModel):
    """Result of loading a file as a Glyphs 3 font."""
    ok: bool
    path: str
    format_version: Optional[int] = None
    glyph_count: int = 0
    master_count: int = 0
    issues: List[ValidationIssue]  # empty when ok
