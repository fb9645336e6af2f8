"""Parser configuration.

The core has no environment or file-based configuration; callers pass a
``ParseOptions`` instance when the defaults do not fit (e.g. untrusted input
that should be held to a tighter nesting limit).
"""

from pydantic import BaseModel, ConfigDict, Field

# Glyphs documents nest about ten levels deep. Each level costs two
# interpreter frames, so both limits stay inside the default recursion limit.
DEFAULT_MAX_DEPTH = 256
MAX_DEPTH_LIMIT = 384


class ParseOptions(BaseModel):
    """Options controlling ``parse``."""
    max_depth: int = Field(
        DEFAULT_MAX_DEPTH,
        ge=1,
        le=MAX_DEPTH_LIMIT,
        description="Maximum nesting of dictionaries and arrays"
    )
    allow_trailing_content: bool = Field(
        False,
        description="Ignore anything after the top-level value instead of raising"
    )

    model_config = ConfigDict(frozen=True, extra="forbid")


DEFAULT_PARSE_OPTIONS = ParseOptions()
