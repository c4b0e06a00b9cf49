"""Per-block presentation metadata."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BlockWidth(str, Enum):
    """Width classes a block can occupy."""

    FULL = "full"
    WIDE = "wide"
    HALF = "half"
    THIRD = "third"


class ShadowTier(str, Enum):
    """Shadow depth tiers."""

    NONE = "none"
    SM = "sm"
    MD = "md"
    LG = "lg"


class BlockStyle(BaseModel):
    """Presentation attributes layered over a block's content.

    The collapsible and hidden-until-revealed flags are persisted. Whether a
    given block is currently open or revealed is view state and is not.
    """

    model_config = ConfigDict(extra="allow")

    width: BlockWidth = Field(BlockWidth.FULL, description="Width class")
    background_color: str | None = Field(None, description="CSS color value")
    border_color: str | None = Field(None, description="CSS color value")
    border_width: int = Field(0, ge=0, description="Border width in pixels")
    border_radius: int = Field(0, ge=0, description="Corner radius in pixels")
    shadow: ShadowTier = Field(ShadowTier.NONE, description="Shadow tier")
    collapsible: bool = Field(False, description="Render behind a collapse toggle")
    collapse_label: str = Field("Show more", description="Collapse toggle label")
    hidden_until_revealed: bool = Field(
        False, description="Hide content until the reader reveals it"
    )
    reveal_label: str = Field("Reveal", description="Reveal control label")

    def is_default(self) -> bool:
        """True if the style carries no presentation changes."""
        return self == BlockStyle()
