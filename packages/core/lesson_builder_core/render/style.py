"""Resolve a block's style overlay into renderer-facing presentation hints."""

from dataclasses import dataclass, field

from lesson_builder_core.schemas.style import BlockStyle, BlockWidth, ShadowTier

_WIDTH_CLASSES = {
    BlockWidth.FULL: "block--full",
    BlockWidth.WIDE: "block--wide",
    BlockWidth.HALF: "block--half",
    BlockWidth.THIRD: "block--third",
}

_SHADOWS = {
    ShadowTier.NONE: None,
    ShadowTier.SM: "0 1px 2px rgba(0, 0, 0, 0.05)",
    ShadowTier.MD: "0 4px 6px rgba(0, 0, 0, 0.1)",
    ShadowTier.LG: "0 10px 15px rgba(0, 0, 0, 0.1)",
}


@dataclass(frozen=True)
class StyleDescriptor:
    """Class names and inline properties for one block's wrapper."""

    class_names: tuple[str, ...] = ("block--full",)
    properties: dict[str, str] = field(default_factory=dict)
    collapsible: bool = False
    collapse_label: str = "Show more"
    hidden_until_revealed: bool = False
    reveal_label: str = "Reveal"

    def inline_style(self) -> str:
        return "; ".join(f"{k}: {v}" for k, v in self.properties.items())


def resolve_style(style: BlockStyle | None) -> StyleDescriptor:
    """Translate a style overlay into presentation hints.

    Content is never consulted; the overlay is applied the same way to every
    block type.
    """
    if style is None:
        return StyleDescriptor()

    props: dict[str, str] = {}
    if style.background_color:
        props["background-color"] = style.background_color
    if style.border_color or style.border_width:
        width = style.border_width or 1
        colour = style.border_color or "currentColor"
        props["border"] = f"{width}px solid {colour}"
    if style.border_radius:
        props["border-radius"] = f"{style.border_radius}px"
    shadow = _SHADOWS[style.shadow]
    if shadow:
        props["box-shadow"] = shadow

    classes = [_WIDTH_CLASSES[style.width]]
    if style.collapsible:
        classes.append("block--collapsible")
    if style.hidden_until_revealed:
        classes.append("block--hidden-until-revealed")

    return StyleDescriptor(
        class_names=tuple(classes),
        properties=props,
        collapsible=style.collapsible,
        collapse_label=style.collapse_label,
        hidden_until_revealed=style.hidden_until_revealed,
        reveal_label=style.reveal_label,
    )
