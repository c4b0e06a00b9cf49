"""Legacy markup to block conversion."""

from lesson_builder_core.converter.legacy import (
    ConversionResult,
    callout_kind_from_classes,
    convert_legacy_markup,
    detect_callout_type,
    match_callout_styles,
    needs_conversion,
)

__all__ = [
    "ConversionResult",
    "callout_kind_from_classes",
    "convert_legacy_markup",
    "detect_callout_type",
    "match_callout_styles",
    "needs_conversion",
]
