"""Configuration for the editor and the legacy converter.

Both configs are frozen dataclasses so a single instance can be shared by
every editor session in a process.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class EditorConfig:
    """Configuration values for an editor session."""

    # Undo stack capacity; oldest entries are discarded first
    history_limit: int = 50

    # Debounce delay before an autosave fires (seconds)
    autosave_delay: float = 3.0

    # Perform one best-effort save when the session is closed
    final_save_on_close: bool = True


@dataclass(frozen=True)
class ConverterConfig:
    """Configuration for legacy markup conversion.

    The callout heuristic matches on inline color signatures used by the old
    lesson authoring templates. It is a migration aid and will miss callouts
    whose markup was re-themed.
    """

    # Tags that start a new text section
    heading_tags: tuple[str, ...] = ("h2", "h3")

    # Emit each heading as its own text block instead of letting the
    # following markup accumulate into it
    standalone_headings: bool = True

    # Convert <div class="callout|alert|note|warning|tip"> containers
    detect_class_callouts: bool = True

    # Convert <iframe> elements to video/embed blocks
    convert_iframes: bool = True

    default_embed_height: int = 400

    video_hosts: tuple[str, ...] = field(
        default=("youtube", "youtu.be", "vimeo"),
    )
