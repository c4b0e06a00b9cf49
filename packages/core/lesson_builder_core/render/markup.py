"""Serialize a block sequence to reader-facing HTML."""

from collections.abc import Callable, Iterable
from html import escape
from typing import Any

from lesson_builder_core.render.style import resolve_style
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.content import BlockType


def _attr(value: Any) -> str:
    return escape(str(value), quote=True)


def _text(c: dict) -> str:
    return c.get("html", "")


def _raw_markup(c: dict) -> str:
    return c.get("code", "")


def _image(c: dict) -> str:
    img = f'<img src="{_attr(c.get("url", ""))}" alt="{_attr(c.get("alt", ""))}">'
    caption = c.get("caption")
    align = _attr(c.get("alignment", "center"))
    if caption:
        return f'<figure class="align-{align}">{img}<figcaption>{escape(caption)}</figcaption></figure>'
    return f'<figure class="align-{align}">{img}</figure>'


def _video(c: dict) -> str:
    url = _attr(c.get("url", ""))
    if c.get("type") == "upload":
        player = f'<video controls src="{url}"></video>'
    else:
        player = f'<iframe src="{url}" allowfullscreen></iframe>'
    caption = c.get("caption")
    return player + (f"<p class=\"caption\">{escape(caption)}</p>" if caption else "")


def _audio(c: dict) -> str:
    parts = []
    if c.get("title"):
        parts.append(f"<p>{escape(c['title'])}</p>")
    parts.append(f'<audio controls src="{_attr(c.get("url", ""))}"></audio>')
    if c.get("transcript"):
        parts.append(f"<details><summary>Transcript</summary>{escape(c['transcript'])}</details>")
    return "".join(parts)


def _callout(c: dict) -> str:
    kind = _attr(c.get("type", "info"))
    return f'<div class="callout callout--{kind}">{c.get("text", "")}</div>'


def _highlight(c: dict) -> str:
    color = _attr(c.get("color", "yellow"))
    return f'<mark class="highlight highlight--{color}">{escape(c.get("text", ""))}</mark>'


def _key_takeaways(c: dict) -> str:
    items = "".join(f"<li>{escape(item)}</li>" for item in c.get("items", []))
    return f"<section class=\"key-takeaways\"><h4>{escape(c.get('title', ''))}</h4><ul>{items}</ul></section>"


def _divider(c: dict) -> str:
    return "<hr>"


def _quiz(c: dict) -> str:
    options = "".join(f"<li>{escape(option)}</li>" for option in c.get("options", []))
    return f'<div class="quiz"><p>{escape(c.get("question", ""))}</p><ol>{options}</ol></div>'


def _embed(c: dict) -> str:
    return f'<iframe src="{_attr(c.get("url", ""))}" height="{_attr(c.get("height", 400))}"></iframe>'


def _table(c: dict) -> str:
    head = "".join(f"<th>{h}</th>" for h in c.get("headers", []))
    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>"
        for row in c.get("rows", [])
    )
    return f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"


def _file(c: dict) -> str:
    name = c.get("name") or c.get("url", "")
    return f'<a class="file" href="{_attr(c.get("url", ""))}" download>{escape(name)}</a>'


def _slideshow(c: dict) -> str:
    slides = "".join(
        f'<figure><img src="{_attr(i.get("url", ""))}" alt=""><figcaption>{escape(i.get("caption", ""))}</figcaption></figure>'
        for i in c.get("images", [])
    )
    return f'<div class="slideshow">{slides}</div>'


def _link_list(c: dict) -> str:
    links = "".join(
        f'<li><a href="{_attr(link.get("url", ""))}">{escape(link.get("title", ""))}</a> {escape(link.get("description", ""))}</li>'
        for link in c.get("links", [])
    )
    return f"<section class=\"link-list\"><h4>{escape(c.get('title', ''))}</h4><ul>{links}</ul></section>"


def _flashcards(c: dict) -> str:
    cards = "".join(
        f"<dt>{escape(card.get('front', ''))}</dt><dd>{escape(card.get('back', ''))}</dd>"
        for card in c.get("cards", [])
    )
    return f"<section class=\"flashcards\"><h4>{escape(c.get('title', ''))}</h4><dl>{cards}</dl></section>"


def _expandable_article(c: dict) -> str:
    return (
        f"<details class=\"article\"><summary>{escape(c.get('title', ''))}</summary>"
        f"<p>{escape(c.get('summary', ''))}</p>{c.get('html', '')}</details>"
    )


def _page_link(c: dict) -> str:
    return (
        f'<a class="page-link" href="{_attr(c.get("url", ""))}">{escape(c.get("title", ""))}</a>'
        f"<p>{escape(c.get('description', ''))}</p>"
    )


def _equation(c: dict) -> str:
    tag = "span" if c.get("display_mode") == "inline" else "div"
    return f'<{tag} class="math">{escape(c.get("latex", ""))}</{tag}>'


def _tabs(c: dict) -> str:
    panes = "".join(
        f"<section><h4>{escape(tab.get('label', ''))}</h4>{tab.get('html', '')}</section>"
        for tab in c.get("tabs", [])
    )
    return f'<div class="tabs">{panes}</div>'


def _accordion(c: dict) -> str:
    return "".join(
        f"<details><summary>{escape(item.get('title', ''))}</summary>{item.get('html', '')}</details>"
        for item in c.get("items", [])
    )


def _columns(c: dict) -> str:
    cols = "".join(f"<div class=\"column\">{col.get('html', '')}</div>" for col in c.get("columns", []))
    return f'<div class="columns columns--gap-{_attr(c.get("gap", "md"))}">{cols}</div>'


MARKUP_RENDERERS: dict[BlockType, Callable[[dict], str]] = {
    BlockType.TEXT: _text,
    BlockType.RAW_MARKUP: _raw_markup,
    BlockType.IMAGE: _image,
    BlockType.VIDEO: _video,
    BlockType.AUDIO: _audio,
    BlockType.CALLOUT: _callout,
    BlockType.HIGHLIGHT: _highlight,
    BlockType.KEY_TAKEAWAYS: _key_takeaways,
    BlockType.DIVIDER: _divider,
    BlockType.QUIZ: _quiz,
    BlockType.EMBED: _embed,
    BlockType.TABLE: _table,
    BlockType.FILE: _file,
    BlockType.SLIDESHOW: _slideshow,
    BlockType.LINK_LIST: _link_list,
    BlockType.FLASHCARD_DECK: _flashcards,
    BlockType.EXPANDABLE_ARTICLE: _expandable_article,
    BlockType.PAGE_LINK: _page_link,
    BlockType.EQUATION: _equation,
    BlockType.TABS: _tabs,
    BlockType.ACCORDION: _accordion,
    BlockType.COLUMNS: _columns,
}


def render_block_markup(block: Block, wrap: bool = True) -> str:
    """Render one block, optionally inside its styled wrapper."""
    inner = MARKUP_RENDERERS[block.type](block.content)
    if not wrap:
        return inner
    descriptor = resolve_style(block.style)
    classes = " ".join(("block", f"block-{block.type.value}", *descriptor.class_names))
    style = descriptor.inline_style()
    style_attr = f' style="{_attr(style)}"' if style else ""
    return f'<div class="{classes}" data-block-id="{block.id}"{style_attr}>{inner}</div>'


def render_markup(blocks: Iterable[Block], wrap: bool = True) -> str:
    """Render a block sequence to HTML in document order.

    Args:
        blocks: Blocks to render
        wrap: Surround each block with a styled wrapper element

    Returns:
        HTML string
    """
    ordered = sorted(blocks, key=lambda b: b.order_index)
    return "\n".join(render_block_markup(block, wrap=wrap) for block in ordered)
