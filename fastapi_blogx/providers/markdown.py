"""Render Notion block objects as markdown."""

from typing import Any


def rich_text_to_markdown(rich_text: list[dict[str, Any]]) -> str:
    parts = []
    for span in rich_text:
        text = span.get("plain_text", "")
        if not text:
            continue
        annotations = span.get("annotations") or {}
        if annotations.get("code"):
            text = f"`{text}`"
        if annotations.get("bold"):
            text = f"**{text}**"
        if annotations.get("italic"):
            text = f"_{text}_"
        if annotations.get("strikethrough"):
            text = f"~~{text}~~"
        href = span.get("href")
        if href:
            text = f"[{text}]({href})"
        parts.append(text)
    return "".join(parts)


def _file_url(payload: dict[str, Any]) -> str:
    source = payload.get(payload.get("type", ""), {})
    return source.get("url", "")


def block_to_markdown(block: dict[str, Any], number: int = 1) -> str | None:
    """Render a single block, or ``None`` for unsupported block types."""
    block_type = block.get("type", "")
    payload = block.get(block_type) or {}
    text = rich_text_to_markdown(payload.get("rich_text", []))

    if block_type == "paragraph":
        return text
    if block_type in ("heading_1", "heading_2", "heading_3"):
        return f"{'#' * int(block_type[-1])} {text}"
    if block_type == "bulleted_list_item":
        return f"- {text}"
    if block_type == "numbered_list_item":
        return f"{number}. {text}"
    if block_type == "to_do":
        mark = "x" if payload.get("checked") else " "
        return f"- [{mark}] {text}"
    if block_type == "quote":
        return f"> {text}"
    if block_type == "callout":
        icon = (payload.get("icon") or {}).get("emoji", "")
        return f"> {icon} {text}".rstrip() if icon else f"> {text}"
    if block_type == "code":
        language = payload.get("language", "")
        if language == "plain text":
            language = ""
        plain = "".join(span.get("plain_text", "") for span in payload.get("rich_text", []))
        return f"```{language}\n{plain}\n```"
    if block_type == "divider":
        return "---"
    if block_type == "image":
        caption = rich_text_to_markdown(payload.get("caption", []))
        return f"![{caption}]({_file_url(payload)})"
    return None


def blocks_to_markdown(blocks: list[dict[str, Any]]) -> str:
    """Join rendered blocks, numbering consecutive numbered list items."""
    lines: list[str] = []
    number = 0
    previous_type = None
    for block in blocks:
        block_type = block.get("type")
        number = number + 1 if block_type == "numbered_list_item" else 0
        rendered = block_to_markdown(block, number)
        if rendered is None:
            continue
        list_continues = block_type == previous_type and block_type in (
            "bulleted_list_item",
            "numbered_list_item",
            "to_do",
        )
        if lines and list_continues:
            lines[-1] = f"{lines[-1]}\n{rendered}"
        else:
            lines.append(rendered)
        previous_type = block_type
    return "\n\n".join(lines)
