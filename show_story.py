from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import textwrap
from typing import NamedTuple, Optional, TextIO

from bs4 import BeautifulSoup, Tag

from hn_thread.client import AsyncHackerNewsClient, HackerNewsClient
from hn_thread.config import DEFAULT_MAX_CONCURRENCY, DEFAULT_MIN_INTERVAL_MS, SITE_BASE, ClientConfig
from hn_thread.formatting import comment_count_text, relative_time, story_listing
from hn_thread.models import Comment, StoryItem, StoryPageData

DEFAULT_TOP = 15
INDENT = "    "
WIDTH = 80


class TextBlock(NamedTuple):
    text: str
    preformatted: bool = False


def html_to_blocks(fragment: str) -> list[TextBlock]:
    """
    Split an item body into paragraphs.

    HN separates paragraphs with bare <p> tags and marks code with
    <pre><code>; code keeps its line breaks and indentation, everything
    else is collapsed into a single line per paragraph.
    """
    blocks: list[TextBlock] = []
    for chunk in fragment.replace("</p>", "").split("<p>"):
        soup = BeautifulSoup(chunk, "html.parser")
        words: list[str] = []
        for node in soup.contents:
            if isinstance(node, Tag) and node.name == "pre":
                if words:
                    blocks.append(TextBlock(" ".join(words)))
                    words = []
                blocks.append(TextBlock(node.get_text().rstrip("\n"), preformatted=True))
            elif isinstance(node, Tag):
                words.extend(node.get_text(" ").split())
            else:
                words.extend(str(node).split())
        if words:
            blocks.append(TextBlock(" ".join(words)))
    return blocks


def html_to_text(fragment: str) -> str:
    return "\n\n".join(block.text for block in html_to_blocks(fragment))


def format_listing(rank: int, story: StoryItem, site_base: str = SITE_BASE) -> str:
    row = story_listing(story, site_base=site_base)
    title = f"{rank:>3}. {row.title}"
    if row.hostname:
        title += f" ({row.hostname})"
    meta = f"{row.score} by {row.by or 'unknown'} {row.time} | {comment_count_text(row.comments)}"
    return f"{title}\n{INDENT}{meta}"


def format_comments(comments: list[Comment]) -> list[str]:
    lines: list[str] = []
    stack = [(comment, 0) for comment in reversed(comments)]
    while stack:
        comment, depth = stack.pop()
        prefix = INDENT * depth
        lines.append(f"{prefix}{comment.by or 'unknown'} {relative_time(comment.time)}")
        for block in html_to_blocks(comment.text):
            if block.preformatted:
                body = block.text.splitlines()
            else:
                body = textwrap.wrap(block.text, width=WIDTH)
            lines.extend(f"{prefix}  {line}" for line in body)
        lines.append("")
        stack.extend((child, depth + 1) for child in reversed(comment.sub_comments))
    return lines


def format_page(page: StoryPageData, config: Optional[ClientConfig] = None) -> str:
    config = config or ClientConfig()
    item = page.item
    row = story_listing(item, site_base=config.site_base)

    lines = [format_listing(1, item, site_base=config.site_base)]
    if row.url:
        lines.append(f"{INDENT}{row.url}")
    if row.hostname:
        lines.append(f"{INDENT}more from {row.hostname}: {row.site_url}")
    lines.append(f"{INDENT}discussion: {config.site_item_url(item.id)}")
    if item.text:
        lines.append("")
        lines.append(html_to_text(item.text))
    lines.append("")
    lines.extend(format_comments(page.comments))
    return "\n".join(lines)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show Hacker News stories and their comment threads.")
    parser.add_argument(
        "--top",
        type=int,
        default=DEFAULT_TOP,
        help="Number of top stories to list.",
    )
    parser.add_argument(
        "--story-id",
        type=int,
        default=None,
        help="Show this story with its full comment tree instead of the list.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the story page as JSON (requires --story-id).",
    )
    parser.add_argument(
        "--min-interval-ms",
        type=float,
        default=DEFAULT_MIN_INTERVAL_MS,
        help="Minimum delay between two API requests.",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=DEFAULT_MAX_CONCURRENCY,
        help="Maximum number of comment requests in flight (async mode).",
    )
    parser.add_argument(
        "--site-base",
        default=SITE_BASE,
        help="Hacker News site used for discussion and \"from site\" links.",
    )
    parser.add_argument(
        "--async",
        dest="use_async",
        action="store_true",
        help="Resolve the comment tree with concurrent requests.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)
    if args.json and args.story_id is None:
        parser.error("--json requires --story-id")
    return args


def load_page(config: ClientConfig, story_id: int, use_async: bool) -> StoryPageData:
    if use_async:
        async def run() -> StoryPageData:
            async with AsyncHackerNewsClient(config) as client:
                return await client.fetch_story_page(story_id)

        return asyncio.run(run())

    with HackerNewsClient(config) as client:
        return client.fetch_story_page(story_id)


def main(argv: list[str] | None = None, out: Optional[TextIO] = None) -> str:
    args = parse_args(argv)
    out = out or sys.stdout
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    config = ClientConfig(
        min_interval_ms=args.min_interval_ms,
        max_concurrency=args.max_concurrency,
        site_base=args.site_base,
    )

    if args.story_id is not None:
        page = load_page(config, args.story_id, args.use_async)
        if args.json:
            output = json.dumps(page.to_dict(), indent=2)
        else:
            output = format_page(page, config)
    else:
        with HackerNewsClient(config) as client:
            stories = client.fetch_top_stories(limit=args.top)
        output = "\n".join(
            format_listing(rank, story, site_base=config.site_base) for rank, story in enumerate(stories, 1)
        )

    out.write(output + "\n")
    return output


if __name__ == "__main__":
    # python show_story.py --story-id 8863
    main()
