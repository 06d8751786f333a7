from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Awaitable, Callable, Iterable, Optional, Tuple

from hn_thread.config import DEFAULT_MAX_CONCURRENCY
from hn_thread.exceptions import ResolutionMiss
from hn_thread.models import Comment

log = logging.getLogger(__name__)

Resolver = Callable[[int], Optional[Comment]]
AsyncResolver = Callable[[int], Awaitable[Optional[Comment]]]


def _attach(comment: Comment) -> Comment:
    # The resolver may hand back a shared or cached instance; the tree
    # needs its own node with an empty list of children.
    return dataclasses.replace(comment, kids=list(comment.kids), sub_comments=[])


# Parent link of a node in the async builder: (comment_id, parent_branch).
Branch = Optional[Tuple[int, "Branch"]]


def _skip_cycle(comment_id: int) -> None:
    log.warning("Comment %s is its own ancestor, skipping it", comment_id)


def _in_lineage(comment_id: int, branch: Branch) -> bool:
    while branch is not None:
        if branch[0] == comment_id:
            return True
        branch = branch[1]
    return False


def _resolve(fetch_comment: Resolver, comment_id: int) -> Optional[Comment]:
    try:
        comment = fetch_comment(comment_id)
    except ResolutionMiss as exc:
        log.warning("Could not resolve comment %s: %s", comment_id, exc)
        return None
    except Exception as exc:
        log.warning("Resolver failed for comment %s: %s", comment_id, exc)
        return None
    if comment is None:
        log.warning("Could not resolve comment %s", comment_id)
    return comment


def build_comment_tree(kids: Iterable[int], fetch_comment: Resolver) -> list[Comment]:
    """
    Resolve a list of child ids into a nested list of comments.

    Children are resolved depth first, left to right, so every comment's
    subtree is complete before its next sibling is fetched. An explicit
    stack is used instead of recursion, which keeps arbitrarily deep
    threads from exhausting the interpreter stack.

    Ids that the resolver cannot turn into a comment (None, an exception)
    are left out of the result; the rest of the tree is still built.
    """
    roots: list[Comment] = []
    # ids of the comments between the root and the current position
    path: set[int] = set()
    # (comment_id, siblings) enters a comment; (comment_id, None) leaves it
    stack: list[tuple[int, Optional[list[Comment]]]] = [(kid, roots) for kid in reversed(list(kids))]

    while stack:
        comment_id, siblings = stack.pop()
        if siblings is None:
            path.discard(comment_id)
            continue
        if comment_id in path:
            _skip_cycle(comment_id)
            continue

        comment = _resolve(fetch_comment, comment_id)
        if comment is None:
            continue

        node = _attach(comment)
        siblings.append(node)

        path.add(comment_id)
        stack.append((comment_id, None))
        for kid in reversed(node.kids):
            stack.append((kid, node.sub_comments))

    return roots


async def abuild_comment_tree(
    kids: Iterable[int],
    fetch_comment: AsyncResolver,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> list[Comment]:
    """
    Async counterpart of build_comment_tree.

    Each depth level is fetched concurrently (at most max_concurrency
    requests in flight). Results are attached in the order the ids were
    listed, not in the order the fetches completed, so the output is the
    same as the sequential version.

    Every entry keeps a link to its parent branch. The chain is only walked
    for ids that were already resolved somewhere in this tree, so threads
    with unique ids cost the same at any depth.

    Cancelling the awaiting task cancels all outstanding fetches.
    """
    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def resolve(comment_id: int) -> Optional[Comment]:
        async with semaphore:
            try:
                comment = await fetch_comment(comment_id)
            except ResolutionMiss as exc:
                log.warning("Could not resolve comment %s: %s", comment_id, exc)
                return None
            except Exception as exc:
                log.warning("Resolver failed for comment %s: %s", comment_id, exc)
                return None
        if comment is None:
            log.warning("Could not resolve comment %s", comment_id)
        return comment

    roots: list[Comment] = []
    resolved_ids: set[int] = set()
    level: list[tuple[int, list[Comment], Branch]] = [(kid, roots, None) for kid in kids]
    depth = 0

    while level:
        pending = []
        for entry in level:
            comment_id, _, parent = entry
            if comment_id in resolved_ids and _in_lineage(comment_id, parent):
                _skip_cycle(comment_id)
                continue
            pending.append(entry)

        log.debug("Resolving %s comments at depth %s", len(pending), depth)
        results = await asyncio.gather(*(resolve(entry[0]) for entry in pending))

        next_level = []
        for (comment_id, siblings, parent), comment in zip(pending, results):
            if comment is None:
                continue
            node = _attach(comment)
            siblings.append(node)
            resolved_ids.add(comment_id)
            branch = (comment_id, parent)
            next_level.extend((kid, node.sub_comments, branch) for kid in node.kids)

        level = next_level
        depth += 1

    return roots
