"""FastMCP server exposing the hashtag index tools."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import Field

# Load environment variables from .env file
load_dotenv()

from ..models.tags import ScanReason, SortKey, SortOrder, TagNode
from ..services.config import get_config
from ..services.errors import TagValidationError
from ..services.hashtags import get_hashtag_service

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "markdown-hashtags",
    instructions=(
        "Hierarchical hashtag index over the Markdown documents of one workspace. Tags look like "
        "#project/alpha/todo: '#' followed by word segments joined by '/'. Counts: fileCount is the "
        "number of distinct files at or below a node, tagCount the number of distinct full tag paths "
        "at or below it. Renaming rewrites only the exact tag (nested tags keep the old prefix) and "
        "rescans the workspace afterwards."
    ),
)


def _node_to_response(node: TagNode, depth: Optional[int]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "name": node.name,
        "path": "/".join(node.full_path),
        "file_count": node.file_count,
        "tag_count": node.tag_count,
        "locations": len(node.locations),
    }
    if depth is None or depth > 0:
        next_depth = None if depth is None else depth - 1
        payload["children"] = [
            _node_to_response(child, next_depth) for child in node.children.values()
        ]
    return payload


async def _ensure_indexed() -> None:
    service = get_hashtag_service()
    if not service.initialized:
        await service.initialize()


@mcp.tool(name="get_tag_tree", description="Return the hashtag hierarchy with per-node counts.")
async def get_tag_tree(
    sort_key: Optional[SortKey] = Field(
        default=None, description="name, countFiles or countTags (default: configured)"
    ),
    sort_order: Optional[SortOrder] = Field(
        default=None, description="asc or desc (default: configured)"
    ),
    depth: Optional[int] = Field(
        default=None, ge=0, description="Maximum depth to expand (default: unlimited)"
    ),
) -> Dict[str, Any]:
    await _ensure_indexed()
    tree = get_hashtag_service().get_tree(sort_key, sort_order)
    return _node_to_response(tree, depth)


@mcp.tool(
    name="complete_tag",
    description="List every child of the tag named before the last '/'; the partial last segment is not filtered.",
)
async def complete_tag(
    prefix: str = Field(..., description="Typed tag text, e.g. '#project/'"),
) -> List[Dict[str, Any]]:
    await _ensure_indexed()
    return [item.model_dump() for item in get_hashtag_service().complete(prefix)]


@mcp.tool(name="find_tag_references", description="List every file location of a tag.")
async def find_tag_references(
    tag: str = Field(..., description="Full tag path with or without '#'"),
    include_descendants: bool = Field(
        default=False, description="Also include tags nested beneath this one"
    ),
) -> List[Dict[str, Any]]:
    await _ensure_indexed()
    locations = get_hashtag_service().references(tag, include_descendants)
    return [location.model_dump() for location in locations]


@mcp.tool(
    name="rename_tag",
    description="Rename the last segment of a tag in every document that uses it.",
)
async def rename_tag(
    tag: str = Field(..., description="Full tag path to rename, e.g. 'project/alpha'"),
    new_name: str = Field(..., description="New last segment (no spaces or special characters)"),
) -> Dict[str, Any]:
    await _ensure_indexed()
    try:
        result = await get_hashtag_service().rename_tag(tag, new_name)
    except TagValidationError as exc:
        raise ValueError(exc.message) from exc
    return result.model_dump()


@mcp.tool(name="rescan_tags", description="Rebuild the hashtag index from the workspace.")
async def rescan_tags() -> Dict[str, Any]:
    summary = await get_hashtag_service().scan(ScanReason.WORKSPACE)
    return summary.model_dump(mode="json")


if __name__ == "__main__":
    # stderr only; stdout carries the stdio transport
    logging.basicConfig(
        level=get_config().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    transport = os.getenv("MCP_TRANSPORT", "stdio").strip().lower() or "stdio"

    if transport == "http":
        port = int(os.getenv("MCP_PORT", "8001"))
        host = os.getenv("MCP_HOST", "127.0.0.1")
        logger.info(
            "Starting MCP server",
            extra={"transport": transport, "host": host, "port": port},
        )
        mcp.run(transport=transport, host=host, port=port)
    else:
        logger.info("Starting MCP server", extra={"transport": transport})
        mcp.run(transport=transport)
