"""
Markdown rendering of crawled pages.
"""

from typing import List

from .models import BlockTree, ParsedPage

INDENT = "  "


def build_markdown_from_tree(tree: BlockTree) -> str:
    """Render a tree depth-first, indenting each level by two spaces."""
    return "\n".join(f"{INDENT * depth}{node.block.to_markdown()}" for depth, node in tree.walk())


def build_markdown_from_trees(trees: List[BlockTree]) -> str:
    return "\n".join(build_markdown_from_tree(tree) for tree in trees)


def to_prompt_text(pages: List[ParsedPage]) -> str:
    """
    Convert crawled pages into the markdown notes handed to the assistant.

    Args:
        pages: Pages returned by Crawler.parse_last_edited

    Returns:
        One "Page Title:" section per page, separated by blank lines
    """
    sections = [
        f"Page Title: {page.title}\n{build_markdown_from_trees(page.page_content)}"
        for page in pages
    ]
    return "\n\n".join(sections)
