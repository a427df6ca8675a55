"""
Block-root expansion for Retrospect.

Turns each block root into a tree holding the root and all of its descendants.
"""

import logging
from collections import deque
from typing import Deque, List

from ..importers import BaseImporter
from ..models import Block, BlockNode, BlockTree, VisitedSet


class TreeExpander:
    """
    Exhaustive breadth-first expansion of block roots into BlockTrees.
    """

    def __init__(self, importer: BaseImporter):
        self.importer = importer

    async def expand_block_roots(self, block_roots: List[Block], visited: VisitedSet) -> List[BlockTree]:
        """
        Return one tree per block root, in the order the roots were given.

        So a list of roots like::

            root_1      root_2
        becomes::

            root_1      root_2
              |           |
            +-+-+         +
            A   B         C
            |
            D

        Descendants are included regardless of when they were edited.
        """
        trees = []
        for block in block_roots:
            tree = BlockTree.from_root(block)
            trees.append(tree)
            await self.expand_block_root(tree.root, visited)
        return trees

    async def expand_block_root(self, root: BlockNode, visited: VisitedSet) -> None:
        """
        Fill in the descendants of ``root`` in place.

        Children that were already visited are dropped. Children with empty
        text are dropped too, along with everything beneath them.
        """
        # TODO: dropping an empty block also loses any non-empty blocks nested
        # under it; decide whether empty containers should be kept as structure.
        queue: Deque[BlockNode] = deque([root])

        while queue:
            node = queue.popleft()
            block = node.block
            if block.id in visited:
                logging.debug(f"Already visited block {block.id}, skipping it")
                continue
            visited.add(block.id)

            if not block.has_children:
                continue

            children = await self.importer.retrieve_all_block_children(block.id, block.page_id)
            for child in children:
                if child.id in visited:
                    logging.debug(f"Already visited child block {child.id}, skipping it")
                elif not child.is_empty():
                    queue.append(node.add_child(child))
