"""
Tree models for Retrospect.

A BlockTree mirrors the remote nesting of a recently edited block root and
its descendants. Nodes own their children; trees never share nodes.
"""

from typing import Iterator, List, Tuple

from pydantic import BaseModel, Field

from .canonical import Block, BlockID, PageID


class BlockNode(BaseModel):
    """
    One node of a BlockTree, holding a single Block.
    """

    block: Block = Field(
        ...,
        description="The block held by this node"
    )

    children: List['BlockNode'] = Field(
        default_factory=list,
        description="Child nodes in server order"
    )

    def add_child(self, block: Block) -> 'BlockNode':
        """Attach a block as the last child of this node and return the new node."""
        node = BlockNode(block=block)
        self.children.append(node)
        return node


class BlockTree(BaseModel):
    """
    An ordered tree whose root is a recently edited block.
    """

    root: BlockNode = Field(
        ...,
        description="The node holding the block root"
    )

    @classmethod
    def from_root(cls, block: Block) -> 'BlockTree':
        return cls(root=BlockNode(block=block))

    def walk(self) -> Iterator[Tuple[int, BlockNode]]:
        """Yield ``(depth, node)`` pairs in document (pre-)order."""
        stack = [(0, self.root)]
        while stack:
            depth, node = stack.pop()
            yield depth, node
            for child in reversed(node.children):
                stack.append((depth + 1, child))

    def block_ids(self) -> List[BlockID]:
        return [node.block.id for _, node in self.walk()]

    def __len__(self) -> int:
        return sum(1 for _ in self.walk())


class ParsedPage(BaseModel):
    """
    A page that had recently edited content, with that content as trees of blocks.
    """

    page_id: PageID = Field(
        ...,
        description="The page's identifier"
    )

    title: str = Field(
        ...,
        description="The page's derived title"
    )

    page_content: List[BlockTree] = Field(
        default_factory=list,
        description="One tree per block root discovered in the page"
    )

    truncated: bool = Field(
        default=False,
        description="True when root discovery hit its time budget and may have missed blocks"
    )


# Enable forward references for self-referencing model
BlockNode.model_rebuild()
