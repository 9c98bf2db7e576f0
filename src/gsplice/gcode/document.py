"""Structured view of a segmented G-code program."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from .statement import Statement

__all__ = ["Block", "BlockKind", "Document", "Layer"]


class BlockKind(Enum):
    """Whether a block prints the model or the purge tower."""

    MODEL = "model"
    PURGE = "purge"


@dataclass(frozen=True, slots=True)
class Block:
    """Ordered run of statements of a single :class:`BlockKind`."""

    kind: BlockKind
    statements: tuple[Statement, ...] = ()
    first_line: int | None = None

    def __len__(self) -> int:
        return len(self.statements)

    def __iter__(self) -> Iterator[Statement]:
        return iter(self.statements)

    @property
    def is_empty(self) -> bool:
        return not self.statements

    def render(self) -> Iterator[str]:
        """Yield each statement as a line of G-code."""

        for statement in self.statements:
            yield statement.render()


@dataclass(frozen=True, slots=True)
class Layer:
    """A print layer; blocks are kept in physical execution order."""

    index: int
    blocks: tuple[Block, ...] = ()

    @property
    def kinds(self) -> tuple[BlockKind, ...]:
        return tuple(block.kind for block in self.blocks)

    @property
    def model_blocks(self) -> tuple[Block, ...]:
        return tuple(block for block in self.blocks if block.kind is BlockKind.MODEL)

    @property
    def purge_blocks(self) -> tuple[Block, ...]:
        return tuple(block for block in self.blocks if block.kind is BlockKind.PURGE)

    @property
    def statement_count(self) -> int:
        return sum(len(block) for block in self.blocks)


@dataclass(frozen=True, slots=True)
class Document:
    """Header block, ordered layers and an optional trailer block."""

    header: Block = field(default_factory=lambda: Block(BlockKind.MODEL))
    layers: tuple[Layer, ...] = ()
    trailer: Block = field(default_factory=lambda: Block(BlockKind.MODEL))

    @property
    def layer_count(self) -> int:
        return len(self.layers)

    def iter_blocks(self) -> Iterator[Block]:
        """Yield every non-empty block from header to trailer."""

        if not self.header.is_empty:
            yield self.header
        for layer in self.layers:
            yield from layer.blocks
        if not self.trailer.is_empty:
            yield self.trailer
