"""Children views of a folder: an append-only buffer and its frozen snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .items import BaseItem, FileItem, FolderItem, ItemKind


@dataclass(frozen=True)
class ChildrenSnapshot:
    """
    The three children views of a folder, published together.

    `folders` and `files` are stable sub-sequences of `all`; items of any
    other kind appear only in `all`.
    """

    all: tuple[BaseItem, ...] = ()
    folders: tuple[FolderItem, ...] = ()
    files: tuple[FileItem, ...] = ()

    def __len__(self) -> int:
        return len(self.all)


@dataclass
class ChildrenBuffer:
    """Accumulates classified children page by page; `freeze()` snapshots them."""

    all: list[BaseItem] = field(default_factory=list)
    folders: list[FolderItem] = field(default_factory=list)
    files: list[FileItem] = field(default_factory=list)

    def add(self, item: BaseItem) -> None:
        if item.kind is ItemKind.FOLDER:
            self.folders.append(item)  # type: ignore[arg-type]
        elif item.kind is ItemKind.FILE:
            self.files.append(item)  # type: ignore[arg-type]
        self.all.append(item)

    def extend(self, items: Iterable[BaseItem]) -> None:
        for item in items:
            self.add(item)

    def freeze(self) -> ChildrenSnapshot:
        return ChildrenSnapshot(
            all=tuple(self.all),
            folders=tuple(self.folders),
            files=tuple(self.files),
        )
