"""
Bundle builder interface and build plan sink

The interpreter talks to the bundle engine through the BundleBuilder
protocol: one page_add() per committed texture page and one file_add() per
committed file. BundlePlan is the builder shipped with rucksack. It checks
each action, records it in order and writes the resulting build plan as
JSON for the packing engine to consume. It does no texture packing itself.
"""

import os
from pathlib import Path
from typing import Dict, List, Literal, Optional, Protocol, Union

from pydantic import BaseModel, Field

from ..models.manifest import Anchor, PageDraft
from .log import LOG


def file_readable(path: str) -> bool:
    """True if path names a regular file this process can read"""
    try:
        return os.path.isfile(path) and os.access(path, os.R_OK)
    except ValueError:
        # embedded NUL byte
        return False


class BundleError(Exception):
    """Raised by a bundle builder when it rejects an action"""
    pass


class BundleBuilder(Protocol):
    """Sink for committed manifest entities"""

    def page_add(self, key: str, page: PageDraft) -> None:
        ...

    def file_add(self, key: str, path: str) -> None:
        ...


class ImageEntry(BaseModel):
    name: str
    path: str
    anchor: str
    anchor_x: Optional[float] = None
    anchor_y: Optional[float] = None


class PageEntry(BaseModel):
    action: Literal["page"] = "page"
    key: str
    max_width: Optional[int] = None
    max_height: Optional[int] = None
    pow2: Optional[bool] = None
    images: List[ImageEntry] = Field(default_factory=list)


class FileEntry(BaseModel):
    action: Literal["file"] = "file"
    key: str
    path: str


class PlanDocument(BaseModel):
    """Serialized build plan: every action in commit order"""
    version: int = 1
    root_prefix: str = "."
    actions: List[Union[PageEntry, FileEntry]] = Field(default_factory=list)


class BundlePlan:
    """
    Recording bundle builder

    Keys share one namespace across pages and files, as they do inside a
    bundle. Files must be readable at the time they are added.

    Example:
        >>> plan = BundlePlan()
        >>> plan.file_add("readme", "README.md")
        >>> plan.keys
        ['readme']
    """

    def __init__(self, root_prefix: str = ".") -> None:
        self.document = PlanDocument(root_prefix=root_prefix)
        self.entries: Dict[str, Union[PageEntry, FileEntry]] = {}

    @property
    def keys(self) -> List[str]:
        return list(self.entries)

    def key_claim(self, key: str) -> None:
        if key in self.entries:
            raise BundleError(f"key already exists: {key}")

    def page_add(self, key: str, page: PageDraft) -> None:
        """
        Record a texture page

        Raises:
            BundleError: Duplicate key, or an image file that cannot be read
        """
        self.key_claim(key)
        images = []
        for name, image in page.images.items():
            if not file_readable(image.path):
                raise BundleError(f"problem accessing file: {image.path}")
            explicit = image.anchor is Anchor.EXPLICIT
            images.append(ImageEntry(
                name=name,
                path=image.path,
                anchor=image.anchor.value,
                anchor_x=image.anchor_x if explicit else None,
                anchor_y=image.anchor_y if explicit else None,
            ))

        entry = PageEntry(
            key=key,
            max_width=page.max_width,
            max_height=page.max_height,
            pow2=page.pow2,
            images=images,
        )
        self.entries[key] = entry
        self.document.actions.append(entry)
        LOG(f"Plan: page {key} ({len(images)} images)", level=3)

    def file_add(self, key: str, path: str) -> None:
        """
        Record a single file

        Raises:
            BundleError: Duplicate key, or a file that cannot be read
        """
        self.key_claim(key)
        if not file_readable(path):
            raise BundleError(f"problem accessing file: {path}")
        entry = FileEntry(key=key, path=path)
        self.entries[key] = entry
        self.document.actions.append(entry)
        LOG(f"Plan: file {key} <- {path}", level=3)

    def plan_write(self, output_file: Path) -> Path:
        """Write the plan as indented JSON, creating parent directories"""
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(self.document.model_dump_json(indent=2), encoding="utf-8")
        LOG(f"Wrote {output_file}", level=2)
        return output_file
