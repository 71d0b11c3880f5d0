"""
Manifest draft models

Drafts are the in-progress entities the interpreter assembles while walking
a manifest. Each draft lives exactly as long as its grammar subtree: it is
either handed to the bundle builder when its object closes or dropped when
the run fails.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Optional


class Anchor(Enum):
    """
    Reference point used when placing an image on a texture page

    EXPLICIT means the image carries its own numeric offset
    (ImageDraft.anchor_x / anchor_y).
    """
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"
    TOP_LEFT = "topleft"
    TOP_RIGHT = "topright"
    BOTTOM_LEFT = "bottomleft"
    BOTTOM_RIGHT = "bottomright"
    CENTER = "center"
    EXPLICIT = "explicit"


# Anchors selectable by name in a manifest ("explicit" is only reachable
# through an {x, y} object)
NAMED_ANCHORS: Dict[str, Anchor] = {
    anchor.value: anchor for anchor in Anchor if anchor is not Anchor.EXPLICIT
}


class DraftKind(Enum):
    """Kinds of drafts, one open slot per kind in a session"""
    PAGE = "page"
    IMAGE = "image"
    ANCHOR = "anchor point"
    FILE = "file"
    GLOB = "glob"


@dataclass
class ImageDraft:
    """
    Image placed on a texture page

    Attributes:
        path: Resolved filesystem path (None until the "path" field is seen)
        anchor: Named anchor, or EXPLICIT
        anchor_x: Horizontal offset, meaningful only for Anchor.EXPLICIT
        anchor_y: Vertical offset, meaningful only for Anchor.EXPLICIT
    """
    path: Optional[str] = None
    anchor: Anchor = Anchor.CENTER
    anchor_x: float = 0.0
    anchor_y: float = 0.0


@dataclass
class AnchorPointDraft:
    """Explicit anchor offset being read from an {x, y} object"""
    x: Optional[float] = None
    y: Optional[float] = None


@dataclass
class PageDraft:
    """
    Texture page and the images it holds

    Attributes:
        key: Bundle key of the page
        max_width: Optional page width limit in pixels
        max_height: Optional page height limit in pixels
        pow2: Optional power-of-two size flag
        images: Image name -> ImageDraft, in manifest order
    """
    key: str
    max_width: Optional[int] = None
    max_height: Optional[int] = None
    pow2: Optional[bool] = None
    images: Dict[str, ImageDraft] = field(default_factory=dict)


@dataclass
class FileDraft:
    key: str
    path: Optional[str] = None


@dataclass
class GlobDraft:
    """One {glob, prefix} block; pattern is stored already resolved"""
    pattern: Optional[str] = None
    prefix: Optional[str] = None
