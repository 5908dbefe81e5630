from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from reportlab.lib.utils import ImageReader


@dataclass(frozen=True)
class SectionHeader:
    title: str


@dataclass(frozen=True)
class LabelValue:
    label: str
    value: str


@dataclass(frozen=True)
class TwoColumnPair:
    label1: str
    value1: str
    label2: str
    value2: str


@dataclass(frozen=True)
class BulletList:
    items: Tuple[str, ...]


@dataclass(frozen=True)
class ImageBlock:
    # width/height are the final on-page size in mm
    image: ImageReader
    width: float
    height: float
    caption: Optional[str] = None


Block = Union[SectionHeader, LabelValue, TwoColumnPair, BulletList, ImageBlock]
