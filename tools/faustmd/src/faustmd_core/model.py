from __future__ import annotations

import enum
from dataclasses import dataclass, field


class WidgetType(enum.Enum):
    BUTTON = "button"
    CHECKBOX = "checkbox"
    VSLIDER = "vslider"
    HSLIDER = "hslider"
    NENTRY = "nentry"
    VBARGRAPH = "vbargraph"
    HBARGRAPH = "hbargraph"

    @classmethod
    def from_name(cls, name: str) -> WidgetType | None:
        try:
            return cls(name)
        except ValueError:
            return None

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_TYPES

    @property
    def is_discrete(self) -> bool:
        return self in (WidgetType.BUTTON, WidgetType.CHECKBOX)


ACTIVE_TYPES = (
    WidgetType.BUTTON,
    WidgetType.CHECKBOX,
    WidgetType.VSLIDER,
    WidgetType.HSLIDER,
    WidgetType.NENTRY,
)
PASSIVE_TYPES = (WidgetType.VBARGRAPH, WidgetType.HBARGRAPH)


class Scale(enum.Enum):
    LINEAR = "linear"
    LOG = "log"
    EXP = "exp"

    @classmethod
    def from_name(cls, name: str) -> Scale | None:
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass
class Widget:
    type: WidgetType
    id: int
    label: str = ""
    var: str = ""
    init: float = 0.0
    min: float = 0.0
    max: float = 0.0
    step: float = 0.0
    metadata: list[tuple[str, str]] = field(default_factory=list)

    # interpreted from metadata
    unit: str = ""
    scale: Scale = Scale.LINEAR
    tooltip: str = ""

    @property
    def is_active(self) -> bool:
        return self.type.is_active


@dataclass
class Metadata:
    name: str = ""
    author: str = ""
    copyright: str = ""
    license: str = ""
    version: str = ""
    classname: str = ""
    inputs: int = 0
    outputs: int = 0
    metadata: list[tuple[str, str]] = field(default_factory=list)
    active: list[Widget] = field(default_factory=list)
    passive: list[Widget] = field(default_factory=list)
