"""
Layout engine module for the photo sheet engine.

This module handles:
- The fixed print sheet presets (page size, grid shape, slot size)
- Flattening a print queue into one placement per copy
- Centering the slot grid on the page
- Deciding which placements fit on the page and which are skipped
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

from loguru import logger

from photosheet.errors import UnknownPresetError, ValidationError
from photosheet.geometry import SlotRect

PRINT_DPI = 300


@dataclass(frozen=True)
class SheetLayoutPreset:
    """A named, fixed combination of page size, grid shape and slot size.

    `gap` is the spacing between slots in pixels. When it is None the free
    space on each axis is shared equally between the margins and the gaps.
    """
    preset_id: str
    label: str
    page_width: int
    page_height: int
    columns: int
    rows: int
    slot_width: int
    slot_height: int
    gap: Optional[int] = None
    rotate_slot: bool = False

    @property
    def page_size(self) -> Tuple[int, int]:
        return (self.page_width, self.page_height)

    @property
    def capacity(self) -> int:
        return self.columns * self.rows

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.preset_id,
            'label': self.label,
            'page': {'width': self.page_width, 'height': self.page_height, 'dpi': PRINT_DPI},
            'grid': {'columns': self.columns, 'rows': self.rows, 'capacity': self.capacity},
            'slot': {'width': self.slot_width, 'height': self.slot_height},
            'gap': self.gap,
            'rotate_slot': self.rotate_slot,
        }


# 4x6 inch landscape, 35x45 mm slots
SHEET_6X4 = SheetLayoutPreset(
    preset_id='6x4',
    label='4x6 inch (8 Photos)',
    page_width=1800,
    page_height=1200,
    columns=4,
    rows=2,
    slot_width=413,
    slot_height=531,
    gap=30,
)

# A4 portrait; tighter gap so six rows fit
SHEET_A4 = SheetLayoutPreset(
    preset_id='A4',
    label='A4 (30 Photos)',
    page_width=2480,
    page_height=3508,
    columns=5,
    rows=6,
    slot_width=413,
    slot_height=531,
    gap=25,
)

PRESETS: Dict[str, SheetLayoutPreset] = {
    SHEET_6X4.preset_id: SHEET_6X4,
    SHEET_A4.preset_id: SHEET_A4,
}

DEFAULT_PRESET_ID = SHEET_6X4.preset_id


def get_preset(preset_id: str) -> SheetLayoutPreset:
    """Look up a preset by id."""
    try:
        return PRESETS[preset_id]
    except KeyError:
        raise UnknownPresetError(preset_id, list(PRESETS))


def list_presets() -> List[SheetLayoutPreset]:
    return list(PRESETS.values())


@dataclass(frozen=True)
class PrintQueueItem:
    """One processed photo and how many copies of it to print."""
    image: Any
    copies: int = 1

    def __post_init__(self):
        if isinstance(self.copies, bool) or not isinstance(self.copies, int):
            raise ValidationError(f"Copies must be an integer, got {self.copies!r}")
        if self.copies < 1:
            raise ValidationError(
                f"Copies must be at least 1, got {self.copies}",
                details={'copies': self.copies},
                suggestions=["Remove the photo from the queue instead of setting zero copies"]
            )


QueueEntry = Union[PrintQueueItem, Tuple[Any, int]]


def normalize_queue(queue: Sequence[QueueEntry]) -> List[PrintQueueItem]:
    """Accept PrintQueueItems or (image, copies) pairs."""
    return [entry if isinstance(entry, PrintQueueItem) else PrintQueueItem(*entry)
            for entry in queue]


def flatten_queue(queue: Sequence[QueueEntry]) -> List[Any]:
    """
    Expand (image, copies) entries into one entry per copy.

    Queue order is preserved and the copies of one item stay contiguous:
    [(A, 2), (B, 1)] -> [A, A, B].
    """
    flat = []
    for item in normalize_queue(queue):
        flat.extend([item.image] * item.copies)
    return flat


class SlotPlan(NamedTuple):
    """Slots to draw, in placement order, and the placement indices left undrawn."""
    slots: List[SlotRect]
    skipped: List[int]


def axis_layout(page: int, count: int, slot: int, gap: Optional[int]) -> Tuple[float, float]:
    """
    Start offset and step between slots along one axis.

    With a fixed gap the grid is centred on the page; without one the free
    space is split into count + 1 equal margins.
    """
    if gap is None:
        space = (page - count * slot) / (count + 1)
        return space, slot + space

    total = count * slot + (count - 1) * gap
    return (page - total) / 2, slot + gap


def grid_margins(preset: SheetLayoutPreset) -> Dict[str, int]:
    """Left, right, top and bottom page margins around the full grid."""
    plan = plan_slots(preset, preset.capacity)
    left = min(slot.x for slot in plan.slots)
    top = min(slot.y for slot in plan.slots)
    right = preset.page_width - max(slot.right for slot in plan.slots)
    bottom = preset.page_height - max(slot.bottom for slot in plan.slots)
    return {'left': left, 'right': right, 'top': top, 'bottom': bottom}


def plan_slots(preset: SheetLayoutPreset, count: int) -> SlotPlan:
    """
    Place `count` photos on the preset's grid in row-major order.

    Placements past the grid capacity, or whose slot would cross the page
    edge, are skipped rather than clipped.
    """
    start_x, step_x = axis_layout(preset.page_width, preset.columns, preset.slot_width, preset.gap)
    start_y, step_y = axis_layout(preset.page_height, preset.rows, preset.slot_height, preset.gap)

    slots = []
    skipped = []

    for index in range(count):
        column = index % preset.columns
        row = index // preset.columns

        x = math.floor(start_x + column * step_x)
        y = math.floor(start_y + row * step_y)

        fits = (row < preset.rows
                and x >= 0 and y >= 0
                and y + preset.slot_height <= preset.page_height
                and x + preset.slot_width <= preset.page_width)
        if not fits:
            skipped.append(index)
            continue

        slots.append(SlotRect(
            index=index,
            row=row,
            column=column,
            x=x,
            y=y,
            width=preset.slot_width,
            height=preset.slot_height,
        ))

    if skipped:
        logger.warning(f"{len(skipped)} of {count} photos do not fit on a {preset.preset_id} sheet "
                       f"(capacity {preset.capacity})")

    return SlotPlan(slots, skipped)
