"""
Sheet composite module for the photo sheet engine.

This module handles:
- Loading every queued photo before anything is drawn
- Drawing one copy per slot, upright or turned a quarter
- Optional cut guides around each slot
- Encoding the finished page as JPEG
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from PIL import Image
from loguru import logger

from photosheet.config import AppConfig, get_config
from photosheet.encoder import EncodedImage, EncodeSettings, encode_jpeg
from photosheet.errors import ValidationError
from photosheet.geometry import SlotRect
from photosheet.layout import (
    DEFAULT_PRESET_ID, PrintQueueItem, QueueEntry, SheetLayoutPreset, SlotPlan,
    flatten_queue, get_preset, normalize_queue, plan_slots
)
from photosheet.loader import load_images_async
from photosheet.surface import RasterSurface, allocate_surface


@dataclass(frozen=True)
class Sheet:
    """A composed print sheet and where its photos were placed."""
    preset_id: str
    image: EncodedImage
    slots: Tuple[SlotRect, ...]
    skipped: int

    @property
    def placed(self) -> int:
        return len(self.slots)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


class SheetComposer:
    """Main sheet composition class."""

    def __init__(self, config: AppConfig = None):
        self.config = config or get_config()
        self.encode_settings = EncodeSettings(quality=self.config.SHEET_JPEG_QUALITY)

    def resolve_preset(self, preset: Union[str, SheetLayoutPreset]) -> SheetLayoutPreset:
        if isinstance(preset, SheetLayoutPreset):
            return preset
        return get_preset(preset)

    def render(self,
               photos: List[Image.Image],
               preset: SheetLayoutPreset,
               plan: SlotPlan,
               cut_guides: bool = False) -> RasterSurface:
        """
        Draw already decoded photos onto a fresh page surface.

        `photos` is the flattened sequence; slot.index selects the photo.
        """
        page = allocate_surface(preset.page_width, preset.page_height, self.config.SHEET_BACKGROUND)

        for slot in plan.slots:
            page.draw_image(photos[slot.index], slot, quarter_turn=preset.rotate_slot)

            if cut_guides:
                page.stroke_rect(slot, self.config.CUT_GUIDE_COLOR, self.config.CUT_GUIDE_WIDTH)

            logger.debug(f"Placed photo {slot.index} at row {slot.row} col {slot.column} "
                         f"({slot.x}, {slot.y})")

        return page

    async def compose_async(self,
                            queue: Sequence[QueueEntry],
                            preset: Union[str, SheetLayoutPreset] = DEFAULT_PRESET_ID,
                            cut_guides: Optional[bool] = None) -> Sheet:
        """
        Compose a print sheet from a queue of (photo, copies) entries.

        Every queued photo is decoded before placement starts; any decode
        failure aborts the whole sheet.

        Raises:
            ValidationError: If the queue is empty or a copy count is invalid
            UnknownPresetError: If the preset id is not shipped
            ImageDecodeError: If any queued photo cannot be decoded
        """
        layout = self.resolve_preset(preset)
        items: List[PrintQueueItem] = normalize_queue(queue)
        if not items:
            raise ValidationError(
                "Print queue is empty",
                suggestions=["Add at least one cropped photo before generating a sheet"]
            )

        if cut_guides is None:
            cut_guides = self.config.CUT_GUIDES

        decoded = await load_images_async([item.image for item in items])
        photos = flatten_queue([(image, item.copies) for image, item in zip(decoded, items)])

        plan = plan_slots(layout, len(photos))
        page = self.render(photos, layout, plan, cut_guides)
        encoded = encode_jpeg(page, self.encode_settings)

        logger.info(f"Composed {layout.preset_id} sheet: {len(plan.slots)} placed, "
                    f"{len(plan.skipped)} skipped ({len(encoded.data):,} bytes)")

        return Sheet(
            preset_id=layout.preset_id,
            image=encoded,
            slots=tuple(plan.slots),
            skipped=len(plan.skipped),
        )

    def compose(self,
                queue: Sequence[QueueEntry],
                preset: Union[str, SheetLayoutPreset] = DEFAULT_PRESET_ID,
                cut_guides: Optional[bool] = None) -> Sheet:
        """Blocking wrapper around compose_async."""
        return asyncio.run(self.compose_async(queue, preset, cut_guides))


def create_sheet_composer(config: AppConfig = None) -> SheetComposer:
    """Factory function to create a SheetComposer instance."""
    return SheetComposer(config)


def compose_sheet(queue: Sequence[QueueEntry],
                  preset: Union[str, SheetLayoutPreset] = DEFAULT_PRESET_ID,
                  cut_guides: Optional[bool] = None) -> Sheet:
    """Compose a sheet with the global configuration."""
    return create_sheet_composer().compose(queue, preset, cut_guides)


async def compose_sheet_async(queue: Sequence[QueueEntry],
                              preset: Union[str, SheetLayoutPreset] = DEFAULT_PRESET_ID,
                              cut_guides: Optional[bool] = None) -> Sheet:
    """Compose a sheet from inside a running event loop."""
    return await create_sheet_composer().compose_async(queue, preset, cut_guides)
