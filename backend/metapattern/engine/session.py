"""PatternSession: ties one upload at a time to the live parameter store.

Each ``load`` takes a generation number. When extraction finishes, the
result is applied only if no newer upload started in the meantime, so a
slow extraction for a replaced image can never overwrite the newer one.
"""

from __future__ import annotations

import logging
import random

from PIL import Image

from metapattern.engine.controls import ControlPanel
from metapattern.engine.export import export_image
from metapattern.engine.extractor import HttpMetadataService, MetadataExtractor, UploadedImage
from metapattern.engine.loop import run_animation
from metapattern.engine.mapper import map_metadata
from metapattern.engine.params import ParameterStore, RenderParameters
from metapattern.engine.renderer import PatternRenderer
from metapattern.models.metadata import ImageMetadata

logger = logging.getLogger(__name__)


class PatternSession:
    def __init__(
        self,
        extractor: MetadataExtractor | None = None,
        store: ParameterStore | None = None,
        rng: random.Random | None = None,
        renderer: PatternRenderer | None = None,
    ) -> None:
        self.extractor = extractor or MetadataExtractor(service=HttpMetadataService())
        self.store = store or ParameterStore()
        self.renderer = renderer or PatternRenderer()
        self.controls = ControlPanel(self.store)
        self.rng = rng or random.Random()
        self.generation = 0
        self.metadata: ImageMetadata | None = None

    async def load(self, upload: UploadedImage, image: Image.Image, seed: int | None = None) -> bool:
        """Extract, map and install parameters; ``False`` if superseded."""
        self.generation += 1
        generation = self.generation

        metadata = await self.extractor.extract(upload, image)
        if generation != self.generation:
            logger.info("Discarding stale metadata for %s (superseded upload)", upload.filename)
            return False

        params = map_metadata(metadata, seed=seed, rng=self.rng)
        self.metadata = metadata
        self.store.replace(params, keep_controls=True)
        logger.info("Loaded %s: pattern=%s shape=%s", upload.filename, params.pattern_type.value, params.shape.value)
        return True

    def params(self) -> RenderParameters:
        return self.store.snapshot()

    def frame(self) -> Image.Image:
        """Draw one frame with whatever parameters are current."""
        return self.renderer.render_frame(self.store.snapshot())

    async def animate(self, frames: int | None = None, on_frame=None) -> int:
        return await run_animation(self.renderer, self.store, frames=frames, on_frame=on_frame)

    def export(self) -> bytes:
        return export_image(self.renderer.image)
