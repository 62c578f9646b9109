"""Animation loop: one store snapshot per frame, then yield to the event loop."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable

from PIL import Image

from metapattern.config import settings
from metapattern.engine.params import ParameterStore
from metapattern.engine.renderer import PatternRenderer

logger = logging.getLogger(__name__)

FrameCallback = Callable[[Image.Image, int], Any]


async def run_animation(
    renderer: PatternRenderer,
    store: ParameterStore,
    fps: float | None = None,
    frames: int | None = None,
    on_frame: FrameCallback | None = None,
) -> int:
    """Render until ``frames`` frames are done (forever when ``None``).

    ``on_frame`` may be sync or async. Returns the number of frames drawn.
    """
    fps = fps or settings.frame_rate
    interval = 1.0 / fps
    rendered = 0
    logger.info("Animation started at %.0f fps", fps)

    while frames is None or rendered < frames:
        image = renderer.render_frame(store.snapshot())
        rendered += 1
        if on_frame is not None:
            result = on_frame(image, rendered)
            if inspect.isawaitable(result):
                await result
        await asyncio.sleep(interval)

    logger.info("Animation stopped after %d frame(s), %d failed", rendered, renderer.failed_frames)
    return rendered
