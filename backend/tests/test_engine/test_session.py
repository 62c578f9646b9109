"""Tests for PatternSession and the parameter store."""

import asyncio
import random

import pytest

from metapattern.engine.extractor import UploadedImage
from metapattern.engine.params import ParameterStore, PatternType, RenderParameters, ShapeKind
from metapattern.engine.renderer import PatternRenderer
from metapattern.engine.session import PatternSession
from metapattern.models.metadata import ImageMetadata
from tests.conftest import make_image


class GatedExtractor:
    """Returns canned metadata per filename; ``slow.jpg`` waits for a gate."""

    def __init__(self, results: dict[str, ImageMetadata]) -> None:
        self.results = results
        self.gate = asyncio.Event()

    async def extract(self, upload, image):
        if upload.filename == "slow.jpg":
            await self.gate.wait()
        return self.results[upload.filename]


def test_superseded_load_is_discarded():
    slow = ImageMetadata(lens_type="Ultra Wide", iso=50)
    fast = ImageMetadata(lens_type="Telephoto", iso=1600)

    async def scenario():
        extractor = GatedExtractor({"slow.jpg": slow, "fast.jpg": fast})
        session = PatternSession(extractor=extractor, rng=random.Random(3))
        image = make_image()

        first = asyncio.create_task(session.load(UploadedImage("slow.jpg"), image, seed=1))
        await asyncio.sleep(0)
        assert await session.load(UploadedImage("fast.jpg"), image, seed=2) is True
        extractor.gate.set()
        return session, await first

    session, applied = asyncio.run(scenario())

    assert applied is False
    assert session.metadata is fast
    assert session.params().seed == 2
    assert session.params().iso == 1600


def test_load_keeps_live_controls():
    store = ParameterStore()
    store.update(tint="#002AFF", rotation=30.0, zoom=2.0)
    extractor = GatedExtractor({"a.jpg": ImageMetadata(iso=100, flash=True)})
    session = PatternSession(extractor=extractor, store=store)

    assert asyncio.run(session.load(UploadedImage("a.jpg"), make_image(), seed=9)) is True

    params = session.params()
    assert params.seed == 9
    assert params.tint == "#002AFF"
    assert params.rotation == 30.0
    assert params.zoom == 2.0
    assert params.stream_count == 5
    assert params.sharpness == "blurred"


def test_seed_drawn_from_session_rng():
    extractor = GatedExtractor({"a.jpg": ImageMetadata()})
    seeds = []
    for _ in range(2):
        session = PatternSession(extractor=extractor, rng=random.Random(42))
        asyncio.run(session.load(UploadedImage("a.jpg"), make_image()))
        seeds.append(session.params().seed)
    assert seeds[0] == seeds[1]


def test_store_update_coerces_enums():
    store = ParameterStore()
    params = store.update(pattern_type="wave", shape="rhombus")
    assert params.pattern_type is PatternType.WAVE
    assert params.shape is ShapeKind.RHOMBUS
    assert store.version == 1
    with pytest.raises(ValueError):
        store.update(pattern_type="spiral")


def test_store_snapshots_are_immutable():
    store = ParameterStore()
    before = store.snapshot()
    store.update(scale=2.0)
    assert before.scale == 1.0
    assert store.snapshot().scale == 2.0


def test_store_replace_without_controls():
    store = ParameterStore()
    store.update(rotation=90.0)
    store.replace(RenderParameters(seed=4))
    assert store.snapshot().rotation == 0.0
    assert store.snapshot().seed == 4


def test_to_dict_uses_plain_values():
    data = RenderParameters(pattern_type=PatternType.BUMP).to_dict()
    assert data["pattern_type"] == "bump"
    assert data["shape"] == "star"


def test_session_draws_before_and_after_load():
    extractor = GatedExtractor({"a.jpg": ImageMetadata(iso=100)})
    session = PatternSession(extractor=extractor, renderer=PatternRenderer((120, 90)))

    # defaults render while nothing is loaded
    assert session.frame().size == (120, 90)
    asyncio.run(session.load(UploadedImage("a.jpg"), make_image(), seed=7))
    session.controls.click_pattern(0.5)

    assert asyncio.run(session.animate(frames=2)) == 2
    assert session.renderer.state.kind == PatternType.BUMP
    assert session.renderer.failed_frames == 0
    assert session.export()[:8] == b"\x89PNG\r\n\x1a\n"
