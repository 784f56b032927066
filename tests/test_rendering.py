"""Tests for generation-keyed preview rendering."""

import asyncio
import threading
from datetime import date

from PIL import Image

from retrivia.domain.styles import CaptionSpec, FilterType, FrameType
from retrivia.services import rendering
from retrivia.services.compositor import RenderResult
from retrivia.services.rendering import PreviewRenderer, RenderRequest
from tests.conftest import strip_buffers


def _request(text: str) -> RenderRequest:
    return RenderRequest(
        buffers=tuple(strip_buffers()),
        filter_type=FilterType.none,
        frame_type=FrameType.classic,
        caption=CaptionSpec(text=text),
        today=date(2024, 6, 5),
    )


def test_render_commits_latest() -> None:
    renderer = PreviewRenderer()
    result = asyncio.run(renderer.request(_request("hello")))
    assert result is not None
    assert result.ok
    assert renderer.latest is result
    assert renderer.generation == 1


def test_stale_render_never_overwrites_newer(monkeypatch) -> None:
    release_slow = threading.Event()

    def fake_render(buffers, filter_type, frame_type, caption, **_kwargs):
        if caption.text == "slow":
            release_slow.wait(timeout=5)
        return RenderResult(image=Image.new("RGB", (1, 1)), ok=True, error=caption.text)

    monkeypatch.setattr(rendering, "render_photostrip", fake_render)
    renderer = PreviewRenderer()

    async def scenario() -> tuple[RenderResult | None, RenderResult | None]:
        slow = asyncio.create_task(renderer.request(_request("slow")))
        await asyncio.sleep(0)
        fast = await renderer.request(_request("fast"))
        release_slow.set()
        return await slow, fast

    slow_result, fast_result = asyncio.run(scenario())

    assert slow_result is None
    assert fast_result is not None
    assert renderer.latest is fast_result
    assert renderer.latest.error == "fast"


def test_invalidate_drops_preview() -> None:
    renderer = PreviewRenderer()
    asyncio.run(renderer.request(_request("hello")))
    renderer.invalidate()
    assert renderer.latest is None
    assert renderer.generation == 2
