"""Tests for the recordings REST API.

Uses httpx AsyncClient with an ASGI transport to test the endpoints
end-to-end without starting a real server.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from gamerecorder.loaders.recorder_config_loader import RecorderConfig
from gamerecorder.models.entity import Color, EntityEntry, RenderDescriptor, ShapeKind
from gamerecorder.network.rest_api import create_app
from gamerecorder.persistence.encoder import encode_header, encode_input, encode_keyframe
from gamerecorder.persistence.line_store import FileLineStore


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

BULLET = RenderDescriptor(ShapeKind.CIRCLE, 6.0, 6.0, Color(1.0, 1.0, 0.0, 1.0))


@pytest.fixture
def recordings(tmp_path):
    lines = [
        encode_header(640, 480),
        encode_input(0.2, {32}, 2),
        encode_keyframe(0.0, [
            EntityEntry("Player_0", "Player", 0.0, 0.0),
            EntityEntry("Bullet_0", "Bullet", 10.0, 100.0, BULLET),
        ], 2),
        encode_keyframe(2.0, [
            EntityEntry("Player_0", "Player", 20.0, 40.0),
            EntityEntry("Bullet_0", "Bullet", 10.0, 0.0, BULLET),
        ], 2),
    ]
    (tmp_path / "game_1.jsonl").write_text("\n".join(lines) + "\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("not a recording")
    return tmp_path


@pytest.fixture
def app(recordings):
    config = RecorderConfig(recordings_dir=str(recordings))
    return create_app(config, store=FileLineStore(recordings))


@pytest.fixture
async def client(app):
    """httpx async client wired to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


class TestListing:
    @pytest.mark.asyncio
    async def test_lists_only_logs(self, client, recordings):
        resp = await client.get("/api/recordings")
        assert resp.status_code == 200
        data = resp.json()
        assert [r["name"] for r in data] == ["game_1.jsonl"]
        assert data[0]["size_bytes"] == (recordings / "game_1.jsonl").stat().st_size

    @pytest.mark.asyncio
    async def test_empty_directory(self, tmp_path):
        app = create_app(store=FileLineStore(tmp_path / "missing"))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            resp = await c.get("/api/recordings")
        assert resp.status_code == 200
        assert resp.json() == []


# ---------------------------------------------------------------------------
# Summary & frames
# ---------------------------------------------------------------------------


class TestSummary:
    @pytest.mark.asyncio
    async def test_summary(self, client):
        resp = await client.get("/api/recordings/game_1.jsonl")
        assert resp.status_code == 200
        assert resp.json() == {
            "name": "game_1.jsonl",
            "version": 1,
            "width": 640,
            "height": 480,
            "keyframes": 2,
            "inputs": 1,
            "duration": 2.0,
        }

    @pytest.mark.asyncio
    async def test_unknown_recording_is_404(self, client):
        resp = await client.get("/api/recordings/nope.jsonl")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_non_log_file_is_404(self, client):
        resp = await client.get("/api/recordings/notes.txt")
        assert resp.status_code == 404


class TestFrame:
    @pytest.mark.asyncio
    async def test_interpolated_frame(self, client):
        resp = await client.get("/api/recordings/game_1.jsonl/frame", params={"t": 0.5})
        assert resp.status_code == 200
        data = resp.json()
        assert data["t"] == pytest.approx(0.5)
        assert data["ended"] is False
        by_id = {e["id"]: e for e in data["entities"]}
        player = by_id["Player_0"]
        assert (player["x"], player["y"]) == (pytest.approx(5.0), pytest.approx(10.0))
        assert player["shape"] == "CUSTOM"
        assert player["w"] is None and player["color"] is None
        bullet = by_id["Bullet_0"]
        assert bullet["shape"] == "CIRCLE"
        assert bullet["y"] == pytest.approx(75.0)
        assert bullet["color"] == [1.0, 1.0, 0.0, 1.0]

    @pytest.mark.asyncio
    async def test_frame_past_end_is_clamped(self, client):
        resp = await client.get("/api/recordings/game_1.jsonl/frame", params={"t": 99})
        data = resp.json()
        assert data["t"] == 2.0
        assert data["ended"] is True

    @pytest.mark.asyncio
    async def test_negative_time_rejected(self, client):
        resp = await client.get("/api/recordings/game_1.jsonl/frame", params={"t": -1})
        assert resp.status_code == 422
