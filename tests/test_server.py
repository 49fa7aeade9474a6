import json

import pytest

import quest_server
from conftest import PARIS, ROME, TOKYO


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(quest_server, "OUTPUT_ROOT", tmp_path)
    quest_server.app.config["TESTING"] = True
    with quest_server.app.test_client() as client:
        yield client


@pytest.fixture
def stops_json():
    return [s.to_dict() for s in (PARIS, ROME, TOKYO)]


def test_timeline_summary(client, stops_json):
    resp = client.post("/api/timeline", json={"stops": stops_json})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["duration"] == 405
    assert body["segment_count"] == 2
    assert body["placeholder"] is False
    assert [cue["start_frame"] for cue in body["cues"]] == [110, 245]


def test_timeline_placeholder(client, stops_json):
    body = client.post("/api/timeline", json={"stops": stops_json[:1]}).get_json()
    assert body["placeholder"] is True
    assert body["duration"] == 150


def test_render_state(client, stops_json):
    resp = client.post("/api/render-state", json={"stops": stops_json, "frame": 45})
    body = resp.get_json()
    assert body["state"]["phase"] == "travel"
    assert body["state"]["segment_index"] == 0


def test_render_state_clamps_frame(client, stops_json):
    body = client.post("/api/render-state", json={"stops": stops_json, "frame": 99999}).get_json()
    assert body["frame"] == 404
    assert body["state"]["phase"] == "terminal"
    body = client.post("/api/render-state", json={"stops": stops_json, "frame": -3}).get_json()
    assert body["frame"] == 0


def test_render_state_honours_config(client, stops_json):
    body = client.post(
        "/api/render-state", json={"stops": stops_json, "frame": 10, "config": {"intro_frames": 5}}
    ).get_json()
    assert body["state"]["phase"] == "travel"


@pytest.mark.parametrize(
    "payload",
    [
        {"stops": [{"location": "no id"}]},
        {"stops": [], "config": {"fps": 0}},
        {"stops": [], "config": {"nope": 1}},
        {"stops": [], "config": {"travel_zoom_mode": "spring", "spring_mass": 0}},
        {"stops": [], "config": {"view_center": [1]}},
        {"stops": [], "frame": "abc"},
    ],
)
def test_bad_requests(client, payload):
    assert client.post("/api/render-state", json=payload).status_code == 400


def test_non_json_body(client):
    assert client.post("/api/timeline", data="hello", content_type="text/plain").status_code == 400


def test_generate_runs_exporter(client, stops_json, tmp_path, monkeypatch):
    calls = []

    def fake_run(cmd, check, cwd, env):
        calls.append(cmd)
        stops_path = cmd[2]
        assert json.loads(open(stops_path).read())[0]["location"] == "Paris"

    monkeypatch.setattr(quest_server.subprocess, "run", fake_run)
    resp = client.post("/generate", json={"stops": stops_json, "title": "Spring trip"})
    assert resp.status_code == 302
    run_id = resp.headers["Location"].rsplit("/", 1)[-1]
    assert "--title" in calls[0]

    result = client.get(f"/result/{run_id}").get_json()
    assert result == {"run_id": run_id, "has_video": False, "video_url": None, "cues": []}
    assert client.get(f"/video/{run_id}").status_code == 404


def test_unknown_run(client):
    assert client.get("/result/does-not-exist").status_code == 404
