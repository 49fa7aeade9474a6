import json
import os
import pathlib
import subprocess
import sys
import uuid

from flask import Flask, abort, jsonify, redirect, request, send_file, url_for

from travel_quest.config import ConfigError, TimelineConfig
from travel_quest.engine import composition_duration, cue_sheet, render_state, resolve_stops
from travel_quest.stops import StopDataError, stops_from_list

BASE_DIR = pathlib.Path(__file__).resolve().parent
SCRIPT = BASE_DIR / "quest_video.py"

app = Flask(__name__)

# Photos travel inline as data URLs, so allow a few of them.
app.config["MAX_CONTENT_LENGTH"] = 16 * 1024 * 1024  # 16 MiB

OUTPUT_ROOT = pathlib.Path(os.environ.get("QUEST_OUTPUT_ROOT", "/tmp/quest_outputs"))


def read_body():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, "Expected a JSON object body.")
    try:
        stops = stops_from_list(payload.get("stops", []))
        config = TimelineConfig.from_mapping(payload.get("config"))
    except (StopDataError, ConfigError, TypeError) as exc:
        abort(400, str(exc))
    return payload, stops, config


def run_exporter(stops_json: list, title: str) -> str:
    run_id = uuid.uuid4().hex
    out_dir = OUTPUT_ROOT / run_id
    out_dir.mkdir(parents=True, exist_ok=True)

    stops_path = out_dir / "stops.json"
    stops_path.write_text(json.dumps(stops_json), encoding="utf-8")
    out_video = out_dir / "quest.mp4"

    cmd = [
        sys.executable,
        str(SCRIPT),
        str(stops_path),
        "--video",
        str(out_video),
        "--cues",
        str(out_dir / "cues.json"),
    ]
    if title:
        cmd += ["--title", title]

    env = os.environ.copy()

    subprocess.run(cmd, check=True, cwd=str(BASE_DIR), env=env)

    return run_id


@app.post("/api/timeline")
def timeline():
    _, stops, config = read_body()
    resolved = resolve_stops(stops)
    return jsonify(
        duration=composition_duration(resolved, config),
        fps=config.fps,
        resolved_stops=len(resolved),
        segment_count=resolved.segment_count,
        placeholder=render_state(0, resolved, config).is_placeholder,
        cues=[
            dict(kind=c.kind, segment_index=c.segment_index, start_frame=c.start_frame, duration_frames=c.duration_frames)
            for c in cue_sheet(resolved, config)
        ],
    )


@app.post("/api/render-state")
def frame_state():
    payload, stops, config = read_body()
    try:
        frame = int(payload.get("frame", 0))
    except (TypeError, ValueError):
        abort(400, "frame must be an integer.")
    resolved = resolve_stops(stops)
    # The engine expects frames inside the composition.
    frame = min(max(0, frame), composition_duration(resolved, config) - 1)
    return jsonify(frame=frame, state=render_state(frame, resolved, config).to_dict())


@app.post("/generate")
def generate():
    OUTPUT_ROOT.mkdir(parents=True, exist_ok=True)
    payload, stops, _ = read_body()
    title = (payload.get("title") or "").strip()
    run_id = run_exporter([stop.to_dict() for stop in stops], title)
    return redirect(url_for("result", run_id=run_id))


@app.get("/result/<run_id>")
def result(run_id: str):
    out_dir = OUTPUT_ROOT / run_id
    if not out_dir.exists():
        abort(404)

    has_video = (out_dir / "quest.mp4").exists()
    cues_path = out_dir / "cues.json"
    cues = json.loads(cues_path.read_text(encoding="utf-8")) if cues_path.exists() else []
    return jsonify(
        run_id=run_id,
        has_video=has_video,
        video_url=url_for("video", run_id=run_id) if has_video else None,
        cues=cues,
    )


@app.get("/video/<run_id>")
def video(run_id: str):
    out_video = OUTPUT_ROOT / run_id / "quest.mp4"
    if not out_video.exists():
        abort(404)
    return send_file(out_video, mimetype="video/mp4")


if __name__ == "__main__":
    port = int(os.environ.get("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=True)
