"""Draw render states with plotly and export the composition as a video."""
from __future__ import annotations

import base64
import logging
import mimetypes
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import plotly.graph_objects as go

from .config import TimelineConfig
from .engine import RenderState, composition_duration, render_state, resolve_stops
from .geo import unproject
from .reveal import MISSING_DATE
from .stops import Stop, Transport
from .timeline import Phase

logger = logging.getLogger(__name__)

BACKGROUND = "#FFF5F7"
INK = "#4a3f5c"
PURPLE = "#6b21a8"
ROUTE = "#9B7EDE"
BANNER = "#ec4899"
BLADE = "#1a1a1a"
PIXEL_FONT = "Press Start 2P, monospace"
CHARACTER_IMAGE = "character.png"

TRANSPORT_EMOJI = {
    Transport.PLANE: "✈️",
    Transport.CAR: "🚗",
    Transport.TRAIN: "🚂",
    Transport.SHIP: "🚢",
    Transport.BUS: "🚌",
}

CODEC_BY_FORMAT = {
    "mp4": "libx264",
    "mkv": "libx264",
    "mov": "libx264",
    "webm": "libvpx-vp9",
}


@dataclass(frozen=True)
class RenderOptions:
    title: str = ""
    frame_format: str = "png"
    asset_dir: Optional[Path] = None


def image_source(ref: Optional[str], asset_dir: Optional[Path]) -> Optional[str]:
    """Return something plotly can load for a photo reference, or ``None``."""
    if not ref:
        return None
    if ref.startswith(("data:", "http://", "https://")):
        return ref
    path = Path(ref)
    if not path.is_absolute() and asset_dir is not None:
        path = asset_dir / path
    if not path.exists():
        logger.debug("Image %s not found; skipping", path)
        return None
    mime = mimetypes.guess_type(path.name)[0] or "image/png"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def visible_window(state: RenderState, config: TimelineConfig) -> Tuple[List[float], List[float]]:
    """Longitude and latitude ranges covered by the camera, clipped to the globe."""
    left, top = state.camera.invert(0.0, 0.0)
    right, bottom = state.camera.invert(config.plane_width, config.plane_height)
    lat_top, lng_left = unproject(left, top, config.plane_width, config.plane_height)
    lat_bottom, lng_right = unproject(right, bottom, config.plane_width, config.plane_height)
    lon_range = [max(-180.0, lng_left), min(180.0, lng_right)]
    lat_range = [max(-90.0, lat_bottom), min(90.0, lat_top)]
    return lon_range, lat_range


def _text(fig: go.Figure, text: str, y: float, *, size: int, color: str = INK, x: float = 0.5, **kwargs) -> None:
    fig.add_annotation(
        text=text,
        x=x,
        y=y,
        xref="paper",
        yref="paper",
        showarrow=False,
        font=dict(family=PIXEL_FONT, size=size, color=color),
        **kwargs,
    )


def _base_figure(config: TimelineConfig, title: str) -> go.Figure:
    fig = go.Figure()
    fig.update_layout(
        showlegend=False,
        width=config.video_width,
        height=config.video_height,
        paper_bgcolor=BACKGROUND,
        plot_bgcolor=BACKGROUND,
        margin=dict(l=0, r=0, t=0, b=0),
        xaxis=dict(visible=False),
        yaxis=dict(visible=False),
    )
    if title:
        fig.update_layout(title=dict(text=title, x=0.5, xanchor="center", font=dict(size=30, color=PURPLE)))
    return fig


def _add_map(fig: go.Figure, lon_range: List[float], lat_range: List[float]) -> None:
    fig.update_layout(
        geo=dict(
            projection=dict(type="equirectangular"),
            lonaxis=dict(range=lon_range),
            lataxis=dict(range=lat_range),
            domain=dict(x=[0, 1], y=[0, 1]),
            showland=True,
            landcolor="#e4e4e7",
            showcountries=True,
            countrycolor="#a1a1aa",
            showocean=True,
            oceancolor=BACKGROUND,
            showcoastlines=True,
            coastlinecolor="#a1a1aa",
            showframe=False,
            bgcolor=BACKGROUND,
        ),
    )


def _add_segment_traces(fig: go.Figure, state: RenderState, config: TimelineConfig) -> None:
    assert state.route is not None and state.hero is not None
    w, h = config.plane_width, config.plane_height
    start = unproject(*state.route.start, w, h)
    drawn = unproject(*state.route.drawn_to, w, h)
    end = unproject(*state.route.end, w, h)

    fig.add_trace(
        go.Scattergeo(
            lat=[start[0], drawn[0]],
            lon=[start[1], drawn[1]],
            mode="lines",
            line=dict(color=ROUTE, width=3),
            hoverinfo="skip",
        )
    )
    fig.add_trace(
        go.Scattergeo(
            lat=[start[0], end[0]],
            lon=[start[1], end[1]],
            mode="markers",
            marker=dict(size=8, color=PURPLE),
            hoverinfo="skip",
        )
    )
    if state.hero.visible:
        hero = unproject(*state.hero.position, w, h)
        fig.add_trace(
            go.Scattergeo(
                lat=[hero[0]],
                lon=[hero[1]],
                mode="text",
                text=[TRANSPORT_EMOJI.get(state.hero.transport, TRANSPORT_EMOJI[Transport.PLANE])],
                textfont=dict(size=int(26 * state.camera.scale)),
                hoverinfo="skip",
            )
        )


def _add_photo_card(fig: go.Figure, state: RenderState, options: RenderOptions) -> None:
    assert state.reveal is not None
    reveal = state.reveal
    banner = reveal.destination_visible + ("|" if reveal.typing else "")
    fig.add_shape(
        type="rect", xref="paper", yref="paper", x0=0.08, x1=0.92, y0=0.86, y1=0.94,
        fillcolor=BANNER, line=dict(color="#1f2937", width=3),
    )
    _text(fig, banner, 0.90, size=18, color="#ffffff")
    source = image_source(state.photo, options.asset_dir)
    if source is not None:
        fig.add_layout_image(
            dict(
                source=source, xref="paper", yref="paper", x=0.08, y=0.86,
                sizex=0.84, sizey=0.5, xanchor="left", yanchor="top", sizing="fill", layer="above",
            )
        )
    date = reveal.date_visible if reveal.date_text else MISSING_DATE
    _text(fig, date, 0.40, x=0.12, size=14, color="#000000", xanchor="left", bgcolor="#ffffff", bordercolor="#1f2937")


def _add_shutter_and_flash(fig: go.Figure, state: RenderState) -> None:
    if state.shutter is not None and state.shutter.progress > 0:
        blade = state.shutter.progress / 2.0
        for y0, y1 in ((1.0 - blade, 1.0), (0.0, blade)):
            fig.add_shape(
                type="rect", xref="paper", yref="paper", x0=0, x1=1, y0=y0, y1=y1,
                fillcolor=BLADE, line=dict(width=0), layer="above",
            )
    if state.flash_opacity > 0:
        fig.add_shape(
            type="rect", xref="paper", yref="paper", x0=0, x1=1, y0=0, y1=1,
            fillcolor="#ffffff", opacity=state.flash_opacity, line=dict(width=0), layer="above",
        )


def _add_character(fig: go.Figure, y: float, size: float, options: RenderOptions) -> None:
    source = image_source(CHARACTER_IMAGE, options.asset_dir)
    if source is not None:
        fig.add_layout_image(
            dict(source=source, xref="paper", yref="paper", x=0.5, y=y, sizex=size, sizey=size, xanchor="center", yanchor="bottom")
        )


def build_figure(state: RenderState, config: TimelineConfig, options: Optional[RenderOptions] = None) -> go.Figure:
    """Compose one frame of the video as a plotly figure."""
    options = options or RenderOptions()
    fig = _base_figure(config, options.title)

    if state.phase is Phase.INSUFFICIENT:
        _text(fig, state.message or "", 0.5, size=18)
        return fig

    if state.phase is Phase.TERMINAL:
        assert state.summary is not None
        summary = state.summary
        _text(fig, "🏆 QUEST COMPLETE 🏆", 0.72, size=26, color=PURPLE)
        _text(fig, f"Total Distance Traveled: {summary.total_miles:.0f} Miles", 0.62, size=18)
        _text(fig, f"Time Elapsed: {summary.days_elapsed} Days", 0.56, size=18)
        _text(fig, f"“{summary.quote}”", 0.46, size=18, color=PURPLE)
        _add_character(fig, 0.34 + state.character_bob / config.video_height, 0.22, options)
        _text(fig, "👋 Thanks for playing!", 0.30 + state.character_bob / config.video_height, size=16, color=PURPLE)
        return fig

    lon_range, lat_range = visible_window(state, config)
    _add_map(fig, lon_range, lat_range)

    if state.phase is Phase.INTRO:
        # The geo subplot is only drawn when a trace is attached to it.
        fig.add_trace(go.Scattergeo(lat=[], lon=[], mode="markers", hoverinfo="skip"))
        _add_character(fig, 0.5 + state.character_bob / config.video_height, 0.3, options)
        _text(fig, "👋 Let's go!", 0.40 + state.character_bob / config.video_height, size=32, color=PURPLE)
        return fig

    _add_segment_traces(fig, state, config)
    if state.events.photo_visible:
        _add_photo_card(fig, state, options)
    _add_shutter_and_flash(fig, state)
    return fig


def ensure_kaleido_available() -> None:
    try:
        import importlib
        importlib.import_module("kaleido")
    except ImportError as exc:  # pragma: no cover - depends on the install
        raise RuntimeError(
            "Video export requires kaleido. Install it with 'pip install kaleido'."
        ) from exc


def figure_to_image(fig: go.Figure, *, img_format: str = "png", width: int, height: int) -> bytes:
    return fig.to_image(format=img_format, width=width, height=height)


def render_frame_image(frame: int, stops: Sequence[Stop], config: TimelineConfig, options: RenderOptions) -> bytes:
    """Rasterise a single frame; a module-level function so worker processes can run it."""
    state = render_state(frame, stops, config)
    fig = build_figure(state, config, options)
    return figure_to_image(fig, img_format=options.frame_format, width=config.video_width, height=config.video_height)


def render_frames(
    stops: Sequence[Stop],
    config: TimelineConfig,
    options: RenderOptions,
    *,
    workers: int = 1,
) -> List[bytes]:
    """Rasterise every frame of the composition in frame order."""
    stops = tuple(resolve_stops(stops))
    frames = range(composition_duration(stops, config))
    if workers <= 1:
        return [render_frame_image(frame, stops, config, options) for frame in frames]
    count = len(frames)
    with ProcessPoolExecutor(max_workers=workers) as pool:
        return list(
            pool.map(
                render_frame_image,
                frames,
                [stops] * count,
                [config] * count,
                [options] * count,
                chunksize=max(1, count // (workers * 4)),
            )
        )


def write_video(
    stops: Sequence[Stop],
    config: TimelineConfig,
    output_path: Path,
    *,
    options: Optional[RenderOptions] = None,
    video_format: str = "mp4",
    bitrate: str = "16M",
    workers: int = 1,
) -> Path:
    ensure_kaleido_available()
    try:
        import imageio.v3 as iio
    except ImportError as exc:
        raise RuntimeError(
            "Video export requires imageio. Install it with 'pip install imageio imageio-ffmpeg'."
        ) from exc

    options = options or RenderOptions()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    chosen_fmt = (video_format or "mp4").lower()
    if output_path.suffix.lower().lstrip(".") != chosen_fmt:
        output_path = output_path.with_suffix(f".{chosen_fmt}")
        logger.info("Adjusted output extension to match video format: %s", output_path.name)

    ext = ".jpg" if options.frame_format == "jpeg" else f".{options.frame_format}"
    images = render_frames(stops, config, options, workers=workers)
    rendered = [iio.imread(image, extension=ext) for image in images]

    try:
        if chosen_fmt in CODEC_BY_FORMAT:
            iio.imwrite(output_path, rendered, fps=config.fps, codec=CODEC_BY_FORMAT[chosen_fmt], bitrate=bitrate)
        else:
            iio.imwrite(output_path, rendered, fps=config.fps)
    except RuntimeError as exc:  # pragma: no cover - depends on local codecs
        raise RuntimeError(
            "imageio could not find a working ffmpeg/codec. Install 'imageio-ffmpeg' and ensure ffmpeg is available."
        ) from exc
    return output_path
