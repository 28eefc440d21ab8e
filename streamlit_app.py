"""
Picwall - Gallery Edition

Run with:
    streamlit run streamlit_app.py
"""

from __future__ import annotations

import io
import tempfile
import time
from pathlib import Path

import numpy as np
import streamlit as st
from PIL import Image, ImageDraw

from picwall.config import CollageConfig
from picwall.engine import generate_best_layout
from picwall.image_io import load_image_records, save_uploads
from picwall.models import Canvas
from picwall.render_image import compose

# -- Page config -------------------------------------------------------
st.set_page_config(
    page_title="Picwall",
    page_icon=None,
    layout="wide",
    initial_sidebar_state="collapsed",
)

_DEFAULTS = CollageConfig()

# -- CSS ---------------------------------------------------------------
st.markdown("""
<style>
    .stApp {
        background-color: #faf9f6;
        color: #2a2a2a;
        font-family: 'Inter', 'Helvetica Neue', sans-serif;
    }
    .block-container {
        max-width: 1000px;
        padding-top: 3.5rem;
        padding-bottom: 4rem;
    }
    .gallery-title {
        font-family: 'Cormorant Garamond', 'Georgia', serif;
        font-size: 2.8rem;
        font-weight: 300;
        text-align: center;
        border-bottom: 1px solid #1a1a1a;
        padding-bottom: 0.6rem;
        margin-bottom: 0.5rem;
    }
    .gallery-subtitle {
        font-size: 0.75rem;
        font-weight: 300;
        line-height: 1.8;
        margin-bottom: 3rem;
    }
    .catalogue-detail {
        font-size: 0.75rem;
        letter-spacing: 0.08em;
        text-transform: uppercase;
        text-align: center;
        margin-bottom: 2rem;
    }
    .stButton > button, .stDownloadButton > button {
        border-radius: 0px !important;
        text-transform: uppercase;
        letter-spacing: 0.10em;
    }
    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
    header {visibility: hidden;}
</style>
""", unsafe_allow_html=True)


# -- Helpers -----------------------------------------------------------

def _add_passepartout(img: Image.Image, border: int = 20) -> Image.Image:
    w, h = img.size
    bg = (250, 249, 246)
    canvas = Image.new("RGB", (w + border * 2, h + border * 2), bg)
    canvas.paste(img, (border, border))
    draw = ImageDraw.Draw(canvas)
    draw.rectangle(
        [border - 1, border - 1, border + w, border + h],
        outline=(224, 222, 216), width=1,
    )
    return canvas


# -- Title -------------------------------------------------------------
st.markdown('<div class="gallery-title">Picwall</div>', unsafe_allow_html=True)
st.markdown(
    '<div class="gallery-subtitle">'
    "Upload a handful of photos and pick a canvas. Every photo keeps its "
    "own proportions: nothing is cropped or stretched. The layout is found "
    "by trying many random arrangements and keeping the one whose overall "
    "shape comes closest to the canvas."
    "</div>",
    unsafe_allow_html=True,
)

# -- Controls ----------------------------------------------------------
c1, c2, c3, c4 = st.columns(4)
with c1:
    width = st.number_input("Width (px)", 100, 8000, 1200, step=100)
with c2:
    height = st.number_input("Height (px)", 100, 8000, 800, step=100)
with c3:
    attempts = st.slider("Attempts", 1, 500, _DEFAULTS.attempts)
with c4:
    padding = st.slider("Padding", 0, 40, _DEFAULTS.padding)

seed_text = st.text_input("Seed (blank = random)", "")

uploaded = st.file_uploader(
    "Select photos",
    type=["jpg", "jpeg", "png", "webp", "bmp", "gif"],
    accept_multiple_files=True,
)

if uploaded and st.button("COMPOSE", type="primary", use_container_width=True):
    try:
        cfg = CollageConfig(
            attempts=attempts,
            padding=padding,
            seed=int(seed_text) if seed_text.strip() else None,
        )
    except ValueError as exc:
        st.error(str(exc))
        st.stop()

    with tempfile.TemporaryDirectory() as tmp:
        paths = save_uploads(((f.name, f.getvalue()) for f in uploaded), Path(tmp))
        records = load_image_records(paths)

        canvas = Canvas(int(width), int(height))
        t0 = time.perf_counter()
        result = generate_best_layout(
            records, canvas, cfg, rng=np.random.default_rng(cfg.seed),
        )
        collage = compose(result, cfg.background)
        elapsed = time.perf_counter() - t0

    st.markdown("---")
    st.image(_add_passepartout(collage, border=28), use_container_width=True)
    st.markdown(
        f'<div class="catalogue-detail">'
        f"{canvas.width} &times; {canvas.height}, {len(result)} photos"
        f"</div>",
        unsafe_allow_html=True,
    )

    buf = io.BytesIO()
    collage.save(buf, format="JPEG", quality=cfg.jpeg_quality)
    _, dl_col, _ = st.columns([1, 2, 1])
    with dl_col:
        st.download_button(
            "SAVE COLLAGE",
            data=buf.getvalue(),
            file_name="picwall.jpg",
            mime="image/jpeg",
            use_container_width=True,
        )

    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Canvas", f"{canvas.width} × {canvas.height}")
    m2.metric("Photos", f"{len(result)}")
    m3.metric("Time", f"{elapsed:.1f} s")
    m4.metric("Shape error", f"{result.score:.3f}")

elif not uploaded:
    st.markdown(
        '<p style="font-family: Cormorant Garamond, Georgia, serif; '
        "color: #bbb; font-size: 1rem; font-weight: 300; "
        'font-style: italic; margin-top: 2rem;">'
        "Select some photos to begin.</p>",
        unsafe_allow_html=True,
    )
