import os
from datetime import datetime

import streamlit as st

from config import load_env
from schemas import AnalysisResult, coerce_result
from services.api_client import AnalyzeFailed, call_analyze
from services.compression import CompressionError, compress_to_data_url
from services.gallery import (
    MAX_ANALYZE_COUNT,
    MAX_PREVIEW_COUNT,
    MAX_SIZE_MB,
    MIN_COUNT,
    PREVIEW_COLUMNS,
    ImageGallery,
    target_bytes,
)
from services.report import build_report_markdown, report_filename

load_env()

st.set_page_config(page_title="Moments AI", layout="wide")
st.title("Moments AI")
st.caption("Upload feed screenshots and get a personality and dating read on the person behind them.")

API_BASE = os.getenv("API_BASE", "http://localhost:3001")

# --- Session state --------------------------------------------------------
defaults = {"gallery": ImageGallery(), "result": None, "raw_text": None, "uploader_key": 0, "notices": []}
for k, v in defaults.items():
    if k not in st.session_state:
        st.session_state[k] = v

gallery: ImageGallery = st.session_state.gallery


def reset_result():
    st.session_state.result = None
    st.session_state.raw_text = None


def remove_image(image_id: str):
    gallery.remove(image_id)


def toggle_show_all():
    gallery.show_all = not gallery.show_all


def clear_images():
    gallery.clear()
    reset_result()


for notice in st.session_state.notices:
    st.warning(notice)
st.session_state.notices = []

# --- Upload ---------------------------------------------------------------
uploaded = st.file_uploader(
    f"Upload at least {MIN_COUNT} feed screenshots (JPG / PNG)",
    type=["jpg", "jpeg", "png"],
    accept_multiple_files=True,
    key=f"uploader_{st.session_state.uploader_key}",
)

if uploaded:
    added, errors = gallery.add([(f.name, f.type, f.getvalue()) for f in uploaded])
    notices = list(errors)
    if added:
        reset_result()
        if gallery.has_large_images(added):
            notices.append(f"Large images detected; they will be compressed before analysis (target under {MAX_SIZE_MB}MB)")
    st.session_state.notices = notices
    # a fresh uploader key empties the widget so the same files are not added twice
    st.session_state.uploader_key += 1
    st.rerun()

# --- Preview grid ---------------------------------------------------------
if gallery.images:
    st.markdown(f"**{len(gallery.images)} image(s) selected** (the first {MAX_ANALYZE_COUNT} are analyzed)")
    for row in gallery.rows():
        cols = st.columns(PREVIEW_COLUMNS)
        for col, img in zip(cols, row):
            col.image(img.data, caption=f"{img.size_mb}MB", width="stretch")
            col.button("Remove", key=f"rm_{img.id}", on_click=remove_image, args=(img.id,))
    if gallery.has_overflow:
        label = "Collapse" if gallery.show_all else f"Show all {len(gallery.images)} (showing {MAX_PREVIEW_COUNT})"
        st.button(label, on_click=toggle_show_all)
    st.button("Clear all", on_click=clear_images)
else:
    st.info("Upload images to get started.")

# --- Analyze --------------------------------------------------------------
if st.button("Analyze", type="primary", disabled=not gallery.images):
    if not gallery.ready_for_analysis():
        st.error(f"Please upload at least {MIN_COUNT} images")
    else:
        reset_result()
        try:
            with st.spinner("Compressing images and generating the report..."):
                data_urls = []
                for img in gallery.selected_for_analysis():
                    data_urls.append(compress_to_data_url(img.data, target_bytes(), img.content_type))
                data = call_analyze(API_BASE, data_urls)
        except (AnalyzeFailed, CompressionError) as e:
            st.error(str(e))
        else:
            if data.get("data"):
                st.session_state.result = data["data"]
            elif data.get("raw"):
                st.session_state.raw_text = str(data["raw"])
                st.info("Showing the model's raw text result")
            else:
                st.error("Unexpected analysis result format, please try again later")


# --- Report ---------------------------------------------------------------
def render_list(title: str, items):
    if items:
        st.markdown(f"**{title}**")
        st.markdown("\n".join(f"- {i}" for i in items))


def render_result(r: AnalysisResult):
    if r.personality:
        with st.container(border=True):
            st.subheader("Personality")
            if r.personality.tags:
                st.markdown(" ".join(f"`{t}`" for t in r.personality.tags))
            if r.personality.description:
                st.write(r.personality.description)

    if r.interests:
        with st.container(border=True):
            st.subheader("Interests")
            for it in r.interests:
                st.markdown(f"**{it.name}** ({it.level})")
                if it.description:
                    st.caption(it.description)

    if r.lifestyle:
        with st.container(border=True):
            st.subheader("Lifestyle")
            if r.lifestyle.habits:
                st.markdown(" ".join(f"`{h}`" for h in r.lifestyle.habits))
            if r.lifestyle.description:
                st.write(r.lifestyle.description)

    if r.values:
        with st.container(border=True):
            st.subheader("Values")
            for label, value in (
                ("Career", r.values.career),
                ("Relationships", r.values.relationship),
                ("Family", r.values.family),
                ("Life", r.values.life),
            ):
                if value:
                    st.markdown(f"**{label}:** {value}")

    if r.emotion:
        with st.container(border=True):
            st.subheader("Emotional State")
            if r.emotion.state:
                st.markdown(f"**{r.emotion.state}**")
            if r.emotion.description:
                st.write(r.emotion.description)

    s = r.suggestions
    if s:
        with st.container(border=True):
            st.subheader("Suggestions")
            render_list("Conversation topics", s.topics)
            render_list("Opening lines", s.openings)
            if s.dating:
                render_list("Date places", s.dating.places)
                render_list("Date activities", s.dating.activities)
            render_list("Watch out for", s.warnings)
            render_list("Strategy", s.strategy)


result = st.session_state.result
raw_text = st.session_state.raw_text

if result or raw_text:
    st.header("Report")
    parsed = coerce_result(result) if result else None
    if parsed:
        render_result(parsed)
    if raw_text:
        with st.container(border=True):
            st.subheader("Raw Analysis")
            st.write(raw_text)

    now = datetime.now()
    st.download_button(
        "Download report",
        data=build_report_markdown(parsed, raw_text, generated_at=now),
        file_name=report_filename(now),
        mime="text/markdown",
    )
