#!/usr/bin/env python3
"""
MedInsight - Streamlit Frontend Application
Upload an MRI or X-ray image and get a patient-friendly AI interpretation
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent
sys.path.insert(0, str(project_root))

import requests
import streamlit as st
from PIL import Image

from medinsight.core.config import settings
from medinsight.core.logging import logger

# Page config
st.set_page_config(
    page_title="MedInsight - Medical Image Analysis",
    page_icon="🏥",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS
st.markdown("""
<style>
    .stApp {
        background: linear-gradient(135deg, #eff6ff 0%, #eef2ff 50%, #f5f3ff 100%);
    }
    .main-header {
        font-size: 2.4rem;
        font-weight: 700;
        color: #1e3a8a;
        margin-bottom: 0.2rem;
    }
    .sub-header {
        color: #4b5563;
        font-size: 1.1rem;
        margin-bottom: 1.5rem;
    }
    .feature-card {
        background: #ffffff;
        border-radius: 12px;
        padding: 1rem 1.2rem;
        box-shadow: 0 1px 3px rgba(0, 0, 0, 0.08);
        height: 100%;
    }
</style>
""", unsafe_allow_html=True)

ACCEPTED_EXTENSIONS = ["png", "jpg", "jpeg", "webp", "bmp", "gif", "tiff"]
MODALITY_OPTIONS = {
    "🧠 MRI Scan": "mri",
    "🦴 X-Ray": "xray",
}


def analyze_url() -> str:
    return f"{settings.FRONTEND_API_URL.rstrip('/')}{settings.API_PREFIX}/analyze-image"


def request_analysis(file_name: str, file_bytes: bytes, content_type: str, modality: str) -> str:
    """
    Post the image to the backend and return the analysis text
    
    Raises:
        RuntimeError: with the backend's error message
    """
    response = requests.post(
        analyze_url(),
        files={"image": (file_name, file_bytes, content_type)},
        data={"type": modality},
        timeout=120
    )
    
    if not response.ok:
        try:
            message = response.json().get("error", "Failed to analyze image")
        except ValueError:
            message = f"Failed to analyze image (HTTP {response.status_code})"
        raise RuntimeError(message)
    
    return response.json()["analysis"]


def render_sidebar():
    with st.sidebar:
        st.markdown("## 🏥 MedInsight")
        st.markdown("AI-assisted interpretation of medical images.")
        st.markdown("---")
        st.markdown("### How it works")
        st.markdown(
            "1. Choose the image type\n"
            "2. Upload an MRI or X-ray image\n"
            "3. Read the preliminary assessment and the patient-friendly analysis"
        )
        st.markdown("---")
        st.caption(f"Backend: {settings.FRONTEND_API_URL}")
        st.caption(f"Version {settings.APP_VERSION}")


def render_features():
    features = [
        ("🖼️ Multiple Formats", "Support for JPEG, PNG and other common image formats"),
        ("🧠 AI Analysis", "Image classification combined with a large language model"),
        ("🩺 Patient Friendly", "Clear explanations with next steps and warning signs"),
    ]
    cols = st.columns(len(features))
    for col, (title, description) in zip(cols, features):
        with col:
            st.markdown(
                f'<div class="feature-card"><h4>{title}</h4><p>{description}</p></div>',
                unsafe_allow_html=True
            )


def main():
    render_sidebar()
    
    st.markdown('<div class="main-header">Analyze Your Medical Images</div>', unsafe_allow_html=True)
    st.markdown(
        '<div class="sub-header">Upload your medical images and get instant AI-powered insights.</div>',
        unsafe_allow_html=True
    )
    render_features()
    st.markdown("")
    
    choice = st.radio("Select image type", list(MODALITY_OPTIONS.keys()), horizontal=True)
    modality = MODALITY_OPTIONS[choice]
    
    uploaded_file = st.file_uploader(
        "Upload an image (max 10MB)",
        type=ACCEPTED_EXTENSIONS,
        help="MRI or X-ray image"
    )
    
    if uploaded_file is None:
        st.info("👆 Select the image type and upload an image to begin.")
        return
    
    if not (uploaded_file.type or "").startswith("image/"):
        st.error("Please upload a valid image file")
        return
    
    if uploaded_file.size > settings.MAX_UPLOAD_BYTES:
        st.error("Image size should be less than 10MB")
        return
    
    col_preview, col_result = st.columns([1, 2])
    
    with col_preview:
        st.image(Image.open(uploaded_file), caption=uploaded_file.name, use_container_width=True)
        run = st.button("🔍 Analyze Image", type="primary", use_container_width=True)
    
    with col_result:
        if run:
            with st.spinner("Analyzing image..."):
                try:
                    analysis = request_analysis(
                        uploaded_file.name,
                        uploaded_file.getvalue(),
                        uploaded_file.type,
                        modality
                    )
                    st.session_state["analysis"] = analysis
                except (requests.RequestException, RuntimeError) as e:
                    logger.error(f"Analysis request failed: {e}")
                    st.session_state.pop("analysis", None)
                    st.error(str(e))
        
        if st.session_state.get("analysis"):
            st.markdown("### 📋 Analysis Result")
            st.markdown(st.session_state["analysis"])
            st.download_button(
                "💾 Download report",
                st.session_state["analysis"],
                file_name="medinsight_analysis.txt",
                mime="text/plain"
            )


if __name__ == "__main__":
    main()
