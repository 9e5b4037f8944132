"""Configuration module initialization."""
import logging
import os
import sys


def load_streamlit_secrets():
    """Load Streamlit Cloud secrets into environment variables."""
    try:
        import streamlit as st
        if hasattr(st, "secrets") and st.secrets:
            # Backend
            if "backend" in st.secrets:
                backend = st.secrets["backend"]
                if backend.get("base_url"):
                    os.environ.setdefault("BACKEND_BASE_URL", backend["base_url"])
                if backend.get("auth_cookie"):
                    os.environ.setdefault("BACKEND_AUTH_COOKIE", backend["auth_cookie"])
            # Also support flat key format: BACKEND_BASE_URL = "xxx"
            elif "BACKEND_BASE_URL" in st.secrets:
                os.environ.setdefault("BACKEND_BASE_URL", st.secrets["BACKEND_BASE_URL"])

            # Workflow webhooks
            if "workflow" in st.secrets:
                wf = st.secrets["workflow"]
                if wf.get("prediction_webhook_url"):
                    os.environ.setdefault("WORKFLOW_PREDICTION_WEBHOOK_URL", wf["prediction_webhook_url"])
                if wf.get("analysis_webhook_url"):
                    os.environ.setdefault("WORKFLOW_ANALYSIS_WEBHOOK_URL", wf["analysis_webhook_url"])
                if wf.get("webhook_secret"):
                    os.environ.setdefault("WORKFLOW_WEBHOOK_SECRET", wf["webhook_secret"])
    except Exception:
        pass  # Not running in Streamlit or no secrets configured


# Load secrets before importing settings
load_streamlit_secrets()

from .settings import settings, load_factor_config


def setup_logging() -> None:
    """Configure application logging."""
    log_dir = settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_dir / "app.log", mode="a"),
        ],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["settings", "setup_logging", "load_factor_config", "load_streamlit_secrets"]
