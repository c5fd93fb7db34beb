# session_state.py
"""
Streamlit wiring shared by app.py and pages/: config, the adapter picked at
startup, and one MutationController per browser session.
"""
from __future__ import annotations
import asyncio
import logging

import streamlit as st

from roster_core.adapters import BackendAdapter, InMemoryAdapter, make_adapter
from roster_core.config import AppConfig, load_config
from roster_core.sync import MutationController

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

def _secrets() -> dict:
    # st.secrets raises when no secrets.toml exists
    try:
        return dict(st.secrets)
    except Exception:
        return {}

@st.cache_resource
def get_config() -> AppConfig:
    return load_config(secrets=_secrets())

@st.cache_resource
def get_adapter() -> BackendAdapter:
    return make_adapter(get_config())

def run(coro):
    """Run one controller coroutine to completion from a Streamlit callback."""
    return asyncio.run(coro)

def get_controller() -> MutationController:
    ss = st.session_state
    if "controller" not in ss:
        ctrl = MutationController(get_adapter(), config=get_config())
        run(ctrl.refresh())
        ss["controller"] = ctrl
    return ss["controller"]

def local_mode_banner():
    if isinstance(get_adapter(), InMemoryAdapter):
        st.warning("⚠️ Supabase is not configured. Changes live in memory only (demo mode).")
