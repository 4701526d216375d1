# launcher_app/main.py

import logging
import streamlit as st

from launcher_app import config
from launcher_app.services.launcher import Launcher
from launcher_app.ui.login import login_page, logout
from launcher_app.ui.store import store_page
from launcher_app.ui.library import library_page, downloads_page, settings_page


logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

st.set_page_config(page_title="MLX Launcher", layout="wide")


def get_launcher() -> Launcher:
    if "launcher" not in st.session_state:
        st.session_state["launcher"] = Launcher()
    return st.session_state["launcher"]


def main_page(launcher):
    st.sidebar.markdown(f"## 👋 {launcher.session.username}")

    if st.sidebar.button("🛒 Store"):
        st.session_state["page"] = "store"
    if st.sidebar.button("📚 Library"):
        st.session_state["page"] = "library"
    if st.sidebar.button("📥 Downloads"):
        st.session_state["page"] = "downloads"
    if st.sidebar.button("⚙️ Settings"):
        st.session_state["page"] = "settings"
    if st.sidebar.button("🔓 Log out"):
        logout(launcher)
        st.session_state.clear()
        st.rerun()

    page = st.session_state.get("page", "store")
    if page == "library":
        library_page(launcher)
    elif page == "downloads":
        downloads_page(launcher)
    elif page == "settings":
        settings_page(launcher)
    else:
        store_page(launcher)


launcher = get_launcher()

if not launcher.session.authenticated:
    login_page(launcher)
else:
    main_page(launcher)
