# launcher_app/ui/login.py

import asyncio
import streamlit as st
from streamlit_cookies_manager import EncryptedCookieManager

from launcher_app import config
from launcher_app.services import api
from launcher_app.services.errors import ApiError


cookies = EncryptedCookieManager(prefix="mlx-launcher/", password=config.COOKIE_PASSWORD)
if not cookies.ready():
    st.stop()


def remember(token, username):
    cookies["access_token"] = token
    cookies["username"] = username
    cookies.save()


def logout(launcher):
    asyncio.run(launcher.logout())
    cookies["access_token"] = ""
    cookies["username"] = ""
    cookies.save()


def restore_session(launcher) -> bool:
    """
    Rebuilds the session from the cookie token, if the server still accepts it.
    """
    token = cookies.get("access_token")
    if not token:
        return False

    launcher.session.token = token
    try:
        user = api.get_user_info(launcher.session)
    except ApiError:
        launcher.session.sign_out()
        return False
    launcher.session.sign_in(token, user)
    return True


def login_page(launcher):
    st.title("🎮 MLX Launcher")

    if restore_session(launcher):
        st.rerun()

    if "show_register" not in st.session_state:
        st.session_state["show_register"] = False

    if st.session_state["show_register"]:
        show_register_form(launcher)
    else:
        show_login_form(launcher)


def show_login_form(launcher):
    with st.form("login_form"):
        username = st.text_input("Username or email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in")

    if submitted:
        with st.spinner("Logging in..."):
            result = asyncio.run(launcher.login(username, password))
        if not result["success"]:
            st.error(f"❌ Login failed: {result['error']}")
        else:
            remember(launcher.session.token, launcher.session.username)
            st.success("✅ Logged in")
            st.rerun()

    if st.button("Create an account"):
        st.session_state["show_register"] = True
        st.rerun()


def show_register_form(launcher):
    st.subheader("📝 Register")

    new_user = st.text_input("Username", key="new_user")
    new_email = st.text_input("Email", key="new_email")
    new_pass = st.text_input("Password", type="password", key="new_pass")

    if st.button("Sign up"):
        with st.spinner("Creating account..."):
            result = asyncio.run(launcher.register(new_user, new_email, new_pass))
        if result["success"]:
            st.success("🎉 Account created, you can log in now.")
            st.session_state["show_register"] = False
            st.rerun()
        else:
            st.error(f"❌ Registration failed: {result['error']}")

    if st.button("← Back to login"):
        st.session_state["show_register"] = False
        st.rerun()
