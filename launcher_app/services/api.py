# launcher_app/services/api.py

import requests

from launcher_app import config
from launcher_app.services.errors import ApiError
from launcher_app.services.session import LauncherSession


def _request(session: LauncherSession, method: str, path: str, auth: bool = False, **kwargs):
    """
    Sends one request to the backend and returns the decoded JSON body.
    Raises ApiError with the server's error message on any failure.
    """
    if auth and not session.authenticated:
        raise ApiError("Not logged in", status_code=401)

    headers = kwargs.pop("headers", {})
    if auth:
        headers.update(session.auth_headers())

    call = getattr(requests, method)
    try:
        response = call(
            f"{session.api_url}{path}",
            headers=headers,
            timeout=config.REQUEST_TIMEOUT,
            **kwargs,
        )
    except requests.RequestException as e:
        raise ApiError(f"Cannot reach launcher server: {e}")

    try:
        data = response.json()
    except ValueError:
        data = None

    if not 200 <= response.status_code < 300:
        message = data.get("error") if isinstance(data, dict) else None
        raise ApiError(message or f"Server error {response.status_code}", status_code=response.status_code)
    return data


# -------------------------------
# Authentication
# -------------------------------

def register_user(session, username, email, password):
    return _request(session, "post", "/api/auth/register", json={
        "username": username,
        "email": email,
        "password": password,
    })


def login_user(session, username, password):
    """
    Logs in and stores the token on the session.
    Returns the public user record.
    """
    result = _request(session, "post", "/api/auth/login", json={
        "username": username,
        "password": password,
    })
    session.sign_in(result["token"], result["user"])
    return result["user"]


def get_user_info(session):
    return _request(session, "get", "/api/auth/me", auth=True)


# -------------------------
# Catalog & Library
# -------------------------

def list_games(session):
    return _request(session, "get", "/api/games")


def get_game(session, game_id):
    return _request(session, "get", f"/api/games/{game_id}")


def list_library(session):
    return _request(session, "get", "/api/library", auth=True)


def add_to_library(session, game_id):
    return _request(session, "post", "/api/library/add", auth=True, json={"gameId": game_id})


# -------------------------
# Download ledger
# -------------------------

def list_downloads(session):
    return _request(session, "get", "/api/downloads", auth=True)


def create_download(session, game_id):
    return _request(session, "post", "/api/downloads/create", auth=True, json={"gameId": game_id})


def report_download_status(session, download_id, status, progress=None, error=None):
    payload = {"downloadId": download_id, "status": status}
    if progress is not None:
        payload["progress"] = progress
    if error is not None:
        payload["error"] = error
    return _request(session, "post", "/api/downloads/status", auth=True, json=payload)


def complete_download(session, download_id, install_path):
    return _request(session, "post", "/api/downloads/complete", auth=True, json={
        "downloadId": download_id,
        "installPath": str(install_path),
    })


def check_health(session):
    return _request(session, "get", "/api/health")
