# launcher_app/services/session.py

from dataclasses import dataclass, asdict, field
from pathlib import Path

from launcher_app import config


@dataclass
class LauncherSession:
    """
    Everything the client knows about the signed-in user.
    Passed explicitly to every API call instead of living in module globals.
    """
    api_url: str = config.API_URL
    token: str | None = None
    user_id: str | None = None
    username: str | None = None
    is_admin: bool = False
    install_path: Path = field(default_factory=lambda: config.INSTALL_PATH)

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    def auth_headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def sign_in(self, token: str, user: dict):
        self.token = token
        self.user_id = user.get("id")
        self.username = user.get("username")
        self.is_admin = bool(user.get("isAdmin"))

    def sign_out(self):
        self.token = None
        self.user_id = None
        self.username = None
        self.is_admin = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data["install_path"] = str(self.install_path)
        return data
