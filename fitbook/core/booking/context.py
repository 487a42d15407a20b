"""
Per-client application state.

Who is logged in on this device and whether the admin panel is unlocked.
The context is loaded from and saved to a plain mapping (the signed cookie
session in the API) at explicit boundaries, instead of living in globals.
"""

from dataclasses import dataclass
from typing import Any, MutableMapping, Optional

from .errors import AdminAuthError, ValidationError
from .models import DEFAULT_ADMIN_PASSWORD, AppConfig
from .phones import is_valid_login_phone, normalize_phone

PHONE_KEY = "current_phone"
ADMIN_KEY = "is_admin"


def check_admin_password(config: AppConfig, candidate: str) -> bool:
    """Plaintext comparison against the configured admin password."""
    expected = config.admin_password or DEFAULT_ADMIN_PASSWORD
    return candidate == expected


@dataclass
class ClientContext:
    phone: Optional[str] = None
    is_admin: bool = False

    @classmethod
    def load(cls, store: MutableMapping[str, Any]) -> "ClientContext":
        phone = store.get(PHONE_KEY) or None
        return cls(phone=phone, is_admin=store.get(ADMIN_KEY) is True)

    def save(self, store: MutableMapping[str, Any]) -> None:
        if self.phone:
            store[PHONE_KEY] = self.phone
        else:
            store.pop(PHONE_KEY, None)
        if self.is_admin:
            store[ADMIN_KEY] = True
        else:
            store.pop(ADMIN_KEY, None)

    @property
    def is_logged_in(self) -> bool:
        return bool(self.phone)

    def login(self, phone: str) -> str:
        if not is_valid_login_phone(phone):
            raise ValidationError("Invalid phone number")
        self.phone = normalize_phone(phone)
        return self.phone

    def logout(self) -> None:
        self.phone = None

    def enter_admin(self, config: AppConfig, password: str) -> None:
        if not check_admin_password(config, password):
            raise AdminAuthError("Wrong admin password")
        self.is_admin = True

    def exit_admin(self) -> None:
        self.is_admin = False
