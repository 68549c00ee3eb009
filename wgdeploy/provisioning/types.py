"""Shared data types for provisioning and remote setup."""

from dataclasses import dataclass, field
from enum import Enum

# Vultr reports this address until the instance has been assigned a public IP.
SENTINEL_ADDRESS = "0.0.0.0"

READY_STATUS = "active"


class AuthMode(Enum):
    PASSWORD = "password"
    PRIVATE_KEY = "private-key"


@dataclass(frozen=True)
class ConnectionParameters:
    """SSH connection details. Exactly one auth method must be set."""

    host: str
    username: str
    port: int = 22
    password: str | None = None
    private_key_path: str | None = None

    def __post_init__(self):
        if bool(self.password) == bool(self.private_key_path):
            raise ValueError(
                f"Connection to {self.host} needs exactly one of password or private_key_path"
            )

    @property
    def auth_mode(self) -> AuthMode:
        return AuthMode.PASSWORD if self.password else AuthMode.PRIVATE_KEY

    @property
    def address(self) -> str:
        """SSH address string (user@host:port)."""
        return f"{self.username}@{self.host}:{self.port}"


@dataclass(frozen=True)
class FileTransferTask:
    local_path: str
    remote_path: str


@dataclass
class InstanceState:
    """Snapshot of a provider instance, re-fetched on every poll."""

    id: str
    status: str
    main_ip: str = SENTINEL_ADDRESS
    default_password: str | None = None
    label: str = ""
    raw: dict = field(default_factory=dict, repr=False)

    @property
    def is_ready(self) -> bool:
        return self.status == READY_STATUS and bool(self.main_ip) and self.main_ip != SENTINEL_ADDRESS

    @classmethod
    def from_api(cls, instance: dict) -> "InstanceState":
        return cls(
            id=instance["id"],
            status=instance.get("status", ""),
            main_ip=instance.get("main_ip") or SENTINEL_ADDRESS,
            default_password=instance.get("default_password") or None,
            label=instance.get("label", ""),
            raw=instance,
        )
