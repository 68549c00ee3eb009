"""Configuration loaded from the local .env and .server.env files.

Configs are plain frozen dataclasses built once by the command handler and
passed explicitly to each component.
"""

import os
from dataclasses import dataclass

from dotenv import dotenv_values

from wgdeploy.install.plan import InstallPlan
from wgdeploy.provisioning.readiness import DEFAULT_MAX_ATTEMPTS, DEFAULT_POLL_INTERVAL
from wgdeploy.provisioning.types import ConnectionParameters
from wgdeploy.provisioning.vultr import DEFAULT_API_URL
from wgdeploy.redact import MIN_SECRET_LENGTH, register_secret

PROVIDER_ENV_FILE = ".env"
SERVER_ENV_FILE = ".server.env"
SERVER_ENV_TEMPLATE = ".server.env.template"

DEFAULT_SCRIPT_FILES = ("common.sh", "harden.sh", "setup.sh", "wireguard.sh")


class ConfigError(Exception):
    """Raised when a config file is missing or has invalid values."""


@dataclass(frozen=True)
class VultrConfig:
    api_key: str
    region: str
    plan: str
    os: str
    label: str
    api_url: str = DEFAULT_API_URL
    poll_interval: int = DEFAULT_POLL_INTERVAL
    poll_max_attempts: int = DEFAULT_MAX_ATTEMPTS


@dataclass(frozen=True)
class InstallConfig:
    script_files: tuple[str, ...] = DEFAULT_SCRIPT_FILES
    local_script_dir: str = "scripts"
    remote_temp_dir: str = "/tmp/setup-scripts"
    remote_wireguard_dir: str = "/etc/wireguard"
    local_output_dir: str = "."


@dataclass(frozen=True)
class NewUserConfig:
    ssh_port: int
    name: str
    password: str


@dataclass(frozen=True)
class ServerConfig:
    host: str
    username: str
    new_user: NewUserConfig
    alert_email: str
    client_name: str
    server_name: str
    password: str | None = None
    private_key_path: str | None = None
    ssh_port: int = 22
    install_plan: InstallPlan = InstallPlan.WITH_VPN_DOWNLOAD

    def connection_parameters(self) -> ConnectionParameters:
        return ConnectionParameters(
            host=self.host,
            username=self.username,
            port=self.ssh_port,
            password=self.password,
            private_key_path=self.private_key_path,
        )


# ── Parsing helpers ────────────────────────────────────────────────


def _read_env_file(path):
    if not os.path.isfile(path):
        raise ConfigError(f"Could not read the environment file at {path}. Please ensure the file exists.")
    return {k: v for k, v in dotenv_values(path).items() if v is not None}


def _require(values, keys, path):
    missing = [k for k in keys if not values.get(k)]
    if missing:
        raise ConfigError(f"{path}: missing required value(s): {', '.join(missing)}")


def _int_value(values, key, default, path):
    raw = values.get(key)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{path}: {key} must be an integer, got '{raw}'") from None


# ── Loaders ────────────────────────────────────────────────────────


def load_provider_config(path=PROVIDER_ENV_FILE):
    """Load the Vultr settings used by 'deploy'."""
    values = _read_env_file(path)
    _require(values, ["VULTR_API_KEY", "VULTR_REGION", "VULTR_PLAN", "VULTR_OS", "VULTR_INSTANCE_LABEL"], path)
    register_secret(values["VULTR_API_KEY"])

    poll_max_attempts = _int_value(values, "POLL_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS, path)
    if poll_max_attempts < 0:
        raise ConfigError(f"{path}: POLL_MAX_ATTEMPTS must not be negative")

    return VultrConfig(
        api_key=values["VULTR_API_KEY"],
        region=values["VULTR_REGION"],
        plan=values["VULTR_PLAN"],
        os=values["VULTR_OS"],
        label=values["VULTR_INSTANCE_LABEL"],
        api_url=values.get("VULTR_API_URL") or DEFAULT_API_URL,
        poll_interval=_int_value(values, "POLL_INTERVAL", DEFAULT_POLL_INTERVAL, path),
        poll_max_attempts=poll_max_attempts,
    )


def load_server_config(path=SERVER_ENV_FILE):
    """Load the server connection and setup settings used by 'install'."""
    values = _read_env_file(path)
    _require(
        values,
        ["HOST", "USERNAME", "NEW_USER_SSH_PORT", "NEW_USER_NAME", "NEW_USER_PASSWORD",
         "ALERT_EMAIL", "CLIENT_NAME", "SERVER_NAME"],
        path,
    )

    password = values.get("PASSWORD") or None
    private_key_path = values.get("PRIVATE_KEY_PATH") or None
    if bool(password) == bool(private_key_path):
        raise ConfigError(f"{path}: set exactly one of PASSWORD or PRIVATE_KEY_PATH")

    plan_name = values.get("INSTALL_PLAN") or InstallPlan.WITH_VPN_DOWNLOAD.value
    try:
        install_plan = InstallPlan(plan_name)
    except ValueError:
        choices = ", ".join(p.value for p in InstallPlan)
        raise ConfigError(f"{path}: unknown INSTALL_PLAN '{plan_name}' (expected one of: {choices})") from None

    # Shorter values are not redacted, and this one is passed on the setup command lines.
    if len(values["NEW_USER_PASSWORD"]) < MIN_SECRET_LENGTH:
        raise ConfigError(f"{path}: NEW_USER_PASSWORD must be at least {MIN_SECRET_LENGTH} characters")

    register_secret(password)
    register_secret(values["NEW_USER_PASSWORD"])

    return ServerConfig(
        host=values["HOST"],
        username=values["USERNAME"],
        password=password,
        private_key_path=private_key_path,
        ssh_port=_int_value(values, "SSH_PORT", 22, path),
        new_user=NewUserConfig(
            ssh_port=_int_value(values, "NEW_USER_SSH_PORT", None, path),
            name=values["NEW_USER_NAME"],
            password=values["NEW_USER_PASSWORD"],
        ),
        alert_email=values["ALERT_EMAIL"],
        client_name=values["CLIENT_NAME"],
        server_name=values["SERVER_NAME"],
        install_plan=install_plan,
    )


def load_install_config(path=SERVER_ENV_FILE):
    """Load optional script/directory overrides; defaults match the bundled scripts."""
    values = _read_env_file(path)
    defaults = InstallConfig()
    script_files = values.get("INSTALL_SCRIPT_FILES")
    return InstallConfig(
        script_files=tuple(f.strip() for f in script_files.split(",") if f.strip()) if script_files else defaults.script_files,
        local_script_dir=values.get("LOCAL_SCRIPT_DIR") or defaults.local_script_dir,
        remote_temp_dir=values.get("REMOTE_TEMP_DIR") or defaults.remote_temp_dir,
        remote_wireguard_dir=values.get("REMOTE_WIREGUARD_DIR") or defaults.remote_wireguard_dir,
    )
