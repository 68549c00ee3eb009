"""Deploy helpers: follow-up configuration written after an instance is ready."""

from wgdeploy.deploy.server_env import generate_password, render_server_env, write_server_env

__all__ = [
    "generate_password",
    "render_server_env",
    "write_server_env",
]
