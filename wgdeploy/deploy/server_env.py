"""Generate .server.env for the install step from a template and a ready instance."""

import logging
import secrets

from wgdeploy.config import ConfigError

logger = logging.getLogger(__name__)


def generate_password() -> str:
    """Random 32-char hex password for the new SSH user."""
    return secrets.token_hex(16)


def render_server_env(template_text: str, instance, new_user_password: str) -> str:
    """Replace %IP%, %ROOT_PASSWORD% and %NEW_USER_PASSWORD% placeholders."""
    return (
        template_text.replace("%IP%", instance.main_ip)
        .replace("%ROOT_PASSWORD%", instance.default_password or "")
        .replace("%NEW_USER_PASSWORD%", new_user_password)
    )


def write_server_env(instance, template_path, output_path) -> str:
    """Render *template_path* for *instance* and write it to *output_path*.

    Returns:
        The path written.
    """
    try:
        with open(template_path) as f:
            template_text = f.read()
    except OSError as e:
        raise ConfigError(f"Template file {template_path} not found or unreadable: {e}") from e

    content = render_server_env(template_text, instance, generate_password())
    with open(output_path, "w") as f:
        f.write(content)
    logger.info(f"Server environment file created at: {output_path}")
    return output_path
