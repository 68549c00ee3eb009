"""Install command: run setup and hardening scripts on the server from .server.env."""

import asyncio
import logging
import os
import sys

from wgdeploy.config import SERVER_ENV_FILE, ConfigError, load_install_config, load_server_config
from wgdeploy.install import InstallPlan, run_install
from wgdeploy.provisioning.errors import ProvisioningError

logger = logging.getLogger(__name__)


def _log_vpn_instructions(client_config_path):
    logger.info("")
    logger.info(f"Client config file downloaded to: {client_config_path}")
    logger.info("")
    logger.info("--- How to Use Your New VPN Config ---")
    logger.info("1. Go to https://www.wireguard.com/install/ and install the official app for your device.")
    logger.info('2. Open the WireGuard app and click "Add Tunnel" (or a "+" icon).')
    logger.info("3. Import the downloaded config file:")
    logger.info(f"     - On a computer, select the file directly: {client_config_path}")
    logger.info("     - On a phone, generate a QR code from the file on your computer")
    logger.info("       and scan it with the WireGuard app.")
    logger.info("4. Give the connection a name and toggle the switch to activate the VPN.")


def _log_ssh_instructions(server):
    logger.info("")
    logger.info("ACTION REQUIRED: Your SSH credentials have changed.")
    logger.info("Please save the following new credentials immediately:")
    logger.info(f"  Host:      {server.host}")
    logger.info(f"  Port:      {server.new_user.ssh_port}")
    logger.info(f"  Username:  {server.new_user.name}")
    logger.info(f"  Password:  see NEW_USER_PASSWORD in {SERVER_ENV_FILE}")
    logger.info("")
    logger.info("Reconnect to your server using:")
    logger.info(f"ssh {server.new_user.name}@{server.host} -p {server.new_user.ssh_port}")


def handle_install(args):
    """CLI handler for 'install'."""
    try:
        asyncio.run(_handle_install(args))
    except (ConfigError, ProvisioningError, OSError) as e:
        logger.error("")
        logger.error("--- INSTALLATION FAILED ---")
        logger.error(f"Error: {e}")
        logger.error(f"Please check the {SERVER_ENV_FILE} file and try again (maybe the server is not ready yet).")
        sys.exit(1)


async def _handle_install(args):
    logger.info("--- Starting Installation Process ---")
    env_path = os.path.abspath(SERVER_ENV_FILE)
    server = load_server_config(env_path)
    install = load_install_config(env_path)

    result = await run_install(server, install)

    if result.plan is InstallPlan.WITH_VPN_DOWNLOAD:
        _log_vpn_instructions(result.client_config_path)
    _log_ssh_instructions(server)
    logger.info("")
    logger.info("--- Installation Process Finished ---")


def register_install_command(subparsers):
    """Register the 'install' command."""
    parser = subparsers.add_parser(
        "install",
        help="Run the installation and hardening scripts on the server defined in .server.env",
    )
    parser.set_defaults(func=handle_install)
