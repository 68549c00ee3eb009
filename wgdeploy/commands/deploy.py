"""Deploy command: create a Vultr instance and write .server.env for 'install'."""

import asyncio
import logging
import os
import sys

import httpx

from wgdeploy.config import (
    PROVIDER_ENV_FILE,
    SERVER_ENV_FILE,
    SERVER_ENV_TEMPLATE,
    ConfigError,
    load_provider_config,
)
from wgdeploy.deploy.server_env import write_server_env
from wgdeploy.provisioning.errors import ProvisioningError
from wgdeploy.provisioning.vultr import api_error_message, create_instance

logger = logging.getLogger(__name__)


def handle_deploy(args):
    """CLI handler for 'deploy'."""
    try:
        asyncio.run(_handle_deploy(args))
    except httpx.HTTPError as e:
        logger.error("")
        logger.error("An error occurred during deployment.")
        logger.error(f"Vultr API Error: {api_error_message(e)}")
        sys.exit(1)
    except (ConfigError, ProvisioningError, KeyError, TypeError, ValueError, OSError) as e:
        logger.error("")
        logger.error("An error occurred during deployment.")
        logger.error(f"Error: {e}")
        sys.exit(1)


async def _handle_deploy(args):
    logger.info("--- Starting Deployment Process ---")
    config = load_provider_config(os.path.abspath(PROVIDER_ENV_FILE))

    instance = await create_instance(config)

    env_path = write_server_env(
        instance,
        template_path=os.path.abspath(SERVER_ENV_TEMPLATE),
        output_path=os.path.abspath(SERVER_ENV_FILE),
    )
    logger.info(f"  Edit {env_path} if needed, then run the 'install' command.")
    logger.info("")
    logger.info("--- Deployment Process Finished ---")


def register_deploy_command(subparsers):
    """Register the 'deploy' command."""
    parser = subparsers.add_parser(
        "deploy",
        help="Deploy a new Vultr server instance based on your .env configuration",
    )
    parser.set_defaults(func=handle_deploy)
