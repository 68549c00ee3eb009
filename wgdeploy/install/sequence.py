"""Server setup sequence: upload scripts, run setup, fetch the client config, harden.

Steps run strictly in order. The first failure aborts the rest; remote
state already applied is not rolled back, so the server may be left
partially configured.
"""

import logging
from dataclasses import dataclass

from wgdeploy.install.plan import (
    InstallPlan,
    build_upload_tasks,
    client_config_paths,
    hardening_commands,
    setup_commands,
)
from wgdeploy.provisioning.remote import run_remote_commands
from wgdeploy.provisioning.ssh_transport import download_file, upload_files

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    plan: InstallPlan
    steps: int
    client_config_path: str | None = None


async def run_install(server, install, stdout=None, stderr=None):
    """Run the full setup and hardening sequence against *server*.

    Args:
        server: ``ServerConfig`` (connection, new user, names, install plan).
        install: ``InstallConfig`` (script list and directories).
        stdout, stderr: sinks for remote script output.

    Returns:
        InstallResult describing what ran.
    """
    plan = server.install_plan
    params = server.connection_parameters()
    with_download = plan is InstallPlan.WITH_VPN_DOWNLOAD
    total = 4 if with_download else 3
    step = 0

    def _step(title):
        nonlocal step
        step += 1
        logger.info("")
        logger.info(f"[Step {step}/{total}] {title}")

    logger.info("--- Starting Server Setup & Hardening ---")
    logger.info(f"> Target Host: {server.host}")
    logger.info(f"> Auth: {params.auth_mode.value}, plan: {plan.value}")

    _step("Uploading setup scripts...")
    await upload_files(params, build_upload_tasks(install), install.remote_temp_dir)

    _step("Executing WireGuard setup...")
    await run_remote_commands(params, setup_commands(server, install, plan), stdout=stdout, stderr=stderr)

    client_config_path = None
    if with_download:
        _step("Downloading generated client config...")
        remote_path, client_config_path = client_config_paths(server, install)
        await download_file(params, remote_path, client_config_path)

    _step("Executing server hardening...")
    await run_remote_commands(params, hardening_commands(server, install), stdout=stdout, stderr=stderr)

    logger.info("")
    logger.info("Full setup and hardening process completed successfully!")
    return InstallResult(plan=plan, steps=step, client_config_path=client_config_path)
