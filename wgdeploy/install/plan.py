"""Install plans: which remote commands to run and which files to move."""

import os
import posixpath
import shlex
from enum import Enum

from wgdeploy.provisioning.types import FileTransferTask


class InstallPlan(Enum):
    """Selects the setup.sh argument contract and whether the client config is downloaded.

    WITH_VPN_DOWNLOAD: ``setup.sh --ip --client``, then fetch ``<client>.conf``.
    SETUP_ONLY: ``setup.sh --port --username --password --email --server-name``,
        no download.
    """

    WITH_VPN_DOWNLOAD = "with-vpn-download"
    SETUP_ONLY = "setup-only"


def build_upload_tasks(install):
    """One FileTransferTask per configured script, resolved under the local script dir."""
    return [
        FileTransferTask(
            local_path=os.path.join(os.path.abspath(install.local_script_dir), name),
            remote_path=name,
        )
        for name in install.script_files
    ]


def _user_args(server):
    return [
        "--port", str(server.new_user.ssh_port),
        "--username", server.new_user.name,
        "--password", server.new_user.password,
        "--email", server.alert_email,
        "--server-name", server.server_name,
    ]


def _command(script, args):
    return " ".join([script] + [shlex.quote(a) for a in args])


def setup_commands(server, install, plan):
    """cd into the upload dir, make scripts executable, run setup.sh."""
    if plan is InstallPlan.WITH_VPN_DOWNLOAD:
        args = ["--ip", server.host, "--client", server.client_name]
    else:
        args = _user_args(server)
    return [
        f"cd {shlex.quote(install.remote_temp_dir)}",
        "chmod +x *.sh",
        _command("./setup.sh", args),
    ]


def hardening_commands(server, install):
    return [
        f"cd {shlex.quote(install.remote_temp_dir)}",
        _command("./harden.sh", _user_args(server)),
    ]


def client_config_paths(server, install):
    """Return (remote_path, local_path) of the generated WireGuard client config."""
    filename = f"{server.client_name}.conf"
    remote_path = posixpath.join(install.remote_wireguard_dir, filename)
    local_path = os.path.join(os.path.abspath(install.local_output_dir), filename)
    return remote_path, local_path
