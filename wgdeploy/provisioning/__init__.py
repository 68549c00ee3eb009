"""VM provisioning and remote setup: types, readiness polling, SSH/SFTP helpers, Vultr provider."""

from wgdeploy.provisioning.errors import (
    LocalFileNotFound,
    ProvisioningError,
    ReadinessFetchError,
    ReadinessTimeout,
    RemoteCommandFailed,
    RemoteConnectionError,
    RemoteFileTransferError,
)
from wgdeploy.provisioning.readiness import wait_until_ready
from wgdeploy.provisioning.remote import join_pipeline, run_remote_commands
from wgdeploy.provisioning.ssh_transport import download_file, open_session, upload_files
from wgdeploy.provisioning.types import (
    SENTINEL_ADDRESS,
    AuthMode,
    ConnectionParameters,
    FileTransferTask,
    InstanceState,
)

__all__ = [
    "AuthMode",
    "ConnectionParameters",
    "FileTransferTask",
    "InstanceState",
    "SENTINEL_ADDRESS",
    "wait_until_ready",
    "open_session",
    "upload_files",
    "download_file",
    "join_pipeline",
    "run_remote_commands",
    "ProvisioningError",
    "ReadinessTimeout",
    "ReadinessFetchError",
    "LocalFileNotFound",
    "RemoteConnectionError",
    "RemoteCommandFailed",
    "RemoteFileTransferError",
]
