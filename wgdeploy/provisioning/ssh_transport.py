"""SSH transport: open sessions and move files to/from remote servers via SFTP."""

import logging
import os
import posixpath
from contextlib import asynccontextmanager

import asyncssh

from wgdeploy.provisioning.errors import (
    LocalFileNotFound,
    RemoteConnectionError,
    RemoteFileTransferError,
)
from wgdeploy.provisioning.types import AuthMode

logger = logging.getLogger(__name__)


def connect_options(params):
    """Build asyncssh.connect() keyword arguments for *params*."""
    options = {
        "port": params.port,
        "username": params.username,
        # Freshly provisioned hosts have no known_hosts entry yet.
        "known_hosts": None,
    }
    if params.auth_mode is AuthMode.PASSWORD:
        options["password"] = params.password
        options["client_keys"] = None
    else:
        options["client_keys"] = [os.path.expanduser(params.private_key_path)]
    return options


@asynccontextmanager
async def open_session(params):
    """Open an authenticated SSH connection, closed on every exit path.

    Raises:
        RemoteConnectionError: authentication or network failure. Nothing
            is left open in that case.
    """
    try:
        conn = await asyncssh.connect(params.host, **connect_options(params))
    except (OSError, asyncssh.Error) as e:
        raise RemoteConnectionError(params.address, e) from e

    try:
        yield conn
    finally:
        conn.close()
        await conn.wait_closed()
        logger.info("SSH connection closed.")


@asynccontextmanager
async def open_sftp(params):
    """Open an SFTP client on a fresh SSH session."""
    logger.info(f"Connecting to {params.host} via SFTP...")
    try:
        async with open_session(params) as conn:
            async with conn.start_sftp_client() as sftp:
                yield sftp
    except RemoteConnectionError as e:
        raise RemoteFileTransferError(str(e)) from e
    except asyncssh.Error as e:
        raise RemoteFileTransferError(f"Could not start SFTP session on {params.host}: {e}") from e


async def upload_files(params, tasks, destination_dir):
    """Upload *tasks* into *destination_dir*, flattening remote names to their basename.

    The destination directory is created first, so an empty batch still
    creates it. A missing local file aborts the rest of the batch; files
    already uploaded stay on the server.
    """
    async with open_sftp(params) as sftp:
        logger.info(f"> Ensuring remote directory exists: {destination_dir}")
        try:
            await sftp.makedirs(destination_dir, exist_ok=True)
        except (OSError, asyncssh.Error) as e:
            raise RemoteFileTransferError(f"Could not create remote directory {destination_dir}: {e}") from e

        logger.info("> Uploading files...")
        for task in tasks:
            if not os.path.isfile(task.local_path):
                raise LocalFileNotFound(task.local_path)
            remote_full_path = posixpath.join(destination_dir, posixpath.basename(task.remote_path))
            logger.info(f"  Uploading {os.path.basename(task.local_path)} to {remote_full_path}")
            try:
                await sftp.put(task.local_path, remote_full_path)
            except (OSError, asyncssh.Error) as e:
                raise RemoteFileTransferError(f"Failed to upload {task.local_path} to {remote_full_path}: {e}") from e

    logger.info(f"All {len(tasks)} file(s) uploaded successfully.")


async def download_file(params, remote_file_path, local_destination_path):
    """Download one remote file, creating the local parent directory if needed."""
    async with open_sftp(params) as sftp:
        logger.info(f"> Preparing to download file: {remote_file_path}")
        local_dir = os.path.dirname(os.path.abspath(local_destination_path))
        if not os.path.isdir(local_dir):
            os.makedirs(local_dir, exist_ok=True)
            logger.info(f"  Created local directory: {local_dir}")

        logger.info(f"  Downloading to {local_destination_path}")
        try:
            await sftp.get(remote_file_path, local_destination_path)
        except (OSError, asyncssh.Error) as e:
            raise RemoteFileTransferError(f"Failed to download {remote_file_path}: {e}") from e

    logger.info("File downloaded successfully.")
