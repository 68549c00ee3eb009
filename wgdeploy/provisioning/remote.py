"""Remote command execution: run a fail-fast shell pipeline over SSH."""

import asyncio
import logging
import sys

import asyncssh

from wgdeploy.provisioning.errors import RemoteCommandFailed, RemoteConnectionError
from wgdeploy.provisioning.ssh_transport import open_session

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096


def join_pipeline(commands):
    """Chain commands with '&&' so the first non-zero exit stops the rest."""
    return " && ".join(commands)


async def _pump(reader, sink):
    """Copy a remote stream to *sink* as data arrives."""
    while True:
        chunk = await reader.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        sink.write(chunk)
        sink.flush()


async def run_remote_commands(params, commands, stdout=None, stderr=None):
    """Run *commands* on the remote server as one '&&' pipeline.

    Remote stdout/stderr are streamed to *stdout*/*stderr* (default: the
    process streams) while the pipeline runs.

    Raises:
        RemoteConnectionError: the session could not be opened, the
            command channel could not be started, or the connection was
            lost while the pipeline ran.
        RemoteCommandFailed: the pipeline exited non-zero.
    """
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    pipeline = join_pipeline(commands)

    async with open_session(params) as conn:
        logger.info("SSH connection ready. Executing remote commands...")
        logger.info(f"$ {pipeline}")
        try:
            # Undecodable bytes in script output must not abort the run.
            proc = await conn.create_process(pipeline, errors="replace")
        except asyncssh.Error as e:
            raise RemoteConnectionError(params.address, e) from e

        logger.info("--- Remote Script Output ---")
        pumps = [
            asyncio.ensure_future(_pump(proc.stdout, stdout)),
            asyncio.ensure_future(_pump(proc.stderr, stderr)),
        ]
        try:
            await asyncio.gather(*pumps)
            completed = await proc.wait()
        except asyncssh.Error as e:
            raise RemoteConnectionError(params.address, e) from e
        finally:
            for task in pumps:
                task.cancel()
            await asyncio.gather(*pumps, return_exceptions=True)
        logger.info("--- End of Remote Script Output ---")

        code = completed.exit_status
        if code is None:
            # Killed by a signal; no exit status was reported.
            code = -1
        if code != 0:
            raise RemoteCommandFailed(code)
