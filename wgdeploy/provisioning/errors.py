"""Exceptions raised while provisioning and configuring a server."""


class ProvisioningError(Exception):
    """Base class for deploy/install failures surfaced to the operator."""


class ReadinessTimeout(ProvisioningError):
    """Instance never became ready within the attempt budget."""

    def __init__(self, resource_id, attempts, last_state=None):
        self.resource_id = resource_id
        self.attempts = attempts
        self.last_state = last_state
        msg = f"Instance {resource_id} did not become active after {attempts} attempt(s)"
        if last_state is not None:
            msg += f" (last status: {last_state.status}, IP: {last_state.main_ip})"
        super().__init__(msg)


class ReadinessFetchError(ProvisioningError):
    """Fetching instance status failed while polling."""

    def __init__(self, resource_id, reason):
        self.resource_id = resource_id
        super().__init__(f"Failed to get status of instance {resource_id}: {reason}")


class LocalFileNotFound(ProvisioningError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Local file not found: {path}")


class RemoteConnectionError(ProvisioningError):
    """Authentication or network failure while opening an SSH session."""

    def __init__(self, address, reason):
        self.address = address
        super().__init__(f"SSH connection error ({address}): {reason}")


class RemoteCommandFailed(ProvisioningError):
    def __init__(self, code):
        self.code = code
        super().__init__(f"Remote script exited with non-zero code: {code}")


class RemoteFileTransferError(ProvisioningError):
    """Any SFTP-level failure: connect, mkdir, put or get."""
