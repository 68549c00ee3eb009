"""Remote server setup: install plans and the setup sequence."""

from wgdeploy.install.plan import (
    InstallPlan,
    build_upload_tasks,
    client_config_paths,
    hardening_commands,
    setup_commands,
)
from wgdeploy.install.sequence import InstallResult, run_install

__all__ = [
    "InstallPlan",
    "InstallResult",
    "run_install",
    "build_upload_tasks",
    "setup_commands",
    "hardening_commands",
    "client_config_paths",
]
