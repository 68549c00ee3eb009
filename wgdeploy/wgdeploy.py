#!/usr/bin/env python3
"""WireGuard gateway tools — CLI entrypoint."""

import argparse

from wgdeploy.commands.deploy import register_deploy_command
from wgdeploy.commands.install import register_install_command
from wgdeploy.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="Deploy and harden a WireGuard VPN server on Vultr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_deploy_command(subparsers)
    register_install_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging()
    args.func(args)


if __name__ == "__main__":
    main()
