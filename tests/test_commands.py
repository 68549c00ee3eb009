"""In-process tests for the deploy/install handlers' failure reporting."""

from unittest.mock import AsyncMock, patch

import asyncssh
import pytest

from wgdeploy.commands.deploy import handle_deploy
from wgdeploy.commands.install import handle_install
from wgdeploy.provisioning.errors import RemoteConnectionError

PROVIDER_ENV = """\
VULTR_API_KEY=ABCDEFGHIJKLMNOP1234
VULTR_REGION=Singapore
VULTR_PLAN=vc2-1c-1gb
VULTR_OS=Ubuntu 22.04
VULTR_INSTANCE_LABEL=wireguard-gateway
"""

SERVER_ENV = """\
HOST=203.0.113.7
USERNAME=root
PASSWORD=RootPassw0rd!
NEW_USER_SSH_PORT=2222
NEW_USER_NAME=vpnadmin
NEW_USER_PASSWORD=NewUserPassw0rd
ALERT_EMAIL=ops@example.com
CLIENT_NAME=laptop
SERVER_NAME=gw-sgp
"""


# ── deploy ──────────────────────────────────────────────────────────


@patch("wgdeploy.provisioning.vultr._api_request", new_callable=AsyncMock)
def test_deploy_malformed_region_payload_exits_1(mock_api, tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text(PROVIDER_ENV)
    mock_api.return_value = {"regions": [{"city": "Singapore"}]}

    with caplog.at_level("INFO"), pytest.raises(SystemExit) as exc_info:
        handle_deploy(None)

    assert exc_info.value.code == 1
    assert "An error occurred during deployment." in caplog.text
    assert "Error: 'id'" in caplog.text
    assert not (tmp_path / ".server.env").exists()


@patch("wgdeploy.provisioning.vultr._api_request", new_callable=AsyncMock)
def test_deploy_missing_instance_key_exits_1(mock_api, tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text(PROVIDER_ENV)
    mock_api.side_effect = [
        {"regions": [{"id": "sgp", "city": "Singapore"}]},
        {"os": [{"id": 1743, "name": "Ubuntu 22.04 LTS x64", "arch": "x64"}]},
        {"plans": [{"id": "vc2-1c-1gb", "monthly_cost": 5}]},
        {"message": "unexpected"},
    ]

    with caplog.at_level("INFO"), pytest.raises(SystemExit) as exc_info:
        handle_deploy(None)

    assert exc_info.value.code == 1
    assert "Error: 'instance'" in caplog.text


# ── install ─────────────────────────────────────────────────────────


@patch("wgdeploy.commands.install.run_install", new_callable=AsyncMock)
def test_install_connection_lost_reports_failure(mock_run, tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".server.env").write_text(SERVER_ENV)
    lost = asyncssh.ConnectionLost("Connection lost")
    mock_run.side_effect = RemoteConnectionError("root@203.0.113.7:22", lost)

    with caplog.at_level("INFO"), pytest.raises(SystemExit) as exc_info:
        handle_install(None)

    assert exc_info.value.code == 1
    assert "--- INSTALLATION FAILED ---" in caplog.text
    assert "Connection lost" in caplog.text
