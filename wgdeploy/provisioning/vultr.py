"""Vultr provider: look up region/OS/plan and create instances via the Vultr v2 REST API."""

import logging

import httpx

from wgdeploy.provisioning.readiness import wait_until_ready
from wgdeploy.provisioning.types import InstanceState
from wgdeploy.redact import register_secret

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.vultr.com/v2"


# ── API helpers ───────────────────────────────────────────────────


async def _api_request(method, path, api_key, api_url=DEFAULT_API_URL, params=None, data=None):
    """Make an authenticated Vultr API request and return the parsed JSON body."""
    url = f"{api_url}{path}"
    headers = {"Authorization": f"Bearer {api_key}"}
    if data is not None:
        headers["Content-Type"] = "application/json"
    async with httpx.AsyncClient() as client:
        resp = await client.request(method, url, params=params, json=data, headers=headers, timeout=60)
    resp.raise_for_status()
    return resp.json()


def api_error_message(error):
    """Extract Vultr's ``error`` field from an HTTP error, falling back to its text."""
    response = getattr(error, "response", None)
    if response is not None:
        try:
            message = response.json().get("error")
        except ValueError:
            message = None
        if message:
            return message
    return str(error)


async def get_region(api_key, region_city, api_url=DEFAULT_API_URL):
    """Find a region by city name (case-insensitive)."""
    logger.info(f"> Searching for region: {region_city}...")
    result = await _api_request("GET", "/regions", api_key, api_url)
    for region in result.get("regions", []):
        if region.get("city", "").lower() == region_city.lower():
            logger.info(f"  Found region: {region['id']}")
            return region
    raise ValueError(f'Region "{region_city}" not found. Please check the city name.')


async def get_os(api_key, os_name, api_url=DEFAULT_API_URL):
    """Find an x64 OS whose name contains *os_name* (case-insensitive)."""
    logger.info(f"> Searching for OS: {os_name}...")
    result = await _api_request("GET", "/os", api_key, api_url)
    for os_entry in result.get("os", []):
        if os_name.lower() in os_entry.get("name", "").lower() and os_entry.get("arch") == "x64":
            logger.info(f"  Found OS: {os_entry['name']} (ID: {os_entry['id']})")
            return os_entry
    raise ValueError(f'OS matching "{os_name}" not found or not available in x64 architecture.')


async def get_plan(api_key, plan_id, region, api_url=DEFAULT_API_URL):
    """Find a vc2 plan by ID among those offered in *region*."""
    logger.info(f"> Searching for plan: {plan_id} in {region['city']}...")
    result = await _api_request("GET", "/plans", api_key, api_url, params={"type": "vc2", "region": region["id"]})
    for plan in result.get("plans", []):
        if plan.get("id") == plan_id:
            logger.info(f"  Found plan: {plan['id']} (${plan.get('monthly_cost')}/mo)")
            return plan
    raise ValueError(f'Plan "{plan_id}" not found or not available in the {region["city"]} region.')


async def get_instance(api_key, instance_id, api_url=DEFAULT_API_URL):
    """GET /instances/{id} as an InstanceState."""
    result = await _api_request("GET", f"/instances/{instance_id}", api_key, api_url)
    return InstanceState.from_api(result["instance"])


async def _create_instance(api_key, label, region_id, plan_id, os_id, api_url=DEFAULT_API_URL):
    """POST /instances."""
    data = {"label": label, "region": region_id, "plan": plan_id, "os_id": os_id}
    result = await _api_request("POST", "/instances", api_key, api_url, data=data)
    return InstanceState.from_api(result["instance"])


def _log_instance_details(instance):
    logger.info("")
    logger.info("Instance Details:")
    logger.info(f"> ID: {instance.id}")
    logger.info(f"> IP Address: {instance.main_ip}")
    if instance.default_password:
        logger.info(f"> Temporary Root Password: {instance.default_password}")
    logger.info(f"> Status: {instance.status}")


# ── Core logic ─────────────────────────────────────────────────────


async def create_instance(config, sleep=None):
    """Create a Vultr instance and wait until it is active with a public IP.

    Args:
        config: ``VultrConfig`` with credentials, lookup names and poll settings.
        sleep: optional sleep override passed to the readiness poller.

    Returns:
        The ready ``InstanceState``.
    """
    region = await get_region(config.api_key, config.region, config.api_url)
    os_entry = await get_os(config.api_key, config.os, config.api_url)
    plan = await get_plan(config.api_key, config.plan, region, config.api_url)

    logger.info("")
    logger.info("── Deploying New Server ──")
    logger.info(f"OS:     {os_entry['name']}")
    logger.info(f"Plan:   {plan['id']}")
    logger.info(f"Region: {region['city']}")
    logger.info("")

    instance = await _create_instance(config.api_key, config.label, region["id"], plan["id"], os_entry["id"], config.api_url)
    # The root password is only returned by the create call.
    root_password = instance.default_password
    if root_password:
        register_secret(root_password)
    logger.info(f"Instance creation initiated (id={instance.id}).")

    async def fetch_state(instance_id):
        return await get_instance(config.api_key, instance_id, config.api_url)

    poll_kwargs = {"max_attempts": config.poll_max_attempts, "interval": config.poll_interval}
    if sleep is not None:
        poll_kwargs["sleep"] = sleep
    instance = await wait_until_ready(fetch_state, instance.id, **poll_kwargs)
    if instance.default_password is None:
        instance.default_password = root_password

    _log_instance_details(instance)
    return instance
