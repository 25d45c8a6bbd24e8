"""Signed client for the EcoFlow cloud device API."""

from __future__ import annotations

import hashlib
import hmac
import random
import time
from typing import Any, Dict, List, Mapping, Optional

import httpx

from settings import DEFAULT_API_HOST

DEVICE_LIST_PATH = "/iot-open/sign/device/list"
DEVICE_QUOTA_ALL_PATH = "/iot-open/sign/device/quota/all"
DEVICE_QUOTA_PATH = "/iot-open/sign/device/quota"

PLUG_SWITCH_CMD = "WN511_SOCKET_SET_PLUG_SWITCH_MESSAGE"


class DeviceAPIError(RuntimeError):
    """The device API rejected a request or answered with an error code."""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code


def flatten_params(params: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    """Flatten nested params into the dotted keys used for request signing."""
    flat: Dict[str, str] = {}
    for key, value in params.items():
        name = f"{prefix}.{key}" if prefix else str(key)
        _flatten_value(flat, name, value)
    return flat


def _flatten_value(flat: Dict[str, str], name: str, value: Any) -> None:
    if isinstance(value, Mapping):
        flat.update(flatten_params(value, name))
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten_value(flat, f"{name}[{index}]", item)
    elif value is not None:
        flat[name] = str(value)


def build_sign_payload(
    params: Mapping[str, Any], access_key: str, nonce: str, timestamp: str
) -> str:
    flat = flatten_params(params)
    parts = [f"{key}={flat[key]}" for key in sorted(flat)]
    parts.extend(
        [f"accessKey={access_key}", f"nonce={nonce}", f"timestamp={timestamp}"]
    )
    return "&".join(parts)


def sign_request(
    params: Mapping[str, Any],
    access_key: str,
    secret_key: str,
    nonce: str,
    timestamp: str,
) -> str:
    payload = build_sign_payload(params, access_key, nonce, timestamp)
    return hmac.new(
        secret_key.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256
    ).hexdigest()


class EcoFlowClient:
    """Minimal async HTTP client for reading and switching a smart plug."""

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        host: str = DEFAULT_API_HOST,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._access_key = access_key
        self._secret_key = secret_key
        self._client = httpx.AsyncClient(
            base_url=host.rstrip("/"), timeout=timeout, transport=transport
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list_devices(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", DEVICE_LIST_PATH)
        return list(data or [])

    async def get_properties(self, serial: str) -> Dict[str, Any]:
        data = await self._request("GET", DEVICE_QUOTA_ALL_PATH, params={"sn": serial})
        if not isinstance(data, dict):
            raise DeviceAPIError(f"Unexpected property payload for device {serial}.")
        return data

    async def set_switch(self, serial: str, on: bool) -> None:
        body = {
            "sn": serial,
            "cmdCode": PLUG_SWITCH_CMD,
            "params": {"plugSwitch": 1 if on else 0},
        }
        await self._request("PUT", DEVICE_QUOTA_PATH, body=body)

    def _signed_headers(self, params: Mapping[str, Any]) -> Dict[str, str]:
        nonce = f"{random.randint(100000, 999999)}"
        timestamp = str(int(time.time() * 1000))
        return {
            "accessKey": self._access_key,
            "nonce": nonce,
            "timestamp": timestamp,
            "sign": sign_request(
                params, self._access_key, self._secret_key, nonce, timestamp
            ),
        }

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = self._signed_headers(body if body is not None else params or {})
        try:
            response = await self._client.request(
                method, path, params=params, json=body, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DeviceAPIError(
                f"Device API request {method} {path} failed with status "
                f"{exc.response.status_code}."
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise DeviceAPIError(f"Device API returned invalid JSON for {path}.") from exc

        if not isinstance(payload, dict):
            raise DeviceAPIError(f"Unexpected response payload for {path}.")

        code = str(payload.get("code", ""))
        if code != "0":
            message = payload.get("message") or "unknown error"
            raise DeviceAPIError(f"Device API error {code}: {message}", code=code)
        return payload.get("data")
