from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple

import httpx
import typer

from cli.config import CLIConfig

_FILENAME_PATTERN = re.compile(r'filename="?([^";]+)"?')


class ApiClient:
    """HTTP client for the setpoint builder service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def get_form(self) -> Dict[str, Any]:
        return self._request("GET", "/form").json()

    def set_system_id(self, system_id: str) -> Dict[str, Any]:
        return self._request("PUT", "/form/system-id", json={"system_id": system_id}).json()

    def set_compact(self, compact: bool) -> Dict[str, Any]:
        return self._request("PUT", "/form/compact", json={"compact": compact}).json()

    def add_group(self) -> Dict[str, Any]:
        return self._request("POST", "/form/groups").json()

    def quick_add(self, preset: str) -> Dict[str, Any]:
        return self._request("POST", f"/form/groups/presets/{preset}").json()

    def remove_group(self, group_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/form/groups/{group_id}").json()

    def set_temperature(self, group_id: str, temperature: str) -> Dict[str, Any]:
        return self._request(
            "PUT", f"/form/groups/{group_id}/temperature", json={"temperature": temperature}
        ).json()

    def add_humidity(self, group_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/form/groups/{group_id}/humidities").json()

    def set_humidity(self, group_id: str, humidity_id: str, nominal: str) -> Dict[str, Any]:
        return self._request(
            "PUT", f"/form/groups/{group_id}/humidities/{humidity_id}", json={"nominal": nominal}
        ).json()

    def remove_humidity(self, group_id: str, humidity_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/form/groups/{group_id}/humidities/{humidity_id}").json()

    def load_sample(self) -> Dict[str, Any]:
        return self._request("POST", "/form/sample").json()

    def reset(self) -> Dict[str, Any]:
        return self._request("POST", "/form/reset").json()

    def get_export(self, compact: Optional[bool] = None) -> str:
        params = {} if compact is None else {"compact": str(compact).lower()}
        return self._request("GET", "/export", params=params).text

    def download(self) -> Tuple[str, str]:
        """Return the exported document and the server-suggested filename."""
        response = self._request("GET", "/export/download")
        disposition = response.headers.get("content-disposition", "")
        match = _FILENAME_PATTERN.search(disposition)
        if match is None:
            raise typer.BadParameter("Unexpected response when downloading: no filename provided.")
        return response.text, match.group(1)

    def run_self_checks(self) -> Dict[str, Any]:
        return self._request("POST", "/self-checks").json()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
