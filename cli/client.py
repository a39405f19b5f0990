from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the dashboard service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.request_timeout)

    def close(self) -> None:
        self._client.close()

    def list_sensors(self) -> List[Dict[str, Any]]:
        return self._get("/sensors")

    def get_dashboard(self) -> List[Dict[str, Any]]:
        return self._get("/dashboard")

    def get_current(self, sensor_type: str) -> Dict[str, Any]:
        return self._get(f"/sensors/{sensor_type}/current")

    def get_chart(self, sensor_type: str, granularity: Optional[str] = None) -> Dict[str, Any]:
        params = {"granularity": granularity} if granularity else None
        return self._get(f"/sensors/{sensor_type}/chart", params=params)

    def get_readings(self, sensor_type: str, page: int = 1) -> Dict[str, Any]:
        return self._get(f"/sensors/{sensor_type}/readings", params={"page": page})

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = self._client.get(path, params=params)
            if response.status_code == 404:
                raise typer.BadParameter(self._detail(response) or f"{path} was not found.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _detail(response: httpx.Response) -> Optional[str]:
        try:
            detail = response.json().get("detail")
        except (ValueError, AttributeError):
            return response.text.strip() or None
        return detail if isinstance(detail, str) else None

    @classmethod
    def _handle_http_error(cls, exc: httpx.HTTPStatusError) -> None:
        detail = cls._detail(exc.response)
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
