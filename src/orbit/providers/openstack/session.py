"""HTTP implementation of the compute session port."""

from typing import Any, Optional

import requests

from orbit.config.schemas import ClientConfig
from orbit.domain.base.exceptions import (
    ConfigurationError,
    ResourceNotFoundError,
    TooManyItemsError,
    TransportError,
)
from orbit.domain.base.ports import ComputeSessionPort, LoggingPort
from orbit.infrastructure.adapters.logging_adapter import LoggingAdapter
from orbit.infrastructure.query.filter import Query


def _error_message(response: requests.Response) -> str:
    """Extract the error message from an API error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or ""
    if isinstance(body, dict):
        for value in body.values():
            if isinstance(value, dict) and "message" in value:
                return str(value["message"])
        if "message" in body:
            return str(body["message"])
    return response.text


class RequestsComputeSession(ComputeSessionPort):
    """
    Compute session talking to the REST API with ``requests``.

    Authentication is out of scope: a pre-issued token is sent with every
    request. No retries are made here; callers see the first failure.
    """

    def __init__(
        self,
        config: ClientConfig,
        logger: Optional[LoggingPort] = None,
        http: Optional[requests.Session] = None,
    ) -> None:
        self._config = config
        self._logger = logger or LoggingAdapter(
            "providers.openstack.session", endpoint=config.endpoints.compute_url
        )
        self._http = http or requests.Session()
        self._http.headers.update(
            {
                "X-Auth-Token": config.token,
                "Accept": "application/json",
            }
        )
        self._http.verify = config.http.verify_tls
        self._timeout = (config.http.connect_timeout, config.http.read_timeout)

        self._logger.debug(
            "Compute session created for %s (network: %s, image: %s)",
            config.endpoints.compute_url,
            config.endpoints.network_url or "unset",
            config.endpoints.image_url or "unset",
        )

    # Low level request helpers

    def _endpoint(self, service: str) -> str:
        url = getattr(self._config.endpoints, f"{service}_url")
        if not url:
            raise ConfigurationError(
                f"No endpoint configured for the {service} service",
                details={"service": service},
            )
        return url

    def _request(
        self,
        method: str,
        service: str,
        path: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        params: Optional[list[tuple[str, str]]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Optional[Any]:
        url = f"{self._endpoint(service)}/{path.lstrip('/')}"
        headers = {}
        if service == "compute" and self._config.http.compute_microversion:
            headers["OpenStack-API-Version"] = f"compute {self._config.http.compute_microversion}"

        self._logger.debug("%s %s params=%s", method, url, params or [])
        try:
            response = self._http.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            self._logger.error(
                "Request %s %s failed: %s",
                method,
                url,
                str(e),
                extra={"url": url, "error": str(e)},
            )
            raise TransportError(f"{method} {url} failed: {e}", details={"url": url})

        if response.status_code == 404:
            raise ResourceNotFoundError(resource_type, resource_id)
        if response.status_code >= 400:
            message = _error_message(response)
            self._logger.error(
                "Request %s %s returned %s: %s",
                method,
                url,
                response.status_code,
                message,
                extra={"url": url, "status_code": response.status_code},
            )
            raise TransportError(
                f"{method} {url} returned {response.status_code}: {message}",
                status_code=response.status_code,
                details={"url": url},
            )

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"{method} {url} returned invalid JSON: {e}",
                status_code=response.status_code,
                details={"url": url},
            )

    def _find(
        self,
        service: str,
        collection: str,
        key: str,
        resource_type: str,
        id_or_name: str,
        list_path: Optional[str] = None,
    ) -> dict[str, Any]:
        """Resolve a resource by id, falling back to a unique name match."""
        try:
            body = self._request("GET", service, f"{collection}/{id_or_name}", resource_type, id_or_name)
            return body[key] if key in body else body
        except ResourceNotFoundError:
            pass

        body = self._request(
            "GET",
            service,
            list_path or collection,
            resource_type,
            id_or_name,
            params=[("name", id_or_name)],
        )
        items = [item for item in body.get(collection.split("/")[-1], []) if item.get("name") == id_or_name]
        if not items:
            raise ResourceNotFoundError(resource_type, id_or_name)
        if len(items) > 1:
            raise TooManyItemsError(
                resource_type, f"More than one {resource_type} is named {id_or_name}"
            )
        return items[0]

    # ComputeSessionPort

    def get_server(self, server_id: str) -> dict[str, Any]:
        return self._request("GET", "compute", f"servers/{server_id}", "server", server_id)["server"]

    def list_servers(self, query: Query) -> list[dict[str, Any]]:
        return self._request("GET", "compute", "servers", "server", params=query.to_params())["servers"]

    def list_servers_detail(self, query: Query) -> list[dict[str, Any]]:
        return self._request(
            "GET", "compute", "servers/detail", "server", params=query.to_params()
        )["servers"]

    def create_server(self, request: dict[str, Any]) -> dict[str, Any]:
        body = self._request("POST", "compute", "servers", "server", json=request)
        self._logger.info("Created server %s", body["server"]["id"])
        return body["server"]

    def delete_server(self, server_id: str) -> None:
        self._request("DELETE", "compute", f"servers/{server_id}", "server", server_id)

    def server_action(
        self, server_id: str, action: str, args: Optional[dict[str, Any]] = None
    ) -> None:
        self._request(
            "POST",
            "compute",
            f"servers/{server_id}/action",
            "server",
            server_id,
            json={action: args},
        )

    def get_flavor(self, id_or_name: str) -> dict[str, Any]:
        flavor = self._find("compute", "flavors", "flavor", "flavor", id_or_name, "flavors/detail")
        if "extra_specs" not in flavor:
            specs = self._request(
                "GET", "compute", f"flavors/{flavor['id']}/os-extra_specs", "flavor", flavor["id"]
            )
            flavor = dict(flavor, extra_specs=(specs or {}).get("extra_specs", {}))
        return flavor

    def get_image(self, id_or_name: str) -> dict[str, Any]:
        return self._find("image", "images", "image", "image", id_or_name)

    def get_keypair(self, name: str) -> dict[str, Any]:
        return self._request("GET", "compute", f"os-keypairs/{name}", "key pair", name)["keypair"]

    def get_network(self, id_or_name: str) -> dict[str, Any]:
        return self._find("network", "networks", "network", "network", id_or_name)

    def get_port(self, id_or_name: str) -> dict[str, Any]:
        return self._find("network", "ports", "port", "port", id_or_name)
