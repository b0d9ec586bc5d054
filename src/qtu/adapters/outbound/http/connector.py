# Copyright 2021 - 2025 Universität Tübingen, DKFZ, EMBL, and Universität zu Köln
# for the German Human Genome-Phenome Archive (GHGA)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Provides the mutual TLS client of the CWA result backend"""

import json
import logging
import ssl
from pathlib import Path
from typing import Self

import httpx
from opentelemetry import trace
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

from qtu.constants import RESULTS_PATH, SERVICE_NAME
from qtu.core import models
from qtu.ports.outbound.connector import ResultConnectorPort

log = logging.getLogger(__name__)
tracer = trace.get_tracer(SERVICE_NAME)


class CwaConnectorConfig(BaseSettings):
    """Configuration for the connection to the CWA result backend"""

    cwa_base_url: str = Field(
        default=...,
        min_length=1,
        examples=["https://quicktest-result.coronawarn.app"],
        description="Base URL of the CWA result backend",
    )
    cwa_cert_path: Path = Field(
        default=...,
        examples=["./client.crt"],
        description="Path to the PEM encoded client certificate",
    )
    cwa_key_path: Path = Field(
        default=...,
        examples=["./client.key"],
        description="Path to the PEM encoded private key of the client certificate",
    )
    cwa_key_passphrase: SecretStr | None = Field(
        default=None,
        description="Passphrase of the private key. Only needed if the key is encrypted.",
    )
    cwa_ca_bundle_path: Path | None = Field(
        default=None,
        examples=["/etc/ssl/certs/cwa_bundle.pem"],
        description="CA bundle used to verify the backend instead of the system CAs."
        + " The server certificate is verified in any case.",
    )
    cwa_timeout: float | None = Field(
        default=None,
        examples=[60],
        description="Timeout in seconds for requests to the backend."
        + " If not set, requests wait indefinitely.",
    )

    @field_validator("cwa_cert_path", "cwa_key_path", "cwa_ca_bundle_path")
    @classmethod
    def validate_file_exists(cls, value: Path | None) -> Path | None:
        """Check that a configured credential file exists."""
        if value is not None and not value.is_file():
            raise ValueError(f"File not found at: {value}")
        return value


class CwaConnector(ResultConnectorPort):
    """Adapter wrapping an httpx.AsyncClient authenticated with a client certificate"""

    def __init__(  # noqa: PLR0913
        self,
        *,
        base_url: str | None,
        cert_path: Path | str | None,
        key_path: Path | str | None,
        passphrase: str | None = None,
        ca_bundle_path: Path | str | None = None,
        timeout: float | None = None,
    ):
        """Load the client credentials and set up the client.

        Nothing is sent over the network here. Credentials are read once, so
        rotating them requires a new connector.
        """
        for name, value in (
            ("base_url", base_url),
            ("cert_path", cert_path),
            ("key_path", key_path),
        ):
            if not value:
                raise self.ConfigurationError(reason=f"{name} must be provided")

        self._results_url = str(base_url).rstrip("/") + RESULTS_PATH
        ssl_context = self._create_ssl_context(
            cert_path=Path(cert_path),  # type: ignore[arg-type]
            key_path=Path(key_path),  # type: ignore[arg-type]
            passphrase=passphrase,
            ca_bundle_path=Path(ca_bundle_path) if ca_bundle_path else None,
        )
        self._client = httpx.AsyncClient(
            verify=ssl_context, timeout=httpx.Timeout(timeout)
        )

    @classmethod
    def from_config(cls, *, config: CwaConnectorConfig) -> Self:
        """Construct the connector from the service configuration"""
        passphrase = config.cwa_key_passphrase
        return cls(
            base_url=config.cwa_base_url,
            cert_path=config.cwa_cert_path,
            key_path=config.cwa_key_path,
            passphrase=passphrase.get_secret_value() if passphrase else None,
            ca_bundle_path=config.cwa_ca_bundle_path,
            timeout=config.cwa_timeout,
        )

    @classmethod
    def _create_ssl_context(
        cls,
        *,
        cert_path: Path,
        key_path: Path,
        passphrase: str | None,
        ca_bundle_path: Path | None,
    ) -> ssl.SSLContext:
        """Create a context that presents the client certificate and always
        verifies the certificate chain and host name of the server.
        """
        try:
            context = ssl.create_default_context(
                purpose=ssl.Purpose.SERVER_AUTH,
                cafile=str(ca_bundle_path) if ca_bundle_path else None,
            )
        except OSError as err:
            raise cls.ConfigurationError(
                reason=f"CA bundle at {ca_bundle_path} can't be loaded"
            ) from err

        try:
            # a callable keeps OpenSSL from prompting when the key is encrypted
            context.load_cert_chain(
                certfile=cert_path,
                keyfile=key_path,
                password=lambda: passphrase or "",
            )
        except OSError as err:
            log.debug(
                "Error when loading client certificate %s and key %s: %s",
                cert_path,
                key_path,
                err,
            )
            raise cls.ConfigurationError(
                reason="client certificate or key can't be loaded,"
                + " check the files and the passphrase"
            ) from err

        return context

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client"""
        await self._client.aclose()

    @staticmethod
    def _get_error_detail(response: httpx.Response) -> str | None:
        """Return the error reported in the response payload, if any"""
        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError:
            return None
        if not isinstance(body, dict) or not body.get("error"):
            return None
        error = body["error"]
        return error if isinstance(error, str) else json.dumps(error)

    @tracer.start_as_current_span("CwaConnector.submit")
    async def submit(
        self, *, record_hash: str, result: int, evaluated_at: int | None = None
    ) -> int:
        """Send the result for the record identified by `record_hash`.

        Returns the response code. Success is signalled by exactly
        `SUCCESS_STATUS`, not by any 2xx code.

        Raises:
        - BackendError if the response payload carries an error.
        - TransportError if the request fails or the response code is not 2xx.
        """
        body = models.QuickTestResultList(
            test_results=[
                models.QuickTestResult(
                    id=record_hash, result=int(result), sc=evaluated_at
                )
            ]
        )

        try:
            response = await self._client.post(
                self._results_url,
                json=body.model_dump(by_alias=True, exclude_none=True),
            )
        except httpx.RequestError as err:
            log.error(
                "Request to submit the result for %s failed: %s", record_hash, err
            )
            raise self.TransportError(url=self._results_url) from err

        status_code = response.status_code
        detail = self._get_error_detail(response)
        if detail is not None:
            error = self.BackendError(detail=detail)
            log.error(error, extra={"record_hash": record_hash})
            raise error

        if not response.is_success:
            error = self.TransportError(
                url=self._results_url, response_code=status_code
            )
            log.error(error, extra={"record_hash": record_hash})
            raise error

        log.info(
            "Submitted result for %s with response code %d.", record_hash, status_code
        )
        return status_code
