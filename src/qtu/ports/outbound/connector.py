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

"""Interface for submitting test results to the result backend"""

from abc import ABC, abstractmethod


class ResultConnectorPort(ABC):
    """Submits a single test result per call. Nothing is retried."""

    class ConfigurationError(RuntimeError):
        """Raised when the connector can't be set up from the given parameters or
        credential files
        """

        def __init__(self, *, reason: str):
            msg = f"Invalid connector configuration: {reason}"
            super().__init__(msg)

    class BackendError(RuntimeError):
        """Raised when the backend reports an error in its response payload"""

        def __init__(self, *, detail: str):
            self.detail = detail
            msg = f"The result backend reported an error: {detail}"
            super().__init__(msg)

    class TransportError(RuntimeError):
        """Raised when the request fails or returns an unexpected response code"""

        def __init__(self, *, url: str, response_code: int | None = None):
            self.response_code = response_code
            if response_code is None:
                msg = f"The request to {url} failed."
            else:
                msg = f"The request to {url} failed with response code {response_code}"
            super().__init__(msg)

    @abstractmethod
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
