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

"""Describes the class that derives shareable records from test data"""

from abc import ABC, abstractmethod

from qtu.core import models


class RecordEncoderPort(ABC):
    """Derives the record hash and the shareable URL of a quick test"""

    class InvalidShareUrlError(ValueError):
        """Raised when a URL is not a decodable shareable record"""

        def __init__(self, *, reason: str):
            msg = f"Not a valid shareable test record URL. Reason: {reason}"
            super().__init__(msg)

    @abstractmethod
    def new_identity(
        self,
        *,
        first_name: str,
        last_name: str,
        date_of_birth: str,
        sample_timestamp: int,
        test_id: str | None = None,
    ) -> models.QuickTestIdentity:
        """Construct an identity, generating a missing test ID from the random source."""

    @abstractmethod
    def encode(self, *, identity: models.QuickTestIdentity) -> models.EncodedRecord:
        """Generate a fresh salt and derive hash and shareable URL for the identity.

        Encoding the same identity twice yields different hashes and URLs, so
        separate shares of one test can't be linked.
        """

    @abstractmethod
    def decode_url(self, *, url: str) -> models.SharePayload:
        """Extract the record embedded in a shareable URL.

        Raises:
        - InvalidShareUrlError if the URL has a foreign prefix or the fragment
          can't be decoded.
        """

    @abstractmethod
    def verify(self, *, payload: models.SharePayload) -> bool:
        """Return `True` if the embedded hash matches the embedded fields and salt"""
