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

"""Derivation of salted record hashes and self-verifying shareable URLs"""

import base64
import binascii
import hashlib
import logging
import secrets
from collections.abc import Callable
from uuid import UUID

from pydantic import ValidationError

from qtu.constants import SALT_BYTES, SHARE_URL_BASE, TEST_ID_BYTES
from qtu.core import models
from qtu.ports.inbound.encoder import RecordEncoderPort

log = logging.getLogger(__name__)

RandomSource = Callable[[int], bytes]


def compute_hash(
    *, dob: str, fn: str, ln: str, timestamp: int, testid: str, salt: str
) -> str:
    """Hash the record fields in the order expected by the backend.

    The hashed string is `dob#fn#ln#timestamp#testid#salt`.
    """
    hashable = "#".join(str(value) for value in (dob, fn, ln, timestamp, testid, salt))
    return hashlib.sha256(hashable.encode("utf-8")).hexdigest()


class RecordEncoder(RecordEncoderPort):
    """Derives the record hash and the shareable URL of a quick test"""

    def __init__(self, *, random_bytes: RandomSource = secrets.token_bytes):
        """Use `random_bytes` to generate salts and test IDs. It must return the
        given number of cryptographically secure random bytes.
        """
        self._random_bytes = random_bytes

    def _new_salt(self) -> str:
        return self._random_bytes(SALT_BYTES).hex().upper()

    def _new_test_id(self) -> str:
        return str(UUID(bytes=self._random_bytes(TEST_ID_BYTES), version=4))

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
        return models.QuickTestIdentity(
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date_of_birth,
            sample_timestamp=sample_timestamp,
            test_id=test_id or self._new_test_id(),
        )

    def encode(self, *, identity: models.QuickTestIdentity) -> models.EncodedRecord:
        """Generate a fresh salt and derive hash and shareable URL for the identity.

        Encoding the same identity twice yields different hashes and URLs, so
        separate shares of one test can't be linked.
        """
        salt = self._new_salt()
        record_hash = compute_hash(
            dob=identity.date_of_birth,
            fn=identity.first_name,
            ln=identity.last_name,
            timestamp=identity.sample_timestamp,
            testid=identity.test_id,
            salt=salt,
        )
        payload = models.SharePayload(
            fn=identity.first_name,
            ln=identity.last_name,
            dob=identity.date_of_birth,
            timestamp=identity.sample_timestamp,
            testid=identity.test_id,
            salt=salt,
            hash=record_hash,
        )
        fragment = base64.b64encode(payload.model_dump_json().encode("utf-8"))
        log.debug("Encoded test record %s.", record_hash)

        return models.EncodedRecord(
            hash=record_hash,
            url=SHARE_URL_BASE + fragment.decode("ascii"),
            testid=identity.test_id,
        )

    def decode_url(self, *, url: str) -> models.SharePayload:
        """Extract the record embedded in a shareable URL.

        Raises:
        - InvalidShareUrlError if the URL has a foreign prefix or the fragment
          can't be decoded.
        """
        if not url.startswith(SHARE_URL_BASE):
            raise self.InvalidShareUrlError(
                reason=f"URL must start with {SHARE_URL_BASE}"
            )

        fragment = url[len(SHARE_URL_BASE) :]
        try:
            data = base64.b64decode(fragment, validate=True)
        except binascii.Error as err:
            raise self.InvalidShareUrlError(reason="fragment is not base64") from err

        try:
            return models.SharePayload.model_validate_json(data)
        except ValidationError as err:
            raise self.InvalidShareUrlError(
                reason="fragment does not contain a test record"
            ) from err

    def verify(self, *, payload: models.SharePayload) -> bool:
        """Return `True` if the embedded hash matches the embedded fields and salt"""
        expected = compute_hash(
            dob=payload.dob,
            fn=payload.fn,
            ln=payload.ln,
            timestamp=payload.timestamp,
            testid=payload.testid,
            salt=payload.salt,
        )
        return expected == payload.hash.lower()
