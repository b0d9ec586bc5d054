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

"""Top-level service functions"""

from hexkit.log import configure_logging

from qtu.config import Config
from qtu.core import models
from qtu.inject import prepare_connector, prepare_encoder


def prepare_record(
    *,
    first_name: str,
    last_name: str,
    date_of_birth: str,
    sample_timestamp: int,
    test_id: str | None = None,
) -> models.EncodedRecord:
    """Derive the record hash and shareable URL for a test."""
    encoder = prepare_encoder()
    identity = encoder.new_identity(
        first_name=first_name,
        last_name=last_name,
        date_of_birth=date_of_birth,
        sample_timestamp=sample_timestamp,
        test_id=test_id,
    )
    return encoder.encode(identity=identity)


def verify_url(*, url: str) -> models.SharePayload | None:
    """Return the record embedded in the URL if its hash is valid, else None."""
    encoder = prepare_encoder()
    payload = encoder.decode_url(url=url)
    return payload if encoder.verify(payload=payload) else None


async def submit_result(
    *, record_hash: str, result: int, evaluated_at: int | None = None
) -> int:
    """Submit a test result to the backend configured for the service."""
    config = Config()  # type: ignore
    configure_logging(config=config)

    async with prepare_connector(config=config) as connector:
        return await connector.submit(
            record_hash=record_hash, result=result, evaluated_at=evaluated_at
        )
