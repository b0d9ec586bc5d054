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

"""Module hosting the dependency injection container."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from qtu.adapters.outbound.http import CwaConnector
from qtu.config import Config
from qtu.core.encoder import RecordEncoder
from qtu.ports.inbound.encoder import RecordEncoderPort
from qtu.ports.outbound.connector import ResultConnectorPort


def prepare_encoder() -> RecordEncoderPort:
    """Construct a record encoder using the system's secure random source."""
    return RecordEncoder()


@asynccontextmanager
async def prepare_connector(
    *, config: Config
) -> AsyncGenerator[ResultConnectorPort, None]:
    """Construct the connector to the result backend and close it after use."""
    async with CwaConnector.from_config(config=config) as connector:
        yield connector
