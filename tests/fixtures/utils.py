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

"""Utils for Fixture handling"""

from qtu.constants import RESULTS_PATH
from qtu.core.models import QuickTestIdentity

BASE_URL = "https://quicktest-result.example.org"
RESULTS_URL = BASE_URL + RESULTS_PATH

TEST_ID = "3fa85f64-5717-4562-b3fc-2c963f66afa6"
# 64 hex characters, the shape of a record hash
RECORD_HASH = "a" * 64


def fixed_random_bytes(size: int) -> bytes:
    """Deterministic replacement for a secure random source"""
    return bytes(range(size))


def make_identity(**kwargs) -> QuickTestIdentity:
    """Generate an identity for testing, fields can be overridden"""
    fields = {
        "first_name": "Max",
        "last_name": "Muster",
        "date_of_birth": "1990-05-02",
        "sample_timestamp": 1700000000,
    }
    fields.update(kwargs)
    return QuickTestIdentity(**fields)
