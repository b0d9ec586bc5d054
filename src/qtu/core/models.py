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

"""Models for internal representation and for the data exchanged with the backend"""

from datetime import UTC, date, datetime
from enum import IntEnum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResultCode(IntEnum):
    """Result codes understood by the CWA backend"""

    NEGATIVE = 6
    POSITIVE = 7
    INVALID = 8


class QuickTestIdentity(BaseModel):
    """The personal data of a test that a shareable record is derived from.

    Name lengths (at most 80 characters each) and the date of birth format
    (YYYY-MM-DD) are obligations of the caller and are not checked here.
    """

    model_config = ConfigDict(frozen=True)

    first_name: str = Field(..., description="First name, UTF-8")
    last_name: str = Field(..., description="Last name, UTF-8")
    date_of_birth: str = Field(
        ..., description="Date of birth as YYYY-MM-DD", examples=["1990-05-02"]
    )
    sample_timestamp: int = Field(
        ..., description="Time the sample was taken, in unix epoch seconds (UTC)"
    )
    test_id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Identifier of the test, a random UUID is used if not given",
    )

    @field_validator("test_id", mode="before")
    @classmethod
    def generate_missing_test_id(cls, value):
        """Treat an empty test ID like a missing one."""
        return value or str(uuid4())

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def render_date_of_birth(cls, value):
        """Render dates in ISO format and pass anything else through as text."""
        if isinstance(value, datetime):
            value = value.date()
        if isinstance(value, date):
            return value.isoformat()
        return value if isinstance(value, str) else str(value)

    @field_validator("sample_timestamp", mode="before")
    @classmethod
    def convert_sample_time(cls, value):
        """Accept datetimes, treating naive ones as UTC."""
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=UTC)
            return int(value.timestamp())
        return value


class SharePayload(BaseModel):
    """The content of the fragment of a shareable URL.

    Field names and their order are read by the scanning app.
    """

    fn: str
    ln: str
    dob: str
    timestamp: int
    testid: str
    salt: str
    hash: str


class EncodedRecord(BaseModel):
    """The outcome of encoding a QuickTestIdentity"""

    hash: str = Field(..., description="Salted SHA-256 hash, used as record ID")
    url: str = Field(..., description="Self-verifying shareable URL")
    testid: str = Field(..., description="The test ID embedded in the record")


class QuickTestResult(BaseModel):
    """A single test result as sent to the backend"""

    id: str = Field(..., description="The record hash")
    result: int = Field(..., description="6 negative, 7 positive, 8 invalid")
    sc: int | None = Field(
        default=None, description="Time of evaluation in unix epoch seconds (UTC)"
    )


class QuickTestResultList(BaseModel):
    """The request body accepted by the backend's results endpoint"""

    model_config = ConfigDict(populate_by_name=True)

    test_results: list[QuickTestResult] = Field(..., alias="testResults")
