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

"""Unit tests for the derivation of record hashes and shareable URLs"""

import base64
import hashlib
import json
from uuid import UUID

import pytest

from qtu.constants import SHARE_URL_BASE
from qtu.core.encoder import RecordEncoder, compute_hash
from tests.fixtures.utils import TEST_ID, fixed_random_bytes, make_identity

FIXED_SALT = "000102030405060708090A0B0C0D0E0F"


def decode_fragment(url: str) -> bytes:
    """Return the raw JSON embedded in a shareable URL"""
    return base64.b64decode(url.removeprefix(SHARE_URL_BASE))


def test_encode_with_fixed_random_source():
    """Test that hash and salt are derived exactly as the backend expects"""
    encoder = RecordEncoder(random_bytes=fixed_random_bytes)
    identity = make_identity(test_id=TEST_ID)

    record = encoder.encode(identity=identity)

    hashable = f"1990-05-02#Max#Muster#1700000000#{TEST_ID}#{FIXED_SALT}"
    assert record.hash == hashlib.sha256(hashable.encode("utf-8")).hexdigest()
    assert record.testid == TEST_ID

    expected_json = (
        '{"fn":"Max","ln":"Muster","dob":"1990-05-02","timestamp":1700000000,'
        + f'"testid":"{TEST_ID}","salt":"{FIXED_SALT}","hash":"{record.hash}"}}'
    )
    assert decode_fragment(record.url) == expected_json.encode("utf-8")


def test_encode_example_identity():
    """Test the shape of a record encoded with the default random source"""
    encoder = RecordEncoder()
    identity = make_identity()

    record = encoder.encode(identity=identity)

    assert len(record.hash) == 64
    int(record.hash, 16)
    assert record.hash == record.hash.lower()
    assert record.url.startswith("https://s.coronawarn.app?v=1#")
    assert UUID(record.testid).version == 4

    payload = json.loads(decode_fragment(record.url))
    assert list(payload) == ["fn", "ln", "dob", "timestamp", "testid", "salt", "hash"]
    assert payload["fn"] == "Max"
    assert payload["ln"] == "Muster"
    assert payload["dob"] == "1990-05-02"
    assert payload["timestamp"] == 1700000000
    assert payload["testid"] == record.testid
    assert payload["hash"] == record.hash
    assert len(payload["salt"]) == 32
    assert payload["salt"] == payload["salt"].upper()


def test_round_trip_verification():
    """Test that the hash can be recomputed from the fields embedded in the URL"""
    encoder = RecordEncoder()
    record = encoder.encode(identity=make_identity())

    payload = encoder.decode_url(url=record.url)

    assert payload.hash == record.hash
    assert encoder.verify(payload=payload)
    assert record.hash == compute_hash(
        dob=payload.dob,
        fn=payload.fn,
        ln=payload.ln,
        timestamp=payload.timestamp,
        testid=payload.testid,
        salt=payload.salt,
    )


def test_salt_is_fresh_for_every_call():
    """Encoding the same identity twice must not produce linkable records"""
    encoder = RecordEncoder()
    identity = make_identity()

    first = encoder.encode(identity=identity)
    second = encoder.encode(identity=identity)

    assert first.hash != second.hash
    assert first.url != second.url
    assert first.testid == second.testid == identity.test_id


def test_random_source_is_asked_for_128_bits():
    """Test that the salt is generated from 16 random bytes"""
    requested: list[int] = []

    def random_bytes(size: int) -> bytes:
        requested.append(size)
        return fixed_random_bytes(size)

    RecordEncoder(random_bytes=random_bytes).encode(identity=make_identity())
    assert requested == [16]


def test_supplied_test_id_is_kept():
    """Test that a given test ID is embedded as-is"""
    encoder = RecordEncoder()
    record = encoder.encode(identity=make_identity(test_id="not-a-uuid"))

    assert record.testid == "not-a-uuid"
    assert encoder.decode_url(url=record.url).testid == "not-a-uuid"


@pytest.mark.parametrize("test_id", [None, ""])
def test_new_identity_draws_test_id_from_random_source(test_id):
    """Test that a missing test ID is a v4 UUID built from the injected source"""
    requested: list[int] = []

    def random_bytes(size: int) -> bytes:
        requested.append(size)
        return fixed_random_bytes(size)

    encoder = RecordEncoder(random_bytes=random_bytes)
    identity = encoder.new_identity(
        first_name="Max",
        last_name="Muster",
        date_of_birth="1990-05-02",
        sample_timestamp=1700000000,
        test_id=test_id,
    )

    assert identity.test_id == "00010203-0405-4607-8809-0a0b0c0d0e0f"
    assert UUID(identity.test_id).version == 4
    assert requested == [16]

    record = encoder.encode(identity=identity)
    hashable = (
        "1990-05-02#Max#Muster#1700000000#"
        + f"00010203-0405-4607-8809-0a0b0c0d0e0f#{FIXED_SALT}"
    )
    assert record.hash == hashlib.sha256(hashable.encode("utf-8")).hexdigest()


def test_new_identity_keeps_supplied_test_id():
    """Test that a given test ID doesn't consume randomness"""
    requested: list[int] = []

    def random_bytes(size: int) -> bytes:
        requested.append(size)
        return fixed_random_bytes(size)

    identity = RecordEncoder(random_bytes=random_bytes).new_identity(
        first_name="Max",
        last_name="Muster",
        date_of_birth="1990-05-02",
        sample_timestamp=1700000000,
        test_id=TEST_ID,
    )

    assert identity.test_id == TEST_ID
    assert requested == []


@pytest.mark.parametrize("date_of_birth", ["02.05.1990", "", "1990-5-2"])
def test_date_of_birth_is_passed_through(date_of_birth: str):
    """The date of birth is not validated, a malformed value ends up in the record"""
    encoder = RecordEncoder()
    record = encoder.encode(identity=make_identity(date_of_birth=date_of_birth))

    payload = encoder.decode_url(url=record.url)
    assert payload.dob == date_of_birth
    assert encoder.verify(payload=payload)


def test_names_are_neither_validated_nor_truncated():
    """Test long and non-ASCII names end up unchanged and unescaped in the record"""
    encoder = RecordEncoder()
    long_name = "Ö" * 100
    record = encoder.encode(
        identity=make_identity(first_name="Jürgen", last_name=long_name)
    )

    raw = decode_fragment(record.url)
    assert "Jürgen".encode() in raw
    payload = encoder.decode_url(url=record.url)
    assert payload.ln == long_name
    assert encoder.verify(payload=payload)


@pytest.mark.parametrize(
    "field, value",
    [
        ("fn", "Moritz"),
        ("ln", "Mustermann"),
        ("dob", "1990-05-03"),
        ("timestamp", 1700000001),
        ("testid", TEST_ID),
        ("salt", FIXED_SALT),
    ],
)
def test_verify_detects_tampering(field: str, value):
    """Changing any embedded field invalidates the record"""
    encoder = RecordEncoder()
    record = encoder.encode(identity=make_identity())
    payload = encoder.decode_url(url=record.url)

    tampered = payload.model_copy(update={field: value})
    assert not encoder.verify(payload=tampered)


@pytest.mark.parametrize(
    "url",
    [
        "https://example.org?v=1#e30=",
        "https://s.coronawarn.app?v=2#e30=",
        SHARE_URL_BASE + "not base64!",
        SHARE_URL_BASE + base64.b64encode(b"no json").decode(),
        SHARE_URL_BASE + base64.b64encode(b'{"fn": "Max"}').decode(),
    ],
)
def test_decode_invalid_url(url: str):
    """Test that URLs not carrying a test record are rejected"""
    encoder = RecordEncoder()
    with pytest.raises(encoder.InvalidShareUrlError):
        encoder.decode_url(url=url)
