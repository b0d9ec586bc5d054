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

"""Entrypoint of the package"""

import asyncio
from typing import Annotated

import typer

from qtu.constants import SUCCESS_STATUS
from qtu.core.models import ResultCode
from qtu.main import prepare_record, submit_result, verify_url
from qtu.ports.inbound.encoder import RecordEncoderPort

cli = typer.Typer()


def parse_result(value: str) -> int:
    """Accept a result code or its name, e.g. '7' or 'positive'."""
    if value.isdigit():
        return int(value)
    try:
        return ResultCode[value.upper()]
    except KeyError as err:
        raise typer.BadParameter(
            f"Use one of {', '.join(code.name.lower() for code in ResultCode)}"
            + " or a numeric code."
        ) from err


@cli.command(name="prepare")
def sync_prepare(
    first_name: str,
    last_name: str,
    date_of_birth: Annotated[str, typer.Argument(help="Formatted as YYYY-MM-DD")],
    sample_timestamp: Annotated[
        int, typer.Argument(help="Time of sampling in unix epoch seconds")
    ],
    test_id: Annotated[
        str | None, typer.Option(help="Test ID to use instead of a random UUID")
    ] = None,
):
    """Print the hash, shareable URL and test ID of a test as JSON."""
    record = prepare_record(
        first_name=first_name,
        last_name=last_name,
        date_of_birth=date_of_birth,
        sample_timestamp=sample_timestamp,
        test_id=test_id,
    )
    typer.echo(record.model_dump_json())


@cli.command(name="submit")
def sync_submit(
    record_hash: str,
    result: Annotated[
        int,
        typer.Argument(
            parser=parse_result, help="negative (6), positive (7) or invalid (8)"
        ),
    ],
    evaluated_at: Annotated[
        int | None, typer.Option(help="Time of evaluation in unix epoch seconds")
    ] = None,
):
    """Submit a test result to the configured backend."""
    status_code = asyncio.run(
        submit_result(
            record_hash=record_hash, result=result, evaluated_at=evaluated_at
        )
    )
    typer.echo(status_code)
    if status_code != SUCCESS_STATUS:
        raise typer.Exit(code=1)


@cli.command(name="verify")
def sync_verify(url: str):
    """Check that the hash embedded in a shareable URL is valid."""
    try:
        payload = verify_url(url=url)
    except RecordEncoderPort.InvalidShareUrlError as err:
        raise typer.BadParameter(str(err), param_hint="URL") from err
    if payload is None:
        typer.echo("Hash does not match the embedded record.")
        raise typer.Exit(code=1)
    typer.echo(f"Valid record for test {payload.testid}.")
