"""Shared fixtures: deposit vectors, signed exits, a fake beacon node and a fake signer."""

import json
import stat
from contextlib import asynccontextmanager
from pathlib import Path

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from validator_tools.crypto import pubkey_from_privkey, sign
from validator_tools.spec.domain import compute_signing_root
from validator_tools.spec.network_config import HOLESKY
from validator_tools.spec.types import VoluntaryExit
from validator_tools.spec.verification import voluntary_exit_domain

WITHDRAWAL_CREDENTIALS = "0100000000000000000000004124cd4a34790c0da4cbcdd89f536b9508b8bc41"

# Epoch far enough past genesis that a validator activated at 0 may exit.
EXIT_EPOCH = 300

HOLESKY_DEPOSITS = [
    {
        "pubkey": "a63bffb2b9be4830811150bdaefd904d32aad8a09998aa9bc836cda7cbab97c594293b995199afe659560ee7a930149d",
        "withdrawal_credentials": WITHDRAWAL_CREDENTIALS,
        "amount": 32000000000,
        "signature": "93f06f7867b898a807d9425c2e647bebcf23bc16adca708ae54958949aced24acd4ccb813b04bb9a431fd6df437f689614246109b008eadafc444f2bd5f0323005b77f4c2810f9e3630a91ffc5859bd2a92ee84aeb97b352e5e2f1f90cf84aca",
        "deposit_message_root": "7fe71257fdc44d492ba5c46ee4a3c8692fecfdfb3377abacd93e3b540fe7acbb",
        "deposit_data_root": "422b4b4ec62d367ce42e0ae98b6b8a1351a480cce3b2e31ac6c3fe205827db3f",
        "fork_version": "01017000",
        "network_name": "holesky",
        "deposit_cli_version": "10.6.0",
    },
    {
        "pubkey": "83e8519e3c69669c1141ef7a5e66c710c67ab52cc6f57c4ee35200c35154daa3cdc18bc52a47ef6c5900df29aedcf302",
        "withdrawal_credentials": WITHDRAWAL_CREDENTIALS,
        "amount": 32000000000,
        "signature": "aedf8d96a3a88d50249925b765ff8ea29ae621e01f2da05f733e08aeea8644204ae6e90756c160f4c172140e67cf57640201401961b4d8d76276400b07ad242e4feb185db90ffe4a84589b8ff57874b27117dd988b25684cf86ae185e9ecf5a7",
        "deposit_message_root": "ecf288cca52578464f4f94caa42650d8d8a6b6ad7ef99c4851f4da7ef807ef7b",
        "deposit_data_root": "c70451a6a86e3623d2cbc0ffd2586f8d0033ab8cc198286def319e2a42ea5664",
        "fork_version": "01017000",
        "network_name": "holesky",
        "deposit_cli_version": "10.6.0",
    },
    {
        "pubkey": "ae17df015acee11b422707e25ba7ca3900a425a1107660a4409d2dca35e1535ce5b871c61b240c331bdb18fcf811944b",
        "withdrawal_credentials": WITHDRAWAL_CREDENTIALS,
        "amount": 32000000000,
        "signature": "ab07ecd8008365562ecdf7dc698cf9e24957c7442364f52b3dbb96020006e7edbda75ed2fb58fa9085c240102a2c526009e3c7a9740221c624292f4b7c06a58cbcc8b59f6bcd2cf37072b6773dac3ff3ac1c97be0e94f4cf8340dd5040c19b44",
        "deposit_message_root": "f9f18be072a4eb609e78943f33f6d67b279c2868831cb71dcaee2acd7ecf38d7",
        "deposit_data_root": "4bc1c4179e77fe4acea3c3b8defda5bf735dd9e669f0d6ebaaf1ec2f8e27a079",
        "fork_version": "01017000",
        "network_name": "holesky",
        "deposit_cli_version": "10.6.0",
    },
]

MAINNET_DEPOSITS = [
    {
        "pubkey": "a63bffb2b9be4830811150bdaefd904d32aad8a09998aa9bc836cda7cbab97c594293b995199afe659560ee7a930149d",
        "withdrawal_credentials": WITHDRAWAL_CREDENTIALS,
        "amount": 32000000000,
        "signature": "913b0070abb6f772c4c4533a921865617fe949cf34caef892e5ce7d516ea1be3e5e401a26744dab0310bdf59f77a1f12186ac3d1aae342a00a6f0090b94c98f69481e1a7f3cb45a1cb794607aa8f65b752cd40e97c0767be3585308f1b9e5ef2",
        "deposit_message_root": "7fe71257fdc44d492ba5c46ee4a3c8692fecfdfb3377abacd93e3b540fe7acbb",
        "deposit_data_root": "a3b7db7d5bb99bc7591e42d9d24a69ba3591a292faac4cddfecf4af780235a0e",
        "fork_version": "00000000",
        "network_name": "mainnet",
        "deposit_cli_version": "2.8.0",
    },
]

PRIVKEYS = [1111, 2222, 3333]


def write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data))
    return path


def sign_exit(privkey: int, validator_index: int, epoch: int = EXIT_EPOCH, network=HOLESKY) -> dict:
    """Signed exit in the JSON form the beacon API and ethdo use."""
    message = VoluntaryExit(epoch=epoch, validator_index=validator_index)
    signing_root = compute_signing_root(message, voluntary_exit_domain(network))
    return {
        "message": {"epoch": str(epoch), "validator_index": str(validator_index)},
        "signature": "0x" + sign(privkey, signing_root).hex(),
    }


@pytest.fixture(scope="session")
def keypairs() -> list[tuple[int, str]]:
    """(privkey, pubkey hex) pairs."""
    return [(sk, pubkey_from_privkey(sk).hex()) for sk in PRIVKEYS]


@pytest.fixture
def deposit_file(tmp_path):
    def _write(entries, name="deposit_data.json") -> Path:
        return write_json(tmp_path / name, entries)
    return _write


@pytest.fixture
def exit_dir(tmp_path):
    """Directory plus a writer for signed exit files named ``<index>-<pubkey>.json``."""
    directory = tmp_path / "exits"
    directory.mkdir()

    def _write(privkey: int, validator_index: int, epoch: int = EXIT_EPOCH, name: str = None) -> Path:
        pubkey = pubkey_from_privkey(privkey).hex()
        filename = name or f"{validator_index}-{pubkey}.json"
        return write_json(directory / filename, sign_exit(privkey, validator_index, epoch))

    _write.path = directory
    return _write


@pytest.fixture
def beacon_server():
    """Factory for an in-process fake beacon node.

    Usage: ``async with beacon_server(validators=[...]) as url: ...``
    """

    @asynccontextmanager
    async def _serve(validators=None, finalized=None, spec=None, genesis=None, fork=None, fail=None):
        fail = fail or {}

        def respond(name, data):
            async def handler(request):
                if name in fail:
                    return web.Response(status=fail[name], text=f"{name} unavailable")
                return web.json_response({"data": data})
            return handler

        app = web.Application()
        app.router.add_get("/eth/v1/beacon/genesis", respond("genesis", genesis or {
            "genesis_time": "1695902400",
            "genesis_validators_root": "0x" + HOLESKY.genesis_validators_root.hex(),
            "genesis_fork_version": "0x01017000",
        }))
        app.router.add_get("/eth/v1/beacon/states/head/fork", respond("fork", fork or {
            "previous_version": "0x05017000",
            "current_version": "0x06017000",
            "epoch": "115968",
        }))
        app.router.add_get("/eth/v1/config/spec", respond("spec", spec or {
            "CAPELLA_FORK_VERSION": "0x04017000",
            "CAPELLA_FORK_EPOCH": "256",
            "MIN_VALIDATOR_WITHDRAWABILITY_DELAY": "256",
            "DOMAIN_BLS_TO_EXECUTION_CHANGE": "0x0a000000",
            "DOMAIN_VOLUNTARY_EXIT": "0x04000000",
        }))
        app.router.add_get("/eth/v1/beacon/states/head/validators", respond("head", validators or []))
        app.router.add_get(
            "/eth/v1/beacon/states/finalized/validators", respond("finalized", finalized or validators or [])
        )

        server = TestServer(app)
        await server.start_server()
        try:
            yield str(server.make_url("")).rstrip("/")
        finally:
            await server.close()

    return _serve


@pytest.fixture
def fake_ethdo(tmp_path):
    """Executable standing in for ethdo.

    It prints the preparation file it was run against, which is a JSON
    object, so the written exit files reveal what each task was given.
    Indices listed in ``fail_indices`` make it exit non-zero.
    """

    def _make(fail_indices=()) -> str:
        script = tmp_path / "fake-ethdo"
        lines = ["#!/bin/sh"]
        for index in fail_indices:
            lines.append(f"if grep -q '\"index\": \"{index}\"' offline-preparation.json; then")
            lines.append(f"  echo 'signing failed for {index}'")
            lines.append("  exit 1")
            lines.append("fi")
        lines.append("cat offline-preparation.json")
        script.write_text("\n".join(lines) + "\n")
        script.chmod(script.stat().st_mode | stat.S_IEXEC)
        return str(script)

    return _make


@pytest.fixture
def keystore_dir(tmp_path, keypairs):
    """Directory with one minimal keystore per keypair (pubkey field only)."""
    directory = tmp_path / "keystores"
    directory.mkdir()
    for i, (_, pubkey) in enumerate(keypairs):
        write_json(directory / f"keystore-m_12381_3600_{i}_0_0-1700000000.json", {"pubkey": pubkey, "version": 4})
    (directory / "deposit_data-1700000000.json").write_text("[]")
    return directory
