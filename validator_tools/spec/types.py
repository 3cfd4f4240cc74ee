"""SSZ containers used for signing-root and domain computation."""

from remerkleable.basic import uint64, boolean
from remerkleable.byte_arrays import Bytes4, Bytes32, Bytes48, Bytes96
from remerkleable.complex import Container

# Type aliases
Epoch = uint64
ValidatorIndex = uint64
Gwei = uint64
Root = Bytes32
Version = Bytes4
Domain = Bytes32
BLSPubkey = Bytes48
BLSSignature = Bytes96


class ForkData(Container):
    current_version: Version
    genesis_validators_root: Root


class SigningData(Container):
    object_root: Root
    domain: Domain


class Validator(Container):
    pubkey: BLSPubkey
    withdrawal_credentials: Bytes32
    effective_balance: Gwei
    slashed: boolean
    activation_eligibility_epoch: Epoch
    activation_epoch: Epoch
    exit_epoch: Epoch
    withdrawable_epoch: Epoch


class DepositMessage(Container):
    pubkey: BLSPubkey
    withdrawal_credentials: Bytes32
    amount: Gwei


class VoluntaryExit(Container):
    epoch: Epoch
    validator_index: ValidatorIndex


class SignedVoluntaryExit(Container):
    message: VoluntaryExit
    signature: BLSSignature


__all__ = [
    "Root", "Version",
    "ForkData", "SigningData", "Validator",
    "DepositMessage", "VoluntaryExit", "SignedVoluntaryExit",
]
