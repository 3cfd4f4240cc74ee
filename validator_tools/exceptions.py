"""Exceptions for validator-tools."""


class ValidatorToolsError(Exception):
    """Base error for all validator-tools failures."""


class ConfigError(ValidatorToolsError):
    """Invalid operator-supplied configuration."""


class UnknownNetworkError(ConfigError):
    """Network name is not one of the built-in networks."""

    def __init__(self, network: str):
        self.network = network
        super().__init__(f"unknown network: {network}")


class ParseError(ValidatorToolsError):
    """Malformed JSON, hex or filename."""


class MalformedFilenameError(ParseError):
    """Filename does not follow the <prefix>-<pubkey>.json scheme."""


class CriteriaMismatchError(ValidatorToolsError):
    """Deposit record does not match the operator's expectations."""

    def __init__(self, message: str, pubkey: str = ""):
        self.pubkey = pubkey
        if pubkey:
            message = f"invalid deposit for pubkey {pubkey}: {message}"
        super().__init__(message)


class ConsistencyError(ValidatorToolsError):
    """Exit records are not a contiguous, matching set."""


class RangeMismatchError(ConsistencyError):
    """Validator index range differs between two pubkeys."""

    def __init__(self, bound: str, value: int, pubkey: str, reference_value: int, reference_pubkey: str):
        self.bound = bound
        self.pubkey = pubkey
        self.reference_pubkey = reference_pubkey
        super().__init__(
            f"{bound} validator index mismatch: {value} for pubkey {pubkey} "
            f"vs {reference_value} for pubkey {reference_pubkey}"
        )


class NoExitsFoundError(ConsistencyError):
    """No exit files were found at all."""

    def __init__(self, message: str = "no voluntary exits found"):
        super().__init__(message)


class UnexpectedPubkeyError(ConsistencyError):
    """An exit file belongs to a pubkey the operator did not list."""

    def __init__(self, pubkey: str):
        self.pubkey = pubkey
        super().__init__(f"unexpected pubkey found: {pubkey}")


class MissingExpectedPubkeyError(ConsistencyError):
    """An expected pubkey has no exit files."""

    def __init__(self, pubkey: str):
        self.pubkey = pubkey
        super().__init__(f"expected pubkey not found: {pubkey}")


class VerificationError(ValidatorToolsError):
    """Signature or domain check failed."""

    def __init__(self, message: str, pubkey: str = "", validator_index: int | None = None):
        self.pubkey = pubkey
        self.validator_index = validator_index
        context = []
        if pubkey:
            context.append(f"pubkey {pubkey}")
        if validator_index is not None:
            context.append(f"validator index {validator_index}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class NetworkError(ValidatorToolsError):
    """Beacon node could not be reached or returned garbage."""


class BeaconAPIError(NetworkError):
    """Error from Beacon API."""

    def __init__(self, status: int, message: str, url: str = ""):
        self.status = status
        self.message = message
        self.url = url
        where = f" ({url})" if url else ""
        super().__init__(f"Beacon API error {status}{where}: {message}")


class ExternalToolError(ValidatorToolsError):
    """External signing tool failed or produced unusable output."""

    def __init__(self, message: str, output: str = ""):
        self.output = output
        if output:
            message = f"{message}: {output}"
        super().__init__(message)


class GenerationTaskError(ValidatorToolsError):
    """A generation worker failed; carries the worker and task it failed on."""

    def __init__(self, worker_id: int, cause: Exception, validator_index: int | None = None):
        self.worker_id = worker_id
        self.validator_index = validator_index
        self.cause = cause
        where = f" for validator index {validator_index}" if validator_index is not None else ""
        super().__init__(f"worker {worker_id} failed{where}: {cause}")
