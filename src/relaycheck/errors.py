"""Exception hierarchy for the relay harness."""


class RelayCheckError(Exception):
    """Base for every error the harness raises itself."""


class ConfigurationError(RelayCheckError):
    """A required setting is missing or unusable."""


class KeypairError(RelayCheckError):
    """The sender keypair file can't be turned into a keypair."""


class RelayError(RelayCheckError):
    """The relay answered, but not with something we can use."""


class RelayRpcError(RelayError):
    """The relay returned a JSON-RPC error object."""

    def __init__(self, code: int | None, message: str, data=None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"relay error {code}: {message}")


class RelayResponseError(RelayError):
    """The relay response body is not a well formed JSON-RPC reply."""


class SubmissionRejected(RelayCheckError):
    """A single submission failed and the scenario run stopped there.

    ``expected`` is True when the scenario was built to be rejected, which is the
    only thing that separates a passing stale-transaction run from a broken relay.
    """

    def __init__(self, scenario: str, cause: BaseException, *, expected: bool):
        self.scenario = scenario
        self.cause = cause
        self.expected = expected
        verdict = "expected" if expected else "unexpected"
        super().__init__(f"{scenario}: submission rejected ({verdict}): {cause}")
