"""Fork supervisor exception hierarchy."""


class ForknetError(Exception):
    """Base error type for all fork supervisor failures."""


class UserError(ForknetError):
    """Request conflicts with current state; nothing was changed."""


class ForkAlreadyRunningError(UserError):
    """A live fork already exists for the requested chain alias."""

    def __init__(self, chain: str):
        super().__init__(f"{chain} fork already exists")
        self.chain = chain


class ConfigError(ForknetError):
    """Missing or invalid configuration for a chain alias."""


class UnknownChainError(ConfigError):
    """Chain alias has no entry in the chain id table."""

    def __init__(self, chain: str):
        super().__init__(f"no chain id for alias: {chain}")
        self.chain = chain


class MissingRpcError(ConfigError):
    """Upstream RPC environment variable is not set for the alias."""

    def __init__(self, chain: str, env_var: str):
        super().__init__(f"no rpc found: {chain} (set {env_var})")
        self.chain = chain
        self.env_var = env_var


class SpawnError(ForknetError):
    """External binary could not be launched or produced no pid."""


class StateWriteError(ForknetError):
    """Persisting a state file failed."""
