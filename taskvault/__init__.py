"""TaskVault core: accounts, tokens and ownership-scoped todos."""

__version__ = "1.0.0"
