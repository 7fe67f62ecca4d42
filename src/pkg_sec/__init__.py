"""pkg-sec - supply-chain verification for npm-compatible projects."""

__version__ = "0.1.0"
