"""Credential-brokered command-line tools for agents.

Every command resolves provider credentials from the SEKS broker at call time,
so the calling agent never holds raw secrets. Human-facing output goes through
Rich on stderr while payload outputs on stdout remain machine-friendly.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
