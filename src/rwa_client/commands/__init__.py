"""
Commands - click command groups for the ``rwa`` CLI.

- codec: token-id, amount, schema
- chain: tx, contract
"""
