"""
Node - Read access to a Concordium node.

Transaction status polling and read-only contract invocation over the
node's JSON-RPC gateway, plus typed views of its responses.
"""
