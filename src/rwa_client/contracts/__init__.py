"""
Contracts - Typed access to deployed smart contracts.

Method descriptors, the schema-driven call codec, read-only invocation and
the generated contract bindings (``rwa_sponsor``) and artifact loader.
"""
