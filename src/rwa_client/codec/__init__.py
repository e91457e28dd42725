"""
Codec - Wire encodings for contract I/O.

- amount:   fixed-point minor-unit amounts and rates for display
- token_id: fixed-width little-endian token ids
- schema:   binary type schema parser
- values:   schema-driven value (de)serialization
- address:  account / contract address helpers
- ui:       tagged-enum form values <-> contract JSON
"""
