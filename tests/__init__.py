# sha2vectors Test Suite
"""
Test suite including:
- Unit tests for the SHA-2 engines and the engine contract
- Parser and writer tests for `.rsp` files
- Conformance runs over the NIST-style vector files in tests/vectors/

Run with: pytest
"""
