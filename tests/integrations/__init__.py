"""
Integration test modules

Tests for the VacayPay gateway adapter and its collaborators:
- Payment verbs and the tokenize-then-charge flow
- Account resolution
- Response normalization and error mapping
- Transcript scrubbing and form encoding
"""
