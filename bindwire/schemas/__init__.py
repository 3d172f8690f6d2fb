"""Wire schemas for request, response and fault envelopes."""
