"""
Audit trail feature module.

Durable, structured before/after records of mutations for compliance review.
"""
