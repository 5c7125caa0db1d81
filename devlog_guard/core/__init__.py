"""
Core modules for DevLog Guard.

This package contains admission control, the usage ledger, code fragment
extraction, claim validation, and the generation pipeline.
"""
