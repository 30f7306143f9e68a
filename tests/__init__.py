"""
Test suite for mpvalues

Contains:
- tests/unit/          : Unit tests for individual modules
"""
