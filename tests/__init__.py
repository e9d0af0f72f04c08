"""Tests for the option contract verifier."""
