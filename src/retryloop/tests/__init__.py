"""Tests for retryloop."""
