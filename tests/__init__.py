"""
Quote Service Test Suite
========================

This package contains tests for the Quote Service including:
- Unit tests for individual components
- Integration tests for complete moderation workflows
"""
