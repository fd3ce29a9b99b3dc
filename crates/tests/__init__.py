"""
Test suite for the cratesdocs crates app
"""
