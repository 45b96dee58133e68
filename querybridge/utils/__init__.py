"""Utility functions and classes for querybridge."""
