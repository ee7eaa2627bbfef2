"""
Samples Module

Provides piano sample loading and catalog checks.
"""

from .manager import (
    SampleStore,
    expected_resources,
    find_missing,
    resource_name,
)

__all__ = ['SampleStore', 'expected_resources', 'find_missing', 'resource_name']
