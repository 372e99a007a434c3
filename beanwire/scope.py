"""
BeanScope Enum

Defines the lifetime policy of beans
"""

from enum import Enum


class BeanScope(Enum):
    """Lifetime of bean instances"""
    SINGLETON = "SINGLETON"
    TRANSIENT = "TRANSIENT"
