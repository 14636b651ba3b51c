# -*- coding: utf-8 -*-
"""
Schema module

Unit system, type registry and the named vocabularies records are validated against.
"""

from .units import CanonicalValue, Dimension, Unit, convert
from .types import Type, TypeRegistry, TimePattern, ValuePattern, registry

__all__ = [
    'CanonicalValue',
    'Dimension',
    'Unit',
    'convert',
    'Type',
    'TypeRegistry',
    'TimePattern',
    'ValuePattern',
    'registry',
]
