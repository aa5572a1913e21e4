"""
validgen: generate validated domain records from tagged input declarations.

Generator entry points live in ``validgen.generator`` and ``validgen.cli``;
generated modules only import ``validgen.runtime``.
"""

__version__ = "0.1.0"
