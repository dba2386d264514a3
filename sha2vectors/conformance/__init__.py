# Conformance Module
"""
Conformance verification including:
- Generic runner: one-shot, streaming, chunked and checkpoint checks
- Empty-message cross-check after reset
- Registry of ShortMsg / LongMsg groups for all five variants
"""

from .runner import (
    ALL_CHECKS,
    CheckResult,
    ConformanceRunner,
    ConformanceSetupError,
    GroupReport,
    VectorMismatch,
)
from .groups import (
    GROUPS,
    VectorGroup,
    get_group,
    load_group,
    resolve_vector_path,
    run_group,
    run_groups,
)

__all__ = [
    'ALL_CHECKS',
    'CheckResult',
    'ConformanceRunner',
    'ConformanceSetupError',
    'GroupReport',
    'VectorMismatch',
    'GROUPS',
    'VectorGroup',
    'get_group',
    'load_group',
    'resolve_vector_path',
    'run_group',
    'run_groups',
]
