"""Fitted small-area estimation results consumed by the diagnostics."""

from .fitted_result import (
    DOMAIN_COL,
    DIRECT_COL,
    OUT_COL,
    GAMMA_COL,
    ModelVariant,
    TransformationType,
    TransformationInfo,
    SampleFramework,
    EstimationMethod,
    FittingCall,
    FHModelInternals,
    EBPModelFit,
    FittedModelResult
)

__all__ = [
    'DOMAIN_COL',
    'DIRECT_COL',
    'OUT_COL',
    'GAMMA_COL',
    'ModelVariant',
    'TransformationType',
    'TransformationInfo',
    'SampleFramework',
    'EstimationMethod',
    'FittingCall',
    'FHModelInternals',
    'EBPModelFit',
    'FittedModelResult'
]
