"""
dnam_age.data

Input handling for the pipeline:
- Clock coefficient tables
- Sample descriptor parsing
- Chunked filtering of methylation matrices
"""

from .coefficients import all_model_probes, intercept, load_coefficients, model_probes, select_models
from .metadata import extract_sample_metadata, read_sample_descriptors
from .methylation import load_methylation_subset

__all__ = [
    "all_model_probes",
    "intercept",
    "load_coefficients",
    "model_probes",
    "select_models",
    "extract_sample_metadata",
    "read_sample_descriptors",
    "load_methylation_subset",
]
