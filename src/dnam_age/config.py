"""
dnam_age.config

Default constants for a clock run, collected in one frozen dataclass so the CLI,
the pipeline and the tests agree on them.
"""

from dataclasses import dataclass, field
from typing import Tuple

DEFAULT_CHUNK_SIZE = 10_000
DEFAULT_ADULT_AGE = 20.0
INTERCEPT_LABEL = "(Intercept)"


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Tunable settings for one analysis run.

    Attributes:
        chunk_size: Rows read per chunk from the methylation matrix.
        adult_age: Adult-age anchor of the log-linear age transform.
        intercept_label: Probe identifier of the intercept row in the coefficient table.
        coefficient_sep: Delimiter of the coefficient table.
        group_marker: Substring that marks a sample as part of the retained (control) group.
        age_delimiter: Text separating the label from the value in the age field.
        title_delimiter: Text after the sample name in the title field.
        missing_age_tokens: Age values treated as "unknown" rather than malformed.
        group_column / age_column / title_column / accession_column:
            Column names of a local sample descriptor table.
        axis_range: Fixed (min, max) of both axes in the comparison scatterplots.
        panel_columns: Maximum number of panels per row in the composed figure.
        strict_probes: Raise instead of warning when model probes are absent from the matrix.
    """
    chunk_size: int = DEFAULT_CHUNK_SIZE
    adult_age: float = DEFAULT_ADULT_AGE
    intercept_label: str = INTERCEPT_LABEL
    coefficient_sep: str = ";"
    group_marker: str = "Control"
    age_delimiter: str = ": "
    title_delimiter: str = " "
    missing_age_tokens: Tuple[str, ...] = field(default=("", "NA", "N/A", "nan", "NaN"))
    group_column: str = "characteristics_ch1"
    age_column: str = "characteristics_ch1.1"
    title_column: str = "title"
    accession_column: str = "geo_accession"
    axis_range: Tuple[float, float] = (0.0, 100.0)
    panel_columns: int = 3
    strict_probes: bool = False

    def __post_init__(self):
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1; got {self.chunk_size}")
        if self.panel_columns < 1:
            raise ValueError(f"panel_columns must be >= 1; got {self.panel_columns}")
        low, high = self.axis_range
        if not low < high:
            raise ValueError(f"axis_range must be increasing; got {self.axis_range}")
