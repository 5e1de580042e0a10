"""
dnam_age.utils.contract

Column contract checks for the tables passed between stages.
"""

from typing import List, Optional

import pandas as pd

from dnam_age.exceptions import MalformedInputError

SAMPLE_TABLE_COLUMNS = ['sample_id', 'age']


def validate_columns(df: pd.DataFrame, required_cols: List[str], source: Optional[str] = None) -> None:
    """
    Raise if any required column is absent.

    Raises:
        MalformedInputError: listing the missing columns.
    """
    missing = [c for c in required_cols if c not in df.columns]
    if missing:
        raise MalformedInputError(f"table missing required columns: {missing}", source=source)


def validate_sample_table(df: pd.DataFrame, source: Optional[str] = None) -> None:
    """SampleMetadata must carry sample_id and age, with unique sample ids."""
    validate_columns(df, SAMPLE_TABLE_COLUMNS, source=source)
    duplicated = df.loc[df['sample_id'].duplicated(), 'sample_id'].unique().tolist()
    if duplicated:
        raise MalformedInputError(f"duplicate sample ids: {duplicated[:5]}", source=source)
