"""
dnam_age.data.metadata

Sample annotation parsing.

Every sample is described by three fixed-format strings, as found in a GEO
phenotype table:
- a characteristics field holding the group label, e.g. "disease state: Control"
- an age field, e.g. "age: 34"
- a title whose first token is the sample name used in the methylation matrix header

Only samples of the retained group are kept. Parse failures raise instead of
producing silent NaNs; an explicit "unknown" age token is the only tolerated gap.
"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from dnam_age.config import AnalysisConfig
from dnam_age.exceptions import MalformedInputError
from dnam_age.utils.contract import validate_columns
from dnam_age.utils.logging import log

METADATA_COLUMNS = ["sample_id", "accession", "group", "age"]

_DEFAULTS = AnalysisConfig()


def is_retained(group_field: str, marker: str = _DEFAULTS.group_marker) -> bool:
    """True when the group field contains the marker substring."""
    return marker in group_field


def parse_age(
    age_field: str,
    delimiter: str = _DEFAULTS.age_delimiter,
    missing_tokens: Sequence[str] = _DEFAULTS.missing_age_tokens,
    record=None,
) -> float:
    """
    Parse the numeric value after the first delimiter of an age field.

    Returns NaN for an explicit missing-age token; raises MalformedInputError
    when the delimiter is absent or the value is not a number.
    """
    if not isinstance(age_field, str) or delimiter not in age_field:
        raise MalformedInputError(f"age field {age_field!r} lacks delimiter {delimiter!r}", record=record)

    value = age_field.split(delimiter, 1)[1].strip()
    if value in missing_tokens:
        return float("nan")
    try:
        age = float(value)
    except ValueError as e:
        raise MalformedInputError(f"age value {value!r} is not numeric", record=record) from e
    if not np.isfinite(age):
        raise MalformedInputError(f"age value {value!r} is not finite", record=record)
    return age


def parse_sample_name(title_field: str, delimiter: str = _DEFAULTS.title_delimiter, record=None) -> str:
    """Token before the first delimiter of a title field, e.g. 'Sample 12 [x]' -> 'Sample'."""
    if not isinstance(title_field, str) or delimiter not in title_field:
        raise MalformedInputError(f"title field {title_field!r} lacks delimiter {delimiter!r}", record=record)

    name = title_field.split(delimiter, 1)[0].strip()
    if not name:
        raise MalformedInputError(f"title field {title_field!r} has an empty sample name", record=record)
    return name


def extract_sample_metadata(
    groups: Sequence[str],
    ages: Sequence[str],
    titles: Sequence[str],
    accessions: Optional[Sequence[str]] = None,
    config: AnalysisConfig = _DEFAULTS,
) -> pd.DataFrame:
    """
    Build SampleMetadata for the retained group from parallel descriptor fields.

    Args:
        groups: Group/characteristics field per sample.
        ages: "age: <value>" field per sample.
        titles: "<name><delimiter>..." field per sample.
        accessions: Optional repository accession per sample; defaults to the 1-based record number.
        config: Marker and delimiter settings.

    Returns:
        pd.DataFrame with columns sample_id, accession, group, age (retained samples only).

    Raises:
        MalformedInputError: mismatched field lengths, unparsable fields, or duplicate retained names.
    """
    groups, ages, titles = list(groups), list(ages), list(titles)
    if accessions is None:
        accessions = [str(i + 1) for i in range(len(groups))]
    accessions = list(accessions)

    lengths = {len(groups), len(ages), len(titles), len(accessions)}
    if len(lengths) != 1:
        raise MalformedInputError(
            f"descriptor fields differ in length: groups={len(groups)}, ages={len(ages)}, "
            f"titles={len(titles)}, accessions={len(accessions)}"
        )

    records = []
    for group, age, title, accession in zip(groups, ages, titles, accessions):
        if not isinstance(group, str):
            raise MalformedInputError(f"group field {group!r} is not text", record=accession)
        parsed_age = parse_age(age, config.age_delimiter, config.missing_age_tokens, record=accession)
        name = parse_sample_name(title, config.title_delimiter, record=accession)
        if is_retained(group, config.group_marker):
            records.append(
                {"sample_id": name, "accession": str(accession), "group": group, "age": parsed_age}
            )

    metadata = pd.DataFrame(records, columns=METADATA_COLUMNS)
    metadata["age"] = metadata["age"].astype(float)

    duplicated = metadata.loc[metadata["sample_id"].duplicated(), "sample_id"].unique().tolist()
    if duplicated:
        raise MalformedInputError(f"duplicate sample names among retained samples: {duplicated[:5]}")

    log(f"Retained {len(metadata)} of {len(groups)} samples matching '{config.group_marker}'")
    n_missing_age = int(metadata["age"].isna().sum())
    if n_missing_age:
        log(f"{n_missing_age} retained samples have no chronological age", level="WARNING")
    return metadata


def read_sample_descriptors(path, config: AnalysisConfig = _DEFAULTS, sep: Optional[str] = None) -> pd.DataFrame:
    """
    Load a local descriptor table and extract SampleMetadata from it.

    The separator is inferred from the file suffix (tab for .tsv/.txt, comma
    otherwise) unless given.
    """
    source = str(path)
    if sep is None:
        sep = "\t" if source.lower().endswith((".tsv", ".txt", ".tsv.gz", ".txt.gz")) else ","

    try:
        table = pd.read_csv(path, sep=sep, dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise MalformedInputError(f"cannot parse descriptor table: {e}", source=source) from e

    validate_columns(table, [config.group_column, config.age_column, config.title_column], source=source)

    accessions = table[config.accession_column] if config.accession_column in table.columns else None
    try:
        return extract_sample_metadata(
            table[config.group_column],
            table[config.age_column],
            table[config.title_column],
            accessions=accessions,
            config=config,
        )
    except MalformedInputError as e:
        raise MalformedInputError(str(e), source=source) from e
