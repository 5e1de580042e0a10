"""
dnam_age.data.coefficients

Loading and querying the clock coefficient table.

Layout of the file: one probe-identifier column followed by one column per model
variant, semicolon-separated, with a single intercept row.
"""

from typing import Iterable, List, Optional, Set

import pandas as pd

from dnam_age.config import INTERCEPT_LABEL
from dnam_age.exceptions import MalformedInputError, UnknownModelError
from dnam_age.utils.logging import log

PROBE_INDEX_NAME = "probe_id"


def load_coefficients(path, sep: str = ";", intercept_label: str = INTERCEPT_LABEL) -> pd.DataFrame:
    """
    Read a coefficient table into a DataFrame indexed by probe identifier.

    Args:
        path: Path (or buffer) of the delimited coefficient file.
        sep: Field delimiter.
        intercept_label: Identifier of the intercept row.

    Returns:
        pd.DataFrame: float columns, one per model, index named 'probe_id'.

    Raises:
        MalformedInputError: on structural or numeric problems.
    """
    source = str(path)
    try:
        raw = pd.read_csv(path, sep=sep, dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise MalformedInputError(f"cannot parse coefficient table: {e}", source=source) from e

    if raw.shape[1] < 2:
        raise MalformedInputError(
            f"expected a probe column and at least one model column separated by '{sep}'; got columns {list(raw.columns)}",
            source=source,
        )

    probe_col = raw.columns[0]
    probes = raw[probe_col].str.strip()
    if (probes == "").any():
        row = int((probes == "").to_numpy().argmax())
        raise MalformedInputError("empty probe identifier", source=source, record=row + 2)

    duplicated = probes[probes.duplicated()].unique().tolist()
    if duplicated:
        raise MalformedInputError(f"duplicate probe identifiers: {duplicated[:5]}", source=source)

    table = pd.DataFrame(index=pd.Index(probes.to_numpy(), name=PROBE_INDEX_NAME))
    for model in raw.columns[1:]:
        values = pd.to_numeric(raw[model].str.strip(), errors="coerce")
        bad = values.isna().to_numpy()
        if bad.any():
            row = int(bad.argmax())
            raise MalformedInputError(
                f"non-numeric coefficient {raw[model].iloc[row]!r} for model '{model}', probe '{probes.iloc[row]}'",
                source=source,
                record=row + 2,
            )
        table[str(model).strip()] = values.to_numpy(dtype=float)

    if intercept_label not in table.index:
        raise MalformedInputError(f"missing intercept row '{intercept_label}'", source=source)

    log(f"Loaded coefficient table: {len(table) - 1} probes x {table.shape[1]} models ({', '.join(table.columns)})")
    return table


def select_models(table: pd.DataFrame, models: Optional[Iterable[str]] = None) -> List[str]:
    """
    Resolve requested model names against the table.

    Returns the table's columns in input order when models is None, otherwise the
    requested names in the requested order.

    Raises:
        UnknownModelError: a requested model is not a column of the table.
    """
    available = list(table.columns)
    if models is None:
        return available

    selected = []
    for model in models:
        if model not in available:
            raise UnknownModelError(model, available)
        if model not in selected:
            selected.append(model)
    return selected


def intercept(table: pd.DataFrame, model: str, intercept_label: str = INTERCEPT_LABEL) -> float:
    select_models(table, [model])
    return float(table.at[intercept_label, model])


def model_probes(table: pd.DataFrame, model: str, intercept_label: str = INTERCEPT_LABEL) -> pd.Series:
    """Non-zero, non-intercept coefficients of one model, indexed by probe."""
    select_models(table, [model])
    coefs = table[model].drop(index=intercept_label)
    return coefs[coefs != 0]


def all_model_probes(
    table: pd.DataFrame,
    models: Optional[Iterable[str]] = None,
    intercept_label: str = INTERCEPT_LABEL,
) -> Set[str]:
    """Union of the probes referenced by the selected models."""
    probes: Set[str] = set()
    for model in select_models(table, models):
        probes.update(model_probes(table, model, intercept_label).index)
    return probes
