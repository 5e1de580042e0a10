"""
dnam_age.data.methylation

Chunked filter-loader for large probe x sample methylation matrices.

The matrix file (gzip-compressed or plain CSV) has one header row: the probe
identifier column followed by one column per sample. It is read in row chunks
so peak memory follows the chunk size; each chunk is reduced to the requested
samples and probes before the next one is read. The result does not depend on
the chunk size.
"""

import csv
import gzip
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from dnam_age.config import DEFAULT_CHUNK_SIZE
from dnam_age.exceptions import MalformedInputError
from dnam_age.utils.logging import log

PROBE_INDEX_NAME = "probe_id"


class _FieldCountGuard:
    """
    Text stream wrapper that rejects lines whose field count differs from the header.

    pandas pads short rows with NaN, which would be indistinguishable from blank
    beta values, so the check happens on the raw lines before parsing.
    """

    def __init__(self, handle, sep: str, source: str):
        self._handle = handle
        self._sep = sep
        self._source = source
        self._expected = None
        self._lineno = 0
        self._pending = ""

    def readable(self) -> bool:
        return True

    def readline(self, size: int = -1) -> str:
        line = self._handle.readline()
        if not line:
            return ""
        self._lineno += 1
        body = line.rstrip("\r\n")
        if body.strip():
            n_fields = len(next(csv.reader([body], delimiter=self._sep)))
            if self._expected is None:
                self._expected = n_fields
            elif n_fields != self._expected:
                raise MalformedInputError(
                    f"line {self._lineno} has {n_fields} fields; header has {self._expected}",
                    source=self._source,
                )
        return line

    def read(self, size: int = -1) -> str:
        parts = [self._pending]
        total = len(self._pending)
        while size is None or size < 0 or total < size:
            line = self.readline()
            if not line:
                break
            parts.append(line)
            total += len(line)
        data = "".join(parts)
        if size is None or size < 0:
            self._pending = ""
            return data
        self._pending = data[size:]
        return data[:size]

    def __iter__(self):
        return self

    def __next__(self) -> str:
        line = self.readline()
        if not line:
            raise StopIteration
        return line


def _open_text(path):
    source = str(path)
    if source.endswith(".gz"):
        return gzip.open(path, "rt", encoding="utf-8")
    return open(path, "r", encoding="utf-8")


def read_matrix_header(path, sep: str = ",") -> List[str]:
    """Column names of the matrix; the first entry is the probe-identifier column."""
    compression = "gzip" if str(path).endswith(".gz") else None
    try:
        header = pd.read_csv(path, sep=sep, nrows=0, compression=compression)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise MalformedInputError(f"cannot read matrix header: {e}", source=str(path)) from e
    return [str(c) for c in header.columns]


def _to_beta_values(frame: pd.DataFrame, source: str) -> pd.DataFrame:
    """Convert string cells to floats; blanks are NaN, anything else non-numeric is an error."""
    converted = pd.DataFrame(
        {col: pd.to_numeric(frame[col], errors="coerce") for col in frame.columns},
        index=frame.index,
        columns=frame.columns,
        dtype=float,
    )
    rows, cols = np.nonzero((converted.isna() & frame.notna()).to_numpy())
    if len(rows):
        probe, sample = frame.index[rows[0]], frame.columns[cols[0]]
        raise MalformedInputError(
            f"non-numeric beta value {frame.iat[rows[0], cols[0]]!r} for probe '{probe}', sample '{sample}'",
            source=source,
        )
    return converted


def iter_filtered_chunks(
    path,
    probes: Optional[Iterable[str]] = None,
    samples: Optional[Iterable[str]] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    sep: str = ",",
):
    """
    Yield each chunk of the matrix reduced to the requested probes and samples.

    Args:
        path: Matrix file (.gz files are decompressed on the fly).
        probes: Probe identifiers to keep; None keeps every row.
        samples: Sample identifiers to keep; None keeps every sample column.
        chunk_size: Rows parsed per chunk.
        sep: Field delimiter.

    Yields:
        pd.DataFrame indexed by probe id, float columns for the kept samples.
    """
    if chunk_size < 1:
        raise MalformedInputError(f"chunk_size must be >= 1; got {chunk_size}")

    source = str(path)
    header = read_matrix_header(path, sep=sep)
    sample_header = header[1:]

    if samples is None:
        keep_positions = list(range(1, len(header)))
    else:
        wanted = list(dict.fromkeys(str(s) for s in samples))
        missing = [s for s in wanted if s not in sample_header]
        if missing:
            log(f"{len(missing)} requested samples not in matrix header: {missing[:5]}", level="WARNING")
        wanted_set = set(wanted)
        seen = set()
        keep_positions = []
        for pos, name in enumerate(sample_header, start=1):
            if name in wanted_set and name not in seen:
                keep_positions.append(pos)
                seen.add(name)

    probe_set = None if probes is None else {str(p) for p in probes}
    usecols = [0] + keep_positions

    with _open_text(path) as handle:
        guard = _FieldCountGuard(handle, sep, source)
        try:
            reader = pd.read_csv(guard, sep=sep, usecols=usecols, dtype=str, chunksize=chunk_size)
            with reader:
                for i, chunk in enumerate(reader, start=1):
                    probe_col = chunk.columns[0]
                    chunk[probe_col] = chunk[probe_col].str.strip()
                    if probe_set is not None:
                        chunk = chunk[chunk[probe_col].isin(probe_set)]
                    chunk = chunk.set_index(probe_col)
                    chunk.index.name = PROBE_INDEX_NAME
                    log(f"  > chunk {i}: kept {len(chunk)} rows", level="DEBUG")
                    yield _to_beta_values(chunk, source)
        except pd.errors.ParserError as e:
            raise MalformedInputError(f"cannot parse methylation matrix: {e}", source=source) from e


def load_methylation_subset(
    path,
    probes: Optional[Iterable[str]] = None,
    samples: Optional[Iterable[str]] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    sep: str = ",",
) -> pd.DataFrame:
    """
    Stream the matrix and return only the requested probes (rows) and samples (columns).

    Rows keep their file order; columns follow the order of `samples` (header order
    when samples is None). Samples absent from the header are logged and skipped.

    Raises:
        MalformedInputError: wrong field count, non-numeric values, or duplicate kept probes.
    """
    source = str(path)
    probes = None if probes is None else {str(p) for p in probes}
    samples = None if samples is None else [str(s) for s in samples]
    log(f"Filtering methylation matrix {source} (chunk size {chunk_size})...")

    pieces = list(iter_filtered_chunks(path, probes=probes, samples=samples, chunk_size=chunk_size, sep=sep))
    non_empty = [p for p in pieces if len(p)]

    if non_empty:
        matrix = pd.concat(non_empty, axis=0)
    elif pieces:
        matrix = pieces[0]
    else:
        wanted = None if samples is None else {str(s) for s in samples}
        columns = [c for c in read_matrix_header(path, sep=sep)[1:] if wanted is None or c in wanted]
        matrix = pd.DataFrame(columns=list(dict.fromkeys(columns)), dtype=float)
    matrix.index.name = PROBE_INDEX_NAME

    duplicated = matrix.index[matrix.index.duplicated()].unique().tolist()
    if duplicated:
        raise MalformedInputError(f"duplicate probe identifiers in matrix: {duplicated[:5]}", source=source)

    if samples is not None:
        order = [s for s in dict.fromkeys(str(s) for s in samples) if s in matrix.columns]
        matrix = matrix[order]

    log(f"Methylation subset: {matrix.shape[0]} probes x {matrix.shape[1]} samples")
    return matrix.astype(float)
