"""Shared pytest fixtures for dnam_age tests."""
import gzip

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest


COEFFICIENTS_TEXT = """CpGmarker;Horvath;Hannum
(Intercept);0.5;1.0
cg01;2.0;0.0
cg02;-1.0;1.5
cg03;0.0;-2.0
cg99;0.3;0.0
"""

MATRIX_TEXT = """ID_REF,S1,S2,S3,X9
cg00,0.10,0.20,0.30,0.40
cg01,0.30,0.50,,0.10
cg02,0.10,0.20,0.40,0.50
cg03,0.60,0.70,0.80,0.90
cg04,0.15,0.25,0.35,0.45
"""

DESCRIPTORS_TEXT = """geo_accession,title,characteristics_ch1,characteristics_ch1.1
GSM1,S1 [whole blood],disease state: Control,age: 34
GSM2,S2 [whole blood],disease state: Control,age: 50
GSM3,S3 [whole blood],disease state: Control,age: NA
GSM4,X9 [whole blood],disease state: Case,age: 60
GSM5,S5 [whole blood],disease state: Control,age: 40
"""


def write_gzip(path, text):
    with gzip.open(path, "wt", encoding="utf-8") as f:
        f.write(text)
    return path


@pytest.fixture
def coefficients_path(tmp_path):
    path = tmp_path / "coefficients.csv"
    path.write_text(COEFFICIENTS_TEXT)
    return path


@pytest.fixture
def matrix_path(tmp_path):
    return write_gzip(tmp_path / "matrix.csv.gz", MATRIX_TEXT)


@pytest.fixture
def descriptors_path(tmp_path):
    path = tmp_path / "descriptors.csv"
    path.write_text(DESCRIPTORS_TEXT)
    return path


@pytest.fixture
def large_matrix_path(tmp_path):
    """60 probes x 6 samples with a few blank cells, gzip-compressed."""
    rng = np.random.default_rng(42)
    values = rng.uniform(0, 1, size=(60, 6)).round(4)
    df = pd.DataFrame(
        values,
        index=[f"cg{i:08d}" for i in range(60)],
        columns=[f"GSM{i}" for i in range(6)],
    )
    df.iloc[3, 1] = np.nan
    df.iloc[17, 4] = np.nan
    df.iloc[42, 0] = np.nan
    df.index.name = "ID_REF"
    path = tmp_path / "large.csv.gz"
    df.to_csv(path, compression="gzip")
    return path
