import pytest
from dnam_age.data.coefficients import (
    all_model_probes, intercept, load_coefficients, model_probes, select_models,
)
from dnam_age.exceptions import MalformedInputError, UnknownModelError

def test_load_coefficients(coefficients_path):
    """The table is indexed by probe with one float column per model."""
    table = load_coefficients(coefficients_path)
    assert list(table.columns) == ["Horvath", "Hannum"]
    assert table.index.name == "probe_id"
    assert table.at["cg01", "Horvath"] == 2.0
    assert intercept(table, "Hannum") == 1.0

def test_model_probes_excludes_intercept_and_zeros(coefficients_path):
    """Zero coefficients and the intercept row are not model probes."""
    table = load_coefficients(coefficients_path)
    assert list(model_probes(table, "Horvath").index) == ["cg01", "cg02", "cg99"]
    assert list(model_probes(table, "Hannum").index) == ["cg02", "cg03"]
    assert all_model_probes(table) == {"cg01", "cg02", "cg03", "cg99"}

def test_select_models_order(coefficients_path):
    """Default order follows the file; explicit order is kept."""
    table = load_coefficients(coefficients_path)
    assert select_models(table) == ["Horvath", "Hannum"]
    assert select_models(table, ["Hannum", "Horvath"]) == ["Hannum", "Horvath"]

def test_unknown_model(coefficients_path):
    """Requesting a model that is not a column fails clearly."""
    table = load_coefficients(coefficients_path)
    with pytest.raises(UnknownModelError, match="unknown model 'Levine'"):
        select_models(table, ["Levine"])

def test_missing_intercept(tmp_path):
    """A table without the intercept row is malformed."""
    path = tmp_path / "coefs.csv"
    path.write_text("probe;M\ncg01;1.0\n")
    with pytest.raises(MalformedInputError, match="intercept"):
        load_coefficients(path)

def test_non_numeric_coefficient(tmp_path):
    """Unparsable coefficients name the offending probe."""
    path = tmp_path / "coefs.csv"
    path.write_text("probe;M\n(Intercept);0.5\ncg01;abc\n")
    with pytest.raises(MalformedInputError, match="cg01"):
        load_coefficients(path)

def test_duplicate_probe(tmp_path):
    """Duplicate probe identifiers are rejected."""
    path = tmp_path / "coefs.csv"
    path.write_text("probe;M\n(Intercept);0.5\ncg01;1.0\ncg01;2.0\n")
    with pytest.raises(MalformedInputError, match="duplicate"):
        load_coefficients(path)

def test_custom_intercept_label(tmp_path):
    """The intercept sentinel is configurable."""
    path = tmp_path / "coefs.csv"
    path.write_text("probe;M\nintercept;0.5\ncg01;1.0\n")
    table = load_coefficients(path, intercept_label="intercept")
    assert intercept(table, "M", intercept_label="intercept") == 0.5

def test_empty_file(tmp_path):
    """An empty coefficient file is malformed and names the file."""
    path = tmp_path / "coefs.csv"
    path.write_text("")
    with pytest.raises(MalformedInputError, match="coefs.csv"):
        load_coefficients(path)
