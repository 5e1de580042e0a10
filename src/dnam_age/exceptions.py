"""
dnam_age.exceptions

Error types raised by the loaders and the predictor.
Missing beta values or ages are not errors: they travel as NaN.
"""


class DNAmAgeError(Exception):
    """Base class for every error raised by dnam_age."""


class MalformedInputError(DNAmAgeError, ValueError):
    """An input file or descriptor record could not be parsed."""

    def __init__(self, message: str, source: str = None, record=None):
        self.source = source
        self.record = record
        parts = []
        if source:
            parts.append(str(source))
        if record is not None:
            parts.append(f"record {record}")
        prefix = f"[{', '.join(parts)}] " if parts else ""
        super().__init__(f"{prefix}{message}")


class UnknownModelError(DNAmAgeError, KeyError):
    """A requested model variant is not a column of the coefficient table."""

    def __init__(self, model: str, available):
        self.model = model
        self.available = list(available)
        super().__init__(model)

    def __str__(self) -> str:
        return f"unknown model '{self.model}'; available models: {self.available}"


class MissingProbesError(DNAmAgeError):
    """Raised in strict mode when model probes are absent from the methylation matrix."""

    def __init__(self, model: str, missing):
        self.model = model
        self.missing = sorted(missing)
        preview = self.missing[:5]
        super().__init__(
            f"model '{model}' references {len(self.missing)} probes missing from the matrix: {preview}"
        )
