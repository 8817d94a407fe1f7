"""Label model and Prometheus naming grammar validation."""

import re
from dataclasses import dataclass
from typing import Iterable, Mapping

from promrw.exceptions import LabelValidationError

LABEL_NAME_PATTERN = "^[a-zA-Z_:][a-zA-Z0-9_:]*$"
METRIC_NAME_LABEL = "__name__"

_label_name_re = re.compile(LABEL_NAME_PATTERN)


@dataclass(frozen=True)
class Label:
    """A single name/value pair attached to a time series."""

    name: str
    value: str

    def __str__(self) -> str:
        return f"{self.name}={self.value}"


def is_valid_name(text: str) -> bool:
    """Check whether text is a legal label or metric name."""
    return _label_name_re.fullmatch(text) is not None


def validate_labels(labels: Iterable[Label]) -> None:
    """
    Validate every label against the naming grammar.

    Label names must match ``^[a-zA-Z_:][a-zA-Z0-9_:]*$``. The value of the
    ``__name__`` label is the metric name, so it must match too. The first
    offending label aborts validation.

    Args:
        labels: Labels to check

    Raises:
        LabelValidationError: If a name or a metric name value is invalid
    """
    for label in labels:
        if not is_valid_name(label.name):
            raise LabelValidationError(
                f'label name "{label.name}" does not match the required regex: '
                f"{LABEL_NAME_PATTERN}",
                label=label.name,
                value=label.value,
                pattern=LABEL_NAME_PATTERN,
            )

        if label.name == METRIC_NAME_LABEL and not is_valid_name(label.value):
            raise LabelValidationError(
                f'label value "{label.value}" does not match the required regex: '
                f"{LABEL_NAME_PATTERN}",
                label=label.name,
                value=label.value,
                pattern=LABEL_NAME_PATTERN,
            )


def merge_labels(*groups: Iterable[Label]) -> list[Label]:
    """Concatenate label groups in order. Duplicate names are kept."""
    merged: list[Label] = []
    for group in groups:
        merged.extend(group)
    return merged


def labels_from_mapping(mapping: Mapping[str, str]) -> list[Label]:
    """Build labels from a mapping, keeping its iteration order."""
    return [Label(name=str(name), value=str(value)) for name, value in mapping.items()]


def parse_label(text: str) -> Label:
    """
    Parse a ``name=value`` string into a Label.

    Only the first ``=`` separates name from value, so values may contain
    ``=`` themselves.

    Raises:
        ValueError: If text has no ``=`` separator
    """
    name, sep, value = text.partition("=")
    if not sep:
        raise ValueError(f"Invalid label '{text}', expected name=value")
    return Label(name=name.strip(), value=value)
