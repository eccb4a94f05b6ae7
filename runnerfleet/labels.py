"""Label maps and label selectors."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = [
    "LABEL_KEY_RUNNER_TEMPLATE_HASH",
    "LABEL_KEY_RUNNER_DEPLOYMENT_NAME",
    "LabelSelectorRequirement",
    "LabelSelector",
    "clone_and_add_label",
    "clone_selector_and_add_label",
    "filter_labels",
    "get_int_or_default",
]

LABEL_KEY_RUNNER_TEMPLATE_HASH = "runner-template-hash"
LABEL_KEY_RUNNER_DEPLOYMENT_NAME = "runner-deployment-name"


@dataclass
class LabelSelectorRequirement:
    """A single set-based selector requirement."""

    key: str
    operator: str
    values: list[str] | None = None


@dataclass
class LabelSelector:
    """Selects objects by exact labels and set-based requirements."""

    match_labels: dict[str, str] | None = None
    match_expressions: list[LabelSelectorRequirement] | None = None


def clone_and_add_label(
    labels: dict[str, str] | None, label_key: str, label_value: str
) -> dict[str, str] | None:
    """Return a copy of ``labels`` with the label added.

    The given mapping itself is returned when ``label_key`` is empty.
    """
    if label_key == "":
        return labels
    cloned = dict(labels or {})
    cloned[label_key] = label_value
    return cloned


def clone_selector_and_add_label(
    selector: LabelSelector, label_key: str, label_value: str
) -> LabelSelector:
    """Return a deep copy of ``selector`` that also matches the given label.

    The given selector itself is returned when ``label_key`` is empty.
    """
    if label_key == "":
        return selector

    match_labels = dict(selector.match_labels or {})
    match_labels[label_key] = label_value

    expressions = None
    if selector.match_expressions is not None:
        expressions = [
            LabelSelectorRequirement(
                key=req.key,
                operator=req.operator,
                values=list(req.values) if req.values is not None else None,
            )
            for req in selector.match_expressions
        ]

    return LabelSelector(match_labels=match_labels, match_expressions=expressions)


def filter_labels(labels: dict[str, str], filter_key: str) -> dict[str, str]:
    """Return a copy of ``labels`` without ``filter_key``."""
    return {key: value for key, value in labels.items() if key != filter_key}


def get_int_or_default(value: int | None, default: int) -> int:
    """Return ``value`` unless it is None."""
    return default if value is None else value