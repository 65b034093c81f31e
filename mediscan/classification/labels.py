"""Status labels, reference-range kinds and the label set allowed per kind."""

NORMAL = "Normal"
SLIGHTLY_LOW = "Slightly Low"
LOW = "Low"
CRITICAL_LOW = "Critical Low"
SLIGHTLY_HIGH = "Slightly High"
HIGH = "High"
ELEVATED = "Elevated"
CRITICAL_HIGH = "Critical High"
POSITIVE = "Positive"
INDETERMINATE = "Indeterminate"

ALL_LABELS = frozenset({
    NORMAL,
    SLIGHTLY_LOW,
    LOW,
    CRITICAL_LOW,
    SLIGHTLY_HIGH,
    HIGH,
    ELEVATED,
    CRITICAL_HIGH,
    POSITIVE,
    INDETERMINATE,
})

KIND_NUMERIC = "numeric"
KIND_QUALITATIVE = "qualitative"
KIND_GREATER_THAN = "greater_than"
KIND_LESS_THAN = "less_than"

RANGE_KINDS = frozenset({KIND_NUMERIC, KIND_QUALITATIVE, KIND_GREATER_THAN, KIND_LESS_THAN})

_QUALITATIVE_LABELS = frozenset({NORMAL, POSITIVE, INDETERMINATE})

LABELS_BY_KIND: dict[str | None, frozenset[str]] = {
    KIND_QUALITATIVE: _QUALITATIVE_LABELS,
    KIND_NUMERIC: frozenset({
        NORMAL,
        SLIGHTLY_LOW,
        LOW,
        CRITICAL_LOW,
        SLIGHTLY_HIGH,
        HIGH,
        ELEVATED,
        CRITICAL_HIGH,
        INDETERMINATE,
    }),
    KIND_GREATER_THAN: frozenset({NORMAL, LOW, INDETERMINATE}),
    KIND_LESS_THAN: frozenset({NORMAL, HIGH, INDETERMINATE}),
    None: _QUALITATIVE_LABELS,
}

# Slightly and plain out-of-range labels share a tier: the band right next to
# a bound is labelled Low/High, the next one out Slightly Low/Slightly High.
SEVERITY_RANK: dict[str, int] = {
    NORMAL: 0,
    INDETERMINATE: 0,
    SLIGHTLY_LOW: 1,
    LOW: 1,
    SLIGHTLY_HIGH: 1,
    HIGH: 1,
    POSITIVE: 1,
    ELEVATED: 2,
    CRITICAL_LOW: 3,
    CRITICAL_HIGH: 3,
}

# Labels that count as findings for interpretation and summaries.
ABNORMAL_LABELS = frozenset(ALL_LABELS - {NORMAL, INDETERMINATE})


def severity_rank(label: str) -> int:
    """Return the severity tier of a label; unknown labels rank as 0."""
    return SEVERITY_RANK.get(label, 0)


def allowed_labels(kind: str | None) -> frozenset[str]:
    """Return the labels a classification of the given range kind may produce."""
    return LABELS_BY_KIND.get(kind, _QUALITATIVE_LABELS)
