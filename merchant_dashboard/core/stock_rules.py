from merchant_dashboard.core.constants import DEFAULT_LOW_STOCK_THRESHOLD, STOCK_STATUSES

OUT_OF_STOCK, LOW_STOCK, IN_STOCK = STOCK_STATUSES

_STATUS_RANK = {status: rank for rank, status in enumerate(STOCK_STATUSES)}

STATUS_FILTER_ALIASES = {
    "in-stock": IN_STOCK,
    "in_stock": IN_STOCK,
    "low-stock": LOW_STOCK,
    "low_stock": LOW_STOCK,
    "out-of-stock": OUT_OF_STOCK,
    "out_of_stock": OUT_OF_STOCK,
}


def resolve_threshold(value) -> int:
    """Per-product threshold; unset or zero falls back to the default."""
    if not value:
        return DEFAULT_LOW_STOCK_THRESHOLD
    return int(value)


def classify_stock(available, threshold) -> str:
    available = available or 0
    if available <= 0:
        return OUT_OF_STOCK
    if available <= resolve_threshold(threshold):
        return LOW_STOCK
    return IN_STOCK


def status_rank(status: str) -> int:
    return _STATUS_RANK[status]


def normalize_status_filter(value):
    if value is None:
        return None
    key = str(value).strip().lower()
    if not key or key == "all":
        return None
    return STATUS_FILTER_ALIASES.get(key.replace(" ", "-"))
