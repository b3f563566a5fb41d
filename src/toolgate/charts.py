"""Chart configurations for directory listings.

Filters and transforms here are shipped to the client as source text (see
`toolgate.codec`). They must only use builtins: the client executes each
one on its own, with nothing from this module in scope.
"""

from __future__ import annotations

from typing import Any

from .codec import CodeDescriptor
from .envelope import ChartConfig, DataSource

# Half-open [low, high) bins in KB; the last bin is open-ended.
SIZE_BINS_KB: tuple[tuple[float, float | None], ...] = (
    (0, 1),
    (1, 10),
    (10, 100),
    (100, 1024),
    (1024, None),
)

# Bin filters use the exact byte count; the rounded "size" label is a fallback.
_BIN_FILTER_TEMPLATE = '''def in_size_bin(item):
    if item.get("type") != "file":
        return False
    size_bytes = item.get("sizeBytes")
    if size_bytes is not None:
        size = size_bytes / 1024
    else:
        size = float(str(item.get("size", "0")).split()[0])
    return {condition}
'''


def size_in_kb(size_str):
    """Parse a size label such as "2.50 KB" into a number of kilobytes."""
    return float(size_str.strip().split()[0])


def is_file(item):
    return item.get("type") == "file"


def bin_label(low: float, high: float | None) -> str:
    if high is None:
        return f">= {low:g} KB"
    return f"{low:g}-{high:g} KB"


def bin_for_size(size_kb: float) -> str:
    for low, high in SIZE_BINS_KB:
        if size_kb >= low and (high is None or size_kb < high):
            return bin_label(low, high)
    # Negative sizes never come from stat(); fold them into the first bin.
    return bin_label(*SIZE_BINS_KB[0])


def bin_filter(low: float, high: float | None) -> CodeDescriptor:
    if high is None:
        condition = f"size >= {low!r}"
    else:
        condition = f"{low!r} <= size < {high!r}"
    return CodeDescriptor(_BIN_FILTER_TEMPLATE.format(condition=condition))


def type_distribution_chart() -> ChartConfig:
    return ChartConfig(
        id="type-distribution",
        type="pie",
        title="Entry types",
        data_source=DataSource(field="type", aggregate="count"),
        options={"labels": {"folder": "Folders", "file": "Files"}},
    )


def size_distribution_chart() -> ChartConfig:
    bins: list[dict[str, Any]] = [
        {
            "label": bin_label(low, high),
            "min": low,
            "max": high,
            "filter": bin_filter(low, high),
        }
        for low, high in SIZE_BINS_KB
    ]
    return ChartConfig(
        id="size-distribution",
        type="bar",
        title="File size distribution",
        data_source=DataSource(
            field="size",
            aggregate="count",
            filter=is_file,
            transform=size_in_kb,
        ),
        options={"bins": bins, "xAxisLabel": "Size (KB)", "yAxisLabel": "Files"},
    )


def directory_charts() -> list[ChartConfig]:
    return [type_distribution_chart(), size_distribution_chart()]
