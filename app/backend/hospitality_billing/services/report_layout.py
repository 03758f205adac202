"""Filtering, ordering and pagination of aggregated report matrices."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from hospitality_billing.models.entities import PackageType
from hospitality_billing.services.aggregation import ProductInfo, ReportMatrix

PACKAGE_TYPE_ORDER = [PackageType.NORMAL, PackageType.EXTRA, PackageType.COLD_DRINK]

PACKAGE_TYPE_DISPLAY: dict[PackageType, str] = {
    PackageType.NORMAL: "CATERING PACKAGE",
    PackageType.EXTRA: "EXTRA CATERING PACKAGE",
    PackageType.COLD_DRINK: "COLD DRINKS PACKAGE",
}

EARLY_ARRIVAL = "early_arrival"
LATE_DEPARTURE = "late_departure"


class MealSlot(str, enum.Enum):
    """Serving order of catering products through the day."""

    MORNING_TEA = "Morning Tea"
    BREAKFAST = "Breakfast"
    MORNING_CRT = "Morning CRT"
    LUNCH = "LUNCH"
    AFTERNOON_CRT = "Afternoon CRT"
    HI_TEA = "Hi-TEA"
    DINNER = "DINNER"


MEAL_SLOT_RANK: dict[MealSlot, int] = {slot: rank for rank, slot in enumerate(MealSlot)}


def normalize_product_name(name: str) -> str:
    return re.sub(r"[^A-Z0-9]", "", name.strip().upper())


_EXACT_RANK = {slot.value.lower(): rank for slot, rank in MEAL_SLOT_RANK.items()}
_NORMALIZED_RANK = {normalize_product_name(slot.value): rank for slot, rank in MEAL_SLOT_RANK.items()}


def catering_rank(name: str) -> int | None:
    """Rank a product name against the meal slots.

    Tiers: exact case-insensitive name, normalized name, then normalized
    substring containment in slot order. ``None`` means unmatched.
    """

    exact = _EXACT_RANK.get(name.strip().lower())
    if exact is not None:
        return exact

    normalized = normalize_product_name(name)
    if not normalized:
        return None
    if normalized in _NORMALIZED_RANK:
        return _NORMALIZED_RANK[normalized]

    for slot_name, rank in _NORMALIZED_RANK.items():
        if slot_name in normalized or normalized in slot_name:
            return rank
    return None


def order_products(
    products: Sequence[ProductInfo],
    package_type: PackageType,
    serve_item_nos: Mapping[UUID, int] | None = None,
) -> list[ProductInfo]:
    """Sort products of one package type; stable for ties and unmatched names."""

    if package_type is PackageType.NORMAL:
        unmatched = len(MEAL_SLOT_RANK)

        def catering_key(product: ProductInfo) -> int:
            rank = catering_rank(product.name)
            return unmatched if rank is None else rank

        return sorted(products, key=catering_key)

    overrides = serve_item_nos or {}

    def serve_key(product: ProductInfo) -> int:
        value = overrides.get(product.id, product.serve_item_no)
        return value if value is not None else 0

    return sorted(products, key=serve_key)


def group_by_package_type(
    products: Iterable[ProductInfo],
    serve_item_nos: Mapping[UUID, int] | None = None,
) -> list[tuple[PackageType, list[ProductInfo]]]:
    grouped: dict[PackageType, list[ProductInfo]] = {}
    for product in products:
        grouped.setdefault(product.package_type, []).append(product)

    ordered_types = [t for t in PACKAGE_TYPE_ORDER if t in grouped]
    ordered_types += [t for t in grouped if t not in PACKAGE_TYPE_ORDER]
    return [
        (package_type, order_products(grouped[package_type], package_type, serve_item_nos))
        for package_type in ordered_types
    ]


def active_buckets(matrix: ReportMatrix, buckets: Iterable[str], product_ids: Iterable[UUID]) -> list[str]:
    ids = list(product_ids)
    return [bucket for bucket in buckets if any(matrix.quantity(bucket, pid) > 0 for pid in ids)]


def active_products(matrix: ReportMatrix, products: Iterable[ProductInfo], buckets: Iterable[str]) -> list[ProductInfo]:
    keys = list(buckets)
    return [product for product in products if any(matrix.quantity(key, product.id) > 0 for key in keys)]


def chunk_products(products: Sequence[ProductInfo], size: int) -> list[list[ProductInfo]]:
    if size < 1:
        raise ValueError("chunk size must be positive")
    return [list(products[index : index + size]) for index in range(0, len(products), size)]


def chunk_buckets(buckets: Sequence[str], size: int) -> list[list[str]]:
    if size < 1:
        raise ValueError("chunk size must be positive")
    return [list(buckets[index : index + size]) for index in range(0, len(buckets), size)]


@dataclass(slots=True)
class ReportChunk:
    products: list[ProductInfo]
    buckets: list[str]


def build_chunks(
    matrix: ReportMatrix,
    products: Sequence[ProductInfo],
    buckets: Sequence[str],
    size: int,
) -> list[ReportChunk]:
    """Split ordered products into tables, keeping only buckets and chunks with consumption."""

    chunks: list[ReportChunk] = []
    for chunk in chunk_products(active_products(matrix, products, buckets), size):
        chunk_keys = active_buckets(matrix, buckets, (product.id for product in chunk))
        if not chunk_keys:
            continue
        chunks.append(ReportChunk(products=chunk, buckets=chunk_keys))
    return chunks


def columns_per_table(package_type: PackageType, *, catering_columns: int, wide_columns: int) -> int:
    if package_type is PackageType.NORMAL:
        return catering_columns
    return wide_columns


def boundary_flag(day: date, start_date: date, end_date: date) -> str | None:
    if day < start_date:
        return EARLY_ARRIVAL
    if day > end_date:
        return LATE_DEPARTURE
    return None
