"""
Entity Classifier.

Separates country rows (valid ISO alpha-3 code, not "World") from aggregate
rows (World totals, OWID regional rollups, blank codes).  The partition is
computed fresh for each chart; the source set is a few thousand rows at most.
"""

from typing import Iterable, List

from ..models.data_models import CanonicalRecord, EntityPartition


def is_country(record: CanonicalRecord) -> bool:
    return record.is_country


def partition_entities(records: Iterable[CanonicalRecord]) -> EntityPartition:
    """Split records into countries and aggregates, preserving order."""
    partition = EntityPartition()
    for record in records:
        if record.is_country:
            partition.countries.append(record)
        else:
            partition.aggregates.append(record)
    return partition


def country_records(records: Iterable[CanonicalRecord]) -> List[CanonicalRecord]:
    return [r for r in records if r.is_country]


def aggregate_records(records: Iterable[CanonicalRecord]) -> List[CanonicalRecord]:
    return [r for r in records if not r.is_country]


def world_records(records: Iterable[CanonicalRecord]) -> List[CanonicalRecord]:
    """Aggregate rows for the World entity, whatever their code."""
    return [r for r in records if r.is_world]
