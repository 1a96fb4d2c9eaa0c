from __future__ import annotations

from collections.abc import Callable, Iterable

import pytest

from baselineguard.lookup import StaticFeatureLookup
from baselineguard.model import BaselineStatus, FeatureRecord
from baselineguard.patterns import BUILTIN_RULES


def make_lookup(
    feature_ids: Iterable[str],
    status: BaselineStatus = "newly",
) -> StaticFeatureLookup:
    return StaticFeatureLookup(
        FeatureRecord(feature_id=feature_id, name=feature_id.title(), baseline_status=status)
        for feature_id in feature_ids
    )


@pytest.fixture
def lookup() -> StaticFeatureLookup:
    return make_lookup({rule.feature_id for rule in BUILTIN_RULES})


@pytest.fixture
def lookup_factory() -> Callable[..., StaticFeatureLookup]:
    return make_lookup
