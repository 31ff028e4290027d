# agromarket/analysis.py
"""
Mock crop health analysis and listing coordinates.

There is no detection model behind this: the result is a weighted coin flip,
and the coordinate is a fixed base point with random jitter.
"""
from __future__ import annotations

import random
from typing import Optional

from agromarket import schemas

HEALTHY_PROBABILITY = 0.7
BASE_LAT = 28.6139
BASE_LNG = 77.2090

LEAF_BLIGHT = {
    "disease_name": "Leaf Blight",
    "confidence": 0.85,
    "remedy": "Apply fungicide and ensure proper drainage",
}


def diseased_analysis() -> schemas.DiseaseAnalysis:
    return schemas.DiseaseAnalysis(is_healthy=False, **LEAF_BLIGHT)


def healthy_analysis() -> schemas.DiseaseAnalysis:
    return schemas.DiseaseAnalysis(is_healthy=True)


def mock_disease_analysis(rng: Optional[random.Random] = None) -> schemas.DiseaseAnalysis:
    rng = rng or random.Random()
    if rng.random() < HEALTHY_PROBABILITY:
        return healthy_analysis()
    return diseased_analysis()


def jitter_location(
    address: str,
    rng: Optional[random.Random] = None,
    *,
    spread: float = 0.1,
) -> schemas.Location:
    """Base point shifted by up to +/- spread/2 degrees on each axis."""
    rng = rng or random.Random()
    return schemas.Location(
        lat=BASE_LAT + (rng.random() - 0.5) * spread,
        lng=BASE_LNG + (rng.random() - 0.5) * spread,
        address=address,
    )
