import random

from fastapi import APIRouter, Depends

from app.services.metrics import IMetricsCollector, InstrumentKind
from app.services.tokenize import tokenize
from .metrics import get_collector

router = APIRouter(tags=["tokenize"])


def get_rng():
    """Random source for the coin flip; overridden in tests."""
    return random


@router.get("/tokenize_counter")
async def tokenize_counter(collector: IMetricsCollector = Depends(get_collector), rng=Depends(get_rng)):
    tokenize(collector, InstrumentKind.COUNTER, rng)
    return "Ok"


@router.get("/tokenize_histogram")
async def tokenize_histogram(collector: IMetricsCollector = Depends(get_collector), rng=Depends(get_rng)):
    tokenize(collector, InstrumentKind.HISTOGRAM, rng)
    return "Ok"


@router.get("/tokenize_gauge")
async def tokenize_gauge(collector: IMetricsCollector = Depends(get_collector), rng=Depends(get_rng)):
    tokenize(collector, InstrumentKind.GAUGE, rng)
    return "Ok"
