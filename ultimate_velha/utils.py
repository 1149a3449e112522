"""Utility helpers shared by the match runner and the command line."""
from __future__ import annotations

import logging
from typing import Optional, Union

import numpy as np

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(None if seed is None else seed % (2**32))


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


__all__ = [
    "LOG_FORMAT",
    "configure_logging",
    "make_rng",
]
