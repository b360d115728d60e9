from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from protocol import RESPError, RESPValue


@dataclass(frozen=True)
class Success:
    value: RESPValue


@dataclass(frozen=True)
class Failure:
    message: str


Reply = Union[Success, Failure]


def classify(value: RESPValue) -> Reply:
    match value:
        case RESPError(message):
            return Failure(message)
        case _:
            return Success(value)
