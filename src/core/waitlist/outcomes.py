from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Inserted:
    email: str


@dataclass(frozen=True)
class Duplicate:
    email: str


@dataclass(frozen=True)
class SchemaError:
    message: str


InsertOutcome = Union[Inserted, Duplicate, SchemaError]
