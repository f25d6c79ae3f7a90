"""Rubric rating domains."""

from enum import Enum


class Truthfulness(str, Enum):
    CORRECT = "CORRECT"
    MINOR_ERRORS = "MINOR_ERRORS"
    MAJOR_ERRORS = "MAJOR_ERRORS"


class Detail(str, Enum):
    TOO_SHORT = "TOO_SHORT"
    BALANCED = "BALANCED"
    TOO_LONG = "TOO_LONG"


class Safety(str, Enum):
    SAFE = "SAFE"
    UNSAFE = "UNSAFE"


class Quality(str, Enum):
    BAD = "BAD"
    OKAY = "OKAY"
    GOOD = "GOOD"
    EXCELLENT = "EXCELLENT"
