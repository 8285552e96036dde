"""Supported SMT-LIB logics and the generation profile of each.

A profile groups logics that share one generation pipeline (the
*family*) and records the per-logic switches within that family.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from fuzzsmt.core.errors import ConfigurationError


class Logic(Enum):
    QF_A = "QF_A"
    QF_AX = "QF_AX"
    QF_ABV = "QF_ABV"
    QF_AUFBV = "QF_AUFBV"
    QF_AUFLIA = "QF_AUFLIA"
    AUFLIA = "AUFLIA"
    AUFLIRA = "AUFLIRA"
    AUFNIRA = "AUFNIRA"
    QF_BV = "QF_BV"
    QF_UFBV = "QF_UFBV"
    QF_IDL = "QF_IDL"
    QF_UFIDL = "QF_UFIDL"
    QF_RDL = "QF_RDL"
    QF_UFRDL = "QF_UFRDL"
    QF_LIA = "QF_LIA"
    QF_UFLIA = "QF_UFLIA"
    QF_NIA = "QF_NIA"
    QF_UFNIA = "QF_UFNIA"
    QF_LRA = "QF_LRA"
    QF_UFLRA = "QF_UFLRA"
    LRA = "LRA"
    QF_NRA = "QF_NRA"
    QF_UFNRA = "QF_UFNRA"
    QF_UF = "QF_UF"


class Family(Enum):
    ARRAY = "array"              # Index/Element arrays
    BV = "bv"
    BV_ARRAY = "bv_array"
    INT_ARRAY = "int_array"      # Array(Int, Int)
    MIXED_ARRAY = "mixed_array"  # Array(Int, Real) and Array(Int, Array(Int, Real))
    IDL = "idl"
    RDL = "rdl"
    INT = "int"
    REAL = "real"
    UF = "uf"


@dataclass(frozen=True)
class LogicProfile:
    family: Family
    uninterpreted: bool = False
    linear: bool = True
    quantified: bool = False
    array_equalities: bool = False
    guarded_division: bool = False


PROFILES: Dict[Logic, LogicProfile] = {
    Logic.QF_A: LogicProfile(Family.ARRAY),
    Logic.QF_AX: LogicProfile(Family.ARRAY, array_equalities=True),
    Logic.QF_ABV: LogicProfile(Family.BV_ARRAY, guarded_division=True),
    Logic.QF_AUFBV: LogicProfile(Family.BV_ARRAY, uninterpreted=True, guarded_division=True),
    Logic.QF_AUFLIA: LogicProfile(Family.INT_ARRAY, uninterpreted=True),
    Logic.AUFLIA: LogicProfile(Family.INT_ARRAY, uninterpreted=True, quantified=True),
    Logic.AUFLIRA: LogicProfile(Family.MIXED_ARRAY, uninterpreted=True, quantified=True),
    Logic.AUFNIRA: LogicProfile(Family.MIXED_ARRAY, uninterpreted=True, linear=False, quantified=True),
    Logic.QF_BV: LogicProfile(Family.BV, guarded_division=True),
    Logic.QF_UFBV: LogicProfile(Family.BV, uninterpreted=True, guarded_division=True),
    Logic.QF_IDL: LogicProfile(Family.IDL),
    Logic.QF_UFIDL: LogicProfile(Family.IDL, uninterpreted=True),
    Logic.QF_RDL: LogicProfile(Family.RDL),
    Logic.QF_UFRDL: LogicProfile(Family.RDL, uninterpreted=True),
    Logic.QF_LIA: LogicProfile(Family.INT),
    Logic.QF_UFLIA: LogicProfile(Family.INT, uninterpreted=True),
    Logic.QF_NIA: LogicProfile(Family.INT, linear=False),
    Logic.QF_UFNIA: LogicProfile(Family.INT, uninterpreted=True, linear=False),
    Logic.QF_LRA: LogicProfile(Family.REAL),
    Logic.QF_UFLRA: LogicProfile(Family.REAL, uninterpreted=True),
    Logic.LRA: LogicProfile(Family.REAL),
    Logic.QF_NRA: LogicProfile(Family.REAL, linear=False),
    Logic.QF_UFNRA: LogicProfile(Family.REAL, uninterpreted=True, linear=False),
    Logic.QF_UF: LogicProfile(Family.UF, uninterpreted=True),
}


def logic_names() -> List[str]:
    return sorted(logic.value for logic in Logic)


def parse_logic(name: str) -> Logic:
    """Return the :class:`Logic` called *name* (case-sensitive)."""
    try:
        return Logic(name)
    except ValueError:
        raise ConfigurationError(f"invalid logic: {name}") from None


def profile_of(logic: Logic) -> LogicProfile:
    return PROFILES[logic]
