"""Script version and policy rules an analysis is performed under."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ScriptVersion(Enum):
    """Kind of script being executed."""

    LEGACY = "legacy"
    SEGWIT_V0 = "segwit_v0"
    SEGWIT_V1 = "segwit_v1"


class ScriptRules(Enum):
    """Which rule set is enforced: consensus only, or consensus plus standardness."""

    CONSENSUS_ONLY = "consensus_only"
    ALL = "all"


@dataclass(frozen=True)
class ScriptContext:
    """The version and rule set to evaluate a script with."""

    version: ScriptVersion
    rules: ScriptRules