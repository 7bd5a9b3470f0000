"""
Declarative rule table: state allow-list, private IP ranges and verdicts.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Any, FrozenSet, Iterable, Optional, Tuple

import yaml

from ..exceptions import ConfigurationError
from ..models.fraud_signal import FraudSignal, SignalType

logger = logging.getLogger(__name__)

# Optional sign then digits. Plain int() would also take spaces and underscores.
_OCTET = re.compile(r"[+-]?\d+")

DEFAULT_RULES_PATH =Path(__file__).resolve().parent.parent / "config" / "rules.yaml"

# Every outcome an evaluator can emit must have a verdict in the table.
REQUIRED_OUTCOMES: Dict[SignalType, Tuple[str, ...]] = {
    SignalType.LOCATION: (
        "invalid_state",
        "locations_match",
        "same_state",
        "locations_differ",
    ),
    SignalType.IP_ADDRESS: ("private_range", "not_private"),
    SignalType.TRANSACTION: ("items_missing_for_amount", "unremarkable"),
    SignalType.CARD_DETAILS: ("name_mismatch", "unremarkable"),
}


@dataclass(frozen=True)
class Verdict:
    """Fraud flag and reasons attached to one rule outcome."""

    potential_fraud: bool
    details: Tuple[str, ...]


@dataclass(frozen=True)
class OctetRange:
    """Addresses starting with ``prefix`` whose ``octet`` lies in [min, max]."""

    prefix: str
    octet: int
    min: int
    max: int

    def matches(self, ip_address: str) -> bool:
        if not ip_address.startswith(self.prefix):
            return False
        parts = ip_address.split(".")
        if self.octet >= len(parts):
            return False
        # Malformed octet is a non-match, not an error
        match = _OCTET.fullmatch(parts[self.octet])
        if not match:
            return False
        return self.min <= int(match.group()) <= self.max


class RuleTable:
    """Immutable lookup tables consulted by the evaluators."""

    def __init__(
        self,
        valid_states: Iterable[str],
        private_prefixes: Iterable[str],
        octet_ranges: Iterable[OctetRange],
        verdicts: Dict[SignalType, Dict[str, Verdict]],
    ):
        self.valid_states: FrozenSet[str] = frozenset(s.upper() for s in valid_states)
        self.private_prefixes: Tuple[str, ...] = tuple(private_prefixes)
        self.octet_ranges: Tuple[OctetRange, ...] = tuple(octet_ranges)
        self.verdicts = {
            signal_type: dict(outcomes) for signal_type, outcomes in verdicts.items()
        }
        self._check_complete()

    @classmethod
    def load(cls, path: Optional[str] = None) -> "RuleTable":
        """Load the rule table from YAML (the packaged table by default)."""
        rules_path = Path(path) if path else DEFAULT_RULES_PATH
        try:
            with open(rules_path, "r") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Error loading rule table {rules_path}: {e}", cause=e)

        table = cls.from_dict(data)
        logger.info(
            f"Loaded rule table from {rules_path}: {len(table.valid_states)} states, "
            f"{sum(len(v) for v in table.verdicts.values())} verdicts"
        )
        return table

    @classmethod
    def from_dict(cls, data: Any) -> "RuleTable":
        """Build a rule table from its parsed YAML form."""
        if not isinstance(data, dict):
            raise ConfigurationError("Rule table must be a mapping")

        try:
            states = data["valid_states"]
            private_ip = data.get("private_ip") or {}
            raw_verdicts = data["verdicts"]
        except KeyError as e:
            raise ConfigurationError(f"Rule table missing section: {e.args[0]}", cause=e)

        if not isinstance(states, list) or not all(isinstance(s, str) for s in states):
            raise ConfigurationError("valid_states must be a list of strings")

        try:
            octet_ranges = [
                OctetRange(
                    prefix=str(r["prefix"]),
                    octet=int(r["octet"]),
                    min=int(r["min"]),
                    max=int(r["max"]),
                )
                for r in private_ip.get("octet_ranges") or []
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid private_ip octet range: {e}", cause=e)

        verdicts: Dict[SignalType, Dict[str, Verdict]] = {}
        if not isinstance(raw_verdicts, dict):
            raise ConfigurationError("verdicts must be a mapping")
        for type_name, outcomes in raw_verdicts.items():
            try:
                signal_type = SignalType(type_name)
            except ValueError as e:
                raise ConfigurationError(f"Unknown signal type: {type_name}", cause=e)
            if not isinstance(outcomes, dict):
                raise ConfigurationError(f"Outcomes for {type_name} must be a mapping")
            verdicts[signal_type] = {
                outcome: cls._parse_verdict(type_name, outcome, raw)
                for outcome, raw in outcomes.items()
            }

        return cls(
            valid_states=states,
            private_prefixes=[str(p) for p in private_ip.get("prefixes") or []],
            octet_ranges=octet_ranges,
            verdicts=verdicts,
        )

    @staticmethod
    def _parse_verdict(type_name: str, outcome: str, raw: Any) -> Verdict:
        if not isinstance(raw, dict) or "potential_fraud" not in raw:
            raise ConfigurationError(f"Verdict {type_name}.{outcome} is malformed")
        details = raw.get("details")
        if (
            not isinstance(details, list)
            or not details
            or not all(isinstance(d, str) and d for d in details)
        ):
            raise ConfigurationError(
                f"Verdict {type_name}.{outcome} needs a non-empty details list"
            )
        return Verdict(
            potential_fraud=bool(raw["potential_fraud"]), details=tuple(details)
        )

    def _check_complete(self):
        for signal_type, outcomes in REQUIRED_OUTCOMES.items():
            known = self.verdicts.get(signal_type, {})
            missing = [o for o in outcomes if o not in known]
            if missing:
                raise ConfigurationError(
                    f"Rule table missing {signal_type.value} outcomes: {', '.join(missing)}"
                )

    def is_valid_state(self, state: str) -> bool:
        return state.upper() in self.valid_states

    def is_private_ip(self, ip_address: str) -> bool:
        if ip_address.startswith(self.private_prefixes):
            return True
        return any(r.matches(ip_address) for r in self.octet_ranges)

    def signal(self, signal_type: SignalType, outcome: str) -> FraudSignal:
        """Build the signal for a rule outcome."""
        verdict = self.verdicts[signal_type][outcome]
        return FraudSignal(
            signal_type=signal_type,
            potential_fraud=verdict.potential_fraud,
            details=verdict.details,
        )


@lru_cache(maxsize=1)
def default_rule_table() -> RuleTable:
    """The packaged rule table, loaded once."""
    return RuleTable.load()
