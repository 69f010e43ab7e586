"""
ObjectivesData / IndicatorsData: versioned in-memory collections.

Mirrors objectives.json and indicators.json. Nothing here touches disk;
storage.load_or_create_* / save_* do the I/O.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from focusfive.config import LIMITS
from focusfive.models import OutcomeType, utc_now
from focusfive.tracking.models import IndicatorDef, Objective, ObjectiveStatus


@dataclass
class ObjectivesData:
    version: int = LIMITS.SCHEMA_VERSION
    objectives: List[Objective] = field(default_factory=list)

    def add(self, objective: Objective) -> Objective:
        self.objectives.append(objective)
        return objective

    def get(self, objective_id: str) -> Optional[Objective]:
        for objective in self.objectives:
            if objective.id == objective_id:
                return objective
        return None

    def by_domain(self, domain: OutcomeType) -> List[Objective]:
        domain = OutcomeType(domain)
        return [o for o in self.objectives if o.domain == domain]

    def active(self, domain: Optional[OutcomeType] = None) -> List[Objective]:
        candidates = self.by_domain(domain) if domain is not None else self.objectives
        return [o for o in candidates if o.status == ObjectiveStatus.ACTIVE]

    def children(self, parent_id: str) -> List[Objective]:
        return [o for o in self.objectives if o.parent_id == parent_id]


@dataclass
class IndicatorsData:
    version: int = LIMITS.SCHEMA_VERSION
    indicators: List[IndicatorDef] = field(default_factory=list)

    def add(self, indicator: IndicatorDef) -> IndicatorDef:
        self.indicators.append(indicator)
        return indicator

    def get(self, indicator_id: str) -> Optional[IndicatorDef]:
        for indicator in self.indicators:
            if indicator.id == indicator_id:
                return indicator
        return None

    def active(self) -> List[IndicatorDef]:
        return [i for i in self.indicators if i.active]

    def for_objective(self, objective_id: str) -> List[IndicatorDef]:
        return [i for i in self.indicators if i.objective_id == objective_id]

    def supersede(self, old_id: str, replacement: IndicatorDef) -> IndicatorDef:
        """
        Replace an indicator definition while keeping its history linked.

        The old definition is deactivated (never deleted) and the replacement
        records it in `lineage_of`.

        Raises:
            KeyError: if old_id is unknown
        """
        old = self.get(old_id)
        if old is None:
            raise KeyError(old_id)
        old.deactivate()
        replacement.lineage_of = old.id
        replacement.modified = utc_now()
        return self.add(replacement)

    def lineage(self, indicator_id: str) -> List[IndicatorDef]:
        """Return the chain of predecessors, newest first."""
        chain = []
        seen = set()
        current = self.get(indicator_id)
        while current is not None and current.id not in seen:
            chain.append(current)
            seen.add(current.id)
            current = self.get(current.lineage_of) if current.lineage_of else None
        return chain
