"""
Catalog of application stages.

Ranks order the main line PENDING -> REVIEWED -> SHORTLISTED -> INTERVIEWED
-> ACCEPTED. REJECTED is a terminal side branch without a rank, reachable
from any open stage.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from talent_pipeline.data.models import StageId

from .errors import UnknownStageError


@dataclass(frozen=True)
class Stage:
    """A stage of the review lifecycle."""

    id: StageId
    label: str
    description: str
    rank: Optional[int]
    terminal: bool = False


DEFAULT_STAGES: tuple[Stage, ...] = (
    Stage(
        id=StageId.PENDING,
        label="Pending Review",
        description="Application received and waiting for initial review",
        rank=1,
    ),
    Stage(
        id=StageId.REVIEWED,
        label="Under Review",
        description="Application is being evaluated by the hiring team",
        rank=2,
    ),
    Stage(
        id=StageId.SHORTLISTED,
        label="Shortlisted",
        description="Candidate has been shortlisted for further consideration",
        rank=3,
    ),
    Stage(
        id=StageId.INTERVIEWED,
        label="Interviewed",
        description="Candidate has completed the interview process",
        rank=4,
    ),
    Stage(
        id=StageId.ACCEPTED,
        label="Accepted",
        description="Offer has been extended and accepted",
        rank=5,
        terminal=True,
    ),
    Stage(
        id=StageId.REJECTED,
        label="Rejected",
        description="Application was declined by the hiring team",
        rank=None,
        terminal=True,
    ),
)


class StageRegistry:
    """Immutable lookup over a set of stages."""

    def __init__(self, stages: Iterable[Stage] = DEFAULT_STAGES):
        stages = tuple(stages)

        ids = [s.id for s in stages]
        if len(set(ids)) != len(ids):
            raise ValueError("Stage ids must be unique")

        ranks = [s.rank for s in stages if s.rank is not None]
        if len(set(ranks)) != len(ranks):
            raise ValueError("Stage ranks must be unique")

        ranked = sorted((s for s in stages if s.rank is not None), key=lambda s: s.rank)
        unranked = [s for s in stages if s.rank is None]
        if any(not s.terminal for s in unranked):
            raise ValueError("Only terminal stages may be left without a rank")

        self._ordered: tuple[Stage, ...] = tuple(ranked + unranked)
        self._by_id: dict[StageId, Stage] = {s.id: s for s in self._ordered}

    @staticmethod
    def _coerce(stage_id: StageId | str) -> StageId:
        if isinstance(stage_id, StageId):
            return stage_id
        try:
            return StageId(str(stage_id).upper())
        except ValueError:
            raise UnknownStageError(stage_id) from None

    def list_stages(self) -> list[Stage]:
        """All stages, ranked ones first in ascending rank."""
        return list(self._ordered)

    def main_line(self) -> list[Stage]:
        """Ranked stages only, in progression order."""
        return [s for s in self._ordered if s.rank is not None]

    def get_stage(self, stage_id: StageId | str) -> Stage:
        key = self._coerce(stage_id)
        try:
            return self._by_id[key]
        except KeyError:
            raise UnknownStageError(stage_id) from None

    def is_terminal(self, stage_id: StageId | str) -> bool:
        return self.get_stage(stage_id).terminal

    def rank_of(self, stage_id: StageId | str) -> Optional[int]:
        """Rank on the main line, or None for a side-branch stage."""
        return self.get_stage(stage_id).rank

    def next_stage(self, stage_id: StageId | str) -> Optional[Stage]:
        """The stage with the next-higher rank, if any."""
        rank = self.rank_of(stage_id)
        if rank is None:
            return None
        for stage in self.main_line():
            if stage.rank > rank:
                return stage
        return None

    def __contains__(self, stage_id: object) -> bool:
        try:
            self.get_stage(stage_id)  # type: ignore[arg-type]
        except UnknownStageError:
            return False
        return True


# Singleton instance
_stage_registry: Optional[StageRegistry] = None


def get_stage_registry() -> StageRegistry:
    """Get the default stage registry."""
    global _stage_registry
    if _stage_registry is None:
        _stage_registry = StageRegistry()
    return _stage_registry
