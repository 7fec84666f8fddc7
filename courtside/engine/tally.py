"""Count time votes and pick the winning candidate."""
from collections.abc import Iterable

from pydantic import BaseModel, Field

from courtside.engine.types import QUORUM, ParticipantSnapshot


class VoteTally(BaseModel):
    """Vote counts for one snapshot of a game.

    Attributes:
        candidates: Candidate times in declared order, primary time first.
        counts: Votes per candidate, in the same order as ``candidates``.
        stale_votes: Votes naming a time that is no longer a candidate.
            They count toward no candidate.
        abstentions: Participants without a vote.
    """
    candidates: list[str]
    counts: dict[str, int] = Field(default_factory=dict)
    stale_votes: int = 0
    abstentions: int = 0

    def winner(self, quorum: int = QUORUM) -> str | None:
        """
        Return the first candidate, in declared order, with at least
        ``quorum`` votes.

        Declared order makes the result deterministic when two candidates
        reach quorum in the same snapshot.
        """
        for candidate in self.candidates:
            if self.counts.get(candidate, 0) >= quorum:
                return candidate
        return None


def tally_votes(
    candidates: list[str], participants: Iterable[ParticipantSnapshot]
) -> VoteTally:
    """Count participant votes against the given candidate times."""
    counts = {candidate: 0 for candidate in candidates}
    stale = 0
    abstentions = 0

    for participant in participants:
        vote = participant.voted_time
        if not vote:
            abstentions += 1
        elif vote in counts:
            counts[vote] += 1
        else:
            stale += 1

    return VoteTally(
        candidates=list(counts), counts=counts, stale_votes=stale, abstentions=abstentions
    )
