"""Fair winner selection for the spin wheel.

Only `draw_winner_index` decides who wins and it always uses the OS CSPRNG.
Everything else here is presentation: where the wheel stops inside the
winner's segment, how many extra turns it makes and how long it spins.
Those draws go through a separate source so they can never influence the
winner.
"""

import secrets
import time
from dataclasses import dataclass
from typing import Callable, Sequence

from src.domain.errors import InvalidRequest
from src.domain.spin_proof import ProofCodec, SpinOutcome

FULL_TURN = 360.0
MAX_EDGE_BUFFER = 3.0
EDGE_BUFFER_RATIO = 0.2
MIN_EXTRA_TURNS = 6
EXTRA_TURNS_JITTER = 5
BASE_DURATION_MS = 4200
DURATION_JITTER_MS = 1800
PROOF_TTL_MS = 60 * 1000


@dataclass(frozen=True)
class SpinResult:
    winner_item_id: int
    winner_index: int
    target_angle: float
    extra_turns: int
    duration_ms: int
    proof: str


def now_ms() -> int:
    return int(time.time() * 1000)


def is_positive_id(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def draw_winner_index(candidate_count: int) -> int:
    """Draw the winning position uniformly from [0, candidate_count)."""
    if candidate_count <= 0:
        raise InvalidRequest("candidateItemIds must not be empty.")
    return secrets.randbelow(candidate_count)


def edge_buffer_for(segment_angle: float) -> float:
    return min(segment_angle * EDGE_BUFFER_RATIO, MAX_EDGE_BUFFER)


def normalize_angle(angle: float) -> float:
    """Reduce an angle in degrees to [0, 360)."""
    normalized = angle % FULL_TURN
    # float modulo can round up to exactly 360 for tiny negative inputs
    if normalized >= FULL_TURN:
        normalized = 0.0
    return normalized


class FairSpinEngine:
    def __init__(
        self,
        codec: ProofCodec,
        presentation_rng=None,
        clock: Callable[[], int] = now_ms,
    ):
        self.codec = codec
        self.presentation_rng = presentation_rng or secrets.SystemRandom()
        self.clock = clock

    def resting_offset(self, segment_angle: float) -> float:
        """Offset of the indicator inside the winner's segment, away from its edges."""
        edge_buffer = edge_buffer_for(segment_angle)
        low = edge_buffer
        high = segment_angle - edge_buffer
        if high <= low:
            return segment_angle / 2
        return self.presentation_rng.uniform(low, high)

    def spin(self, requester_item_id: int, candidate_item_ids: Sequence[int]) -> SpinResult:
        """Pick a winner among the candidates and attest the outcome.

        The candidate list is used positionally; callers deduplicate it.

        Args:
            requester_item_id (int): Item staked by the spinning user
            candidate_item_ids (Sequence[int]): Pool of counterpart items

        Raises:
            InvalidRequest: Empty pool or ids that are not positive integers

        Returns:
            SpinResult: Winner, wheel parameters and signed proof
        """
        if not is_positive_id(requester_item_id):
            raise InvalidRequest("requesterItemId must be a positive integer.")
        candidates = tuple(candidate_item_ids or ())
        if not candidates:
            raise InvalidRequest("candidateItemIds must not be empty.")
        if not all(is_positive_id(item_id) for item_id in candidates):
            raise InvalidRequest("candidateItemIds must contain positive integers only.")

        candidate_count = len(candidates)
        winner_index = draw_winner_index(candidate_count)

        segment_angle = FULL_TURN / candidate_count
        winner_angle = winner_index * segment_angle + self.resting_offset(segment_angle)
        target_angle = normalize_angle(FULL_TURN - winner_angle)
        extra_turns = int(FULL_TURN) * (
            MIN_EXTRA_TURNS + self.presentation_rng.randint(0, EXTRA_TURNS_JITTER)
        )
        duration_ms = BASE_DURATION_MS + self.presentation_rng.randint(0, DURATION_JITTER_MS)

        issued_at = self.clock()
        outcome = SpinOutcome(
            requester_item_id=requester_item_id,
            winner_item_id=candidates[winner_index],
            candidate_item_ids=candidates,
            issued_at=issued_at,
            expires_at=issued_at + PROOF_TTL_MS,
        )
        return SpinResult(
            winner_item_id=outcome.winner_item_id,
            winner_index=winner_index,
            target_angle=target_angle,
            extra_turns=extra_turns,
            duration_ms=duration_ms,
            proof=self.codec.sign(outcome),
        )


def resting_angle(target_angle: float) -> float:
    """Angle of the winner under the indicator for a given wheel rotation."""
    return normalize_angle(FULL_TURN - target_angle)


def segment_bounds(winner_index: int, candidate_count: int) -> tuple[float, float]:
    segment_angle = FULL_TURN / candidate_count
    return winner_index * segment_angle, (winner_index + 1) * segment_angle


def is_clear_of_edges(target_angle: float, winner_index: int, candidate_count: int) -> bool:
    """True when the resting angle sits inside the winner's segment, off its edges."""
    low, high = segment_bounds(winner_index, candidate_count)
    edge_buffer = edge_buffer_for(high - low)
    angle = resting_angle(target_angle)
    tolerance = 1e-9
    return low + edge_buffer - tolerance <= angle <= high - edge_buffer + tolerance
