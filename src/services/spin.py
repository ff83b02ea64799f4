"""Spin use cases. Builds the engine around the currently provisioned secret."""

import logging
from typing import Sequence

from src import load_secrets
from src.domain.errors import InvalidRequest, ServiceUnavailable, VerificationError
from src.domain.fair_spin import FairSpinEngine, SpinResult, now_ms
from src.domain.spin_proof import ProofCodec, SpinOutcome


def get_proof_codec() -> ProofCodec:
    """Codec for the configured secret.

    Raises:
        ServiceUnavailable: SPIN_PROOF_SECRET is not provisioned
    """
    secret = load_secrets.spin_proof_secret
    if not secret:
        logging.error("SPIN_PROOF_SECRET is not set; refusing to issue or check spin proofs")
        raise ServiceUnavailable("Spin service is unavailable.")
    return ProofCodec(secret)


def run_spin(requester_item_id: int, candidate_item_ids: Sequence[int]) -> SpinResult:
    engine = FairSpinEngine(get_proof_codec())
    result = engine.spin(requester_item_id, candidate_item_ids)
    logging.info(
        f"spin: requester_item={requester_item_id} pool={len(candidate_item_ids)} "
        f"winner_item={result.winner_item_id}"
    )
    return result


def verify_spin_proof(proof: str) -> SpinOutcome:
    """Verify a proof, hiding the failure reason from the caller.

    Raises:
        ServiceUnavailable: No signing secret
        InvalidRequest: Tampered or expired proof (the reason is logged)
    """
    codec = get_proof_codec()
    try:
        return codec.verify(proof, now_ms())
    except VerificationError as e:
        logging.warning(f"Rejected spin proof: {type(e).__name__}: {e}")
        raise InvalidRequest("Spin proof is invalid or expired.") from e
