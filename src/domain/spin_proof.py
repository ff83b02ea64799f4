"""Signed, time-boxed proofs of a spin outcome.

A proof is ``base64url(canonical JSON of the outcome) + "." + base64url(HMAC-SHA256)``,
both segments unpadded. The HMAC covers the encoded payload bytes, so changing
any character of either segment makes the proof fail verification.
"""

import base64
import binascii
import hashlib
import hmac
import json
from dataclasses import dataclass

from src.domain.errors import ExpiredProof, TamperedProof


@dataclass(frozen=True)
class SpinOutcome:
    requester_item_id: int
    winner_item_id: int
    candidate_item_ids: tuple[int, ...]
    issued_at: int  # epoch milliseconds
    expires_at: int  # epoch milliseconds

    def to_payload(self) -> dict:
        return {
            "requesterItemId": self.requester_item_id,
            "winnerItemId": self.winner_item_id,
            "candidateItemIds": list(self.candidate_item_ids),
            "issuedAt": self.issued_at,
            "expiresAt": self.expires_at,
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "SpinOutcome":
        return cls(
            requester_item_id=int(payload["requesterItemId"]),
            winner_item_id=int(payload["winnerItemId"]),
            candidate_item_ids=tuple(int(item_id) for item_id in payload["candidateItemIds"]),
            issued_at=int(payload["issuedAt"]),
            expires_at=int(payload["expiresAt"]),
        )


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(segment + padding)


class ProofCodec:
    def __init__(self, secret: str | bytes):
        if not secret:
            raise ValueError("a signing secret is required")
        self._secret = secret.encode() if isinstance(secret, str) else secret

    def _signature(self, encoded_payload: str) -> str:
        digest = hmac.new(self._secret, encoded_payload.encode("utf-8"), hashlib.sha256).digest()
        return _b64encode(digest)

    def sign(self, outcome: SpinOutcome) -> str:
        """Encode and sign a spin outcome.

        Args:
            outcome (SpinOutcome): The outcome to attest

        Returns:
            str: ``payload.signature`` token
        """
        canonical = json.dumps(outcome.to_payload(), sort_keys=True, separators=(",", ":"))
        encoded_payload = _b64encode(canonical.encode("utf-8"))
        return f"{encoded_payload}.{self._signature(encoded_payload)}"

    def verify(self, proof: str, now_ms: int) -> SpinOutcome:
        """Check the signature and the expiry of a proof and decode it.

        Args:
            proof (str): Token produced by `sign`
            now_ms (int): Current time in epoch milliseconds

        Raises:
            TamperedProof: The token is malformed or the signature does not match
            ExpiredProof: The signature is valid but the outcome has expired

        Returns:
            SpinOutcome: The decoded outcome
        """
        if not isinstance(proof, str) or "." not in proof:
            raise TamperedProof("proof has no signature segment")

        encoded_payload, signature = proof.rsplit(".", 1)
        expected = self._signature(encoded_payload)
        if not hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8")):
            raise TamperedProof("signature mismatch")

        try:
            outcome = SpinOutcome.from_payload(json.loads(_b64decode(encoded_payload)))
        except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
            raise TamperedProof(f"undecodable payload: {e}") from e

        if now_ms > outcome.expires_at:
            raise ExpiredProof(f"proof expired at {outcome.expires_at}")
        return outcome
