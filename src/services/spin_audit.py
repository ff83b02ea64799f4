"""Statistical audit of the spin engine.

Runs many spins over a synthetic pool and checks that the winner position is
uniformly distributed (Pearson chi-square) and that no wheel ever stops
within the edge buffer of a segment.

    python -m src.services.spin_audit --candidates 6 --trials 100000
"""

import argparse
import logging
import secrets
import sys
from dataclasses import dataclass

import numpy as np

from src.domain.fair_spin import FairSpinEngine, is_clear_of_edges
from src.domain.spin_proof import ProofCodec

logging.basicConfig(level=logging.INFO)

# Upper critical values of the chi-square distribution at p = 0.001, by
# degrees of freedom.
CHI_SQUARE_CRITICAL_0_001 = {
    1: 10.828,
    2: 13.816,
    3: 16.266,
    4: 18.467,
    5: 20.515,
    6: 22.458,
    7: 24.322,
    8: 26.124,
    9: 27.877,
    10: 29.588,
    11: 31.264,
    12: 32.909,
    13: 34.528,
    14: 36.123,
    15: 37.697,
    16: 39.252,
    17: 40.790,
    18: 42.312,
    19: 43.820,
    20: 45.315,
    21: 46.797,
    22: 48.268,
    23: 49.728,
    24: 51.179,
    25: 52.620,
    26: 54.052,
    27: 55.476,
    28: 56.892,
    29: 58.301,
    30: 59.703,
}

# Largest pool the table above can judge.
MAX_AUDIT_CANDIDATES = max(CHI_SQUARE_CRITICAL_0_001) + 1


@dataclass(frozen=True)
class SpinAuditReport:
    candidate_count: int
    trials: int
    counts: np.ndarray
    chi_square: float
    edge_violations: int

    @property
    def degrees_of_freedom(self) -> int:
        return self.candidate_count - 1

    @property
    def critical_value(self) -> float | None:
        return CHI_SQUARE_CRITICAL_0_001.get(self.degrees_of_freedom)

    @property
    def is_uniform(self) -> bool:
        if self.candidate_count == 1:
            return True
        return self.chi_square < self.critical_value

    @property
    def passed(self) -> bool:
        return self.is_uniform and self.edge_violations == 0


def chi_square_statistic(counts: np.ndarray) -> float:
    """Pearson statistic of observed counts against a uniform expectation."""
    counts = np.asarray(counts, dtype=np.float64)
    expected = counts.sum() / counts.size
    return float(np.sum((counts - expected) ** 2 / expected))


def run_spin_audit(
    candidate_count: int,
    trials: int,
    engine: FairSpinEngine | None = None,
) -> SpinAuditReport:
    """Spin `trials` times over `candidate_count` items and summarise the winners.

    Args:
        candidate_count (int): Pool size, 1 to MAX_AUDIT_CANDIDATES
        trials (int): Number of spins
        engine (FairSpinEngine, optional): Engine under audit. Defaults to one with a throwaway secret.

    Returns:
        SpinAuditReport: Winner counts per position, chi-square and edge violations
    """
    if candidate_count <= 0 or trials <= 0:
        raise ValueError("candidate_count and trials must be positive")
    if candidate_count > MAX_AUDIT_CANDIDATES:
        raise ValueError(f"candidate_count must be at most {MAX_AUDIT_CANDIDATES}")
    if engine is None:
        engine = FairSpinEngine(ProofCodec(secrets.token_bytes(32)))

    candidates = list(range(1, candidate_count + 1))
    winners = np.empty(trials, dtype=np.int64)
    edge_violations = 0
    for trial in range(trials):
        result = engine.spin(candidate_count + 1, candidates)
        winners[trial] = result.winner_index
        if not is_clear_of_edges(result.target_angle, result.winner_index, candidate_count):
            edge_violations += 1

    counts = np.bincount(winners, minlength=candidate_count)
    return SpinAuditReport(
        candidate_count=candidate_count,
        trials=trials,
        counts=counts,
        chi_square=chi_square_statistic(counts),
        edge_violations=edge_violations,
    )


def log_report(report: SpinAuditReport) -> bool:
    """Log the audit figures and the verdict. Returns True when the audit passed."""
    logging.info(f"counts: {report.counts.tolist()}")
    logging.info(
        f"chi-square: {report.chi_square:.3f} (dof={report.degrees_of_freedom}, "
        f"critical@0.001={report.critical_value})"
    )
    logging.info(f"edge violations: {report.edge_violations}")
    if report.passed:
        logging.info("PASS: winner positions look uniform and no spin stopped on an edge")
    else:
        logging.error("FAIL: winner positions are not uniform or a spin stopped on an edge")
    return report.passed


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Audit spin fairness")
    parser.add_argument("--candidates", type=int, default=6, help=f"Pool size (1 to {MAX_AUDIT_CANDIDATES})")
    parser.add_argument("--trials", type=int, default=100_000, help="Number of spins")
    return parser


if __name__ == "__main__":
    parser = get_parser()
    args = parser.parse_args()
    if not 1 <= args.candidates <= MAX_AUDIT_CANDIDATES:
        parser.error(f"--candidates must be between 1 and {MAX_AUDIT_CANDIDATES}")
    report = run_spin_audit(args.candidates, args.trials)
    if not log_report(report):
        sys.exit(1)
