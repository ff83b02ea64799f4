import logging

from fastapi import APIRouter

from src.converter import DataConverter
from src.domain.value_tier import tier_table
from src.models.dc_models import (
    SpinProofModel,
    SpinRequestModel,
    SpinResponseModel,
    ValueTierListModel,
    ValueTierModel,
)
from src.services.spin import run_spin, verify_spin_proof

logging.basicConfig(level=logging.INFO)

pool_router = APIRouter(prefix="/pool")
data_converter = DataConverter()


class PoolAPI:
    @staticmethod
    @pool_router.get("/tiers", response_model=ValueTierListModel)
    async def get_tiers() -> ValueTierListModel:
        return ValueTierListModel(tiers=[ValueTierModel(**tier) for tier in tier_table()])

    @staticmethod
    @pool_router.post("/spin", response_model=SpinResponseModel)
    async def spin(spin_request: SpinRequestModel) -> SpinResponseModel:
        """Draw the winner of a pool.

        Args:
            spin_request (SpinRequestModel):
                    requesterItemId: item staked by the caller
                    candidateItemIds: tier-compatible counterpart items, deduplicated

        Returns:
            SpinResponseModel: winner, wheel animation parameters and the signed spin proof
        """
        result = run_spin(spin_request.requester_item_id, spin_request.candidate_item_ids)
        return data_converter.convert_spinresult_to_response(result)

    @staticmethod
    @pool_router.post("/verify")
    async def verify(proof: SpinProofModel):
        outcome = verify_spin_proof(proof.spin_proof)
        return {
            "ok": True,
            "outcome": data_converter.convert_spinoutcome_to_model(outcome).model_dump(by_alias=True),
        }
