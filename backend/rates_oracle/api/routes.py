import logging

from fastapi import APIRouter, HTTPException
from rates_oracle.services.rate_submitter import pair_string
from rates_oracle.schemas.schemas import (
    UpdateRatesRequest,
    UpdateRatesResponse,
    HealthResponse
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Will be injected from main.py
ledger_client = None
rate_submitter = None

# ============================================================================
# HEALTH
# ============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "blockchain_connected": await ledger_client.is_connected(),
        "agent_address": ledger_client.address,
        "contract": rate_submitter.contract
    }

# ============================================================================
# RATES
# ============================================================================

@router.post("/rates", response_model=UpdateRatesResponse)
async def update_rates(request: UpdateRatesRequest):
    """
    Push a batch of currency rates to the currencies contract.
    All rates go out in one transaction, typed with the request token.
    """
    try:
        result = await rate_submitter.update_currencies(request.rates, request.token)
    except Exception as e:
        logger.exception("Rate submission failed")
        raise HTTPException(status_code=502, detail=f"Rate submission failed: {e}")

    return UpdateRatesResponse(
        tx_hash=result.tx_hash,
        block_number=result.block_number,
        gas_used=result.gas_used,
        status=result.status,
        pairs=[pair_string(rate.from_, rate.to) for rate in request.rates.values()],
    )
