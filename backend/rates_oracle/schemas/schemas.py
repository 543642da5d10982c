from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List

# Domain Models
class RateObservation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias='from')
    to: str
    rate: float

class RateRecord(BaseModel):
    """Wire form of one rate, as the contract stores it"""
    rate: float
    precision: int
    pair: str  # "<FROM>P-<TO>P"

class RatesPayload(BaseModel):
    user: str
    data: List[RateRecord]
    type: Any
    memo: int  # ms since epoch

class Authorization(BaseModel):
    actor: str
    permission: str

class Action(BaseModel):
    account: str
    name: str
    authorization: List[Authorization]
    data: RatesPayload

class TransactOptions(BaseModel):
    blocks_behind: int = 3
    expire_seconds: int = 30

class TransactionResult(BaseModel):
    tx_hash: str
    block_number: int
    gas_used: int
    status: int

# Request Models
class UpdateRatesRequest(BaseModel):
    token: str
    rates: Dict[str, RateObservation]

# Response Models
class UpdateRatesResponse(BaseModel):
    tx_hash: str
    block_number: int
    gas_used: int
    status: int
    pairs: List[str]

class HealthResponse(BaseModel):
    status: str
    blockchain_connected: bool
    agent_address: str
    contract: str
