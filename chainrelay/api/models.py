from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class JsonRpcProxyBody(BaseModel):
    """Inbound JSON-RPC forward. Fields are optional here; presence is checked by the normalizer."""
    model_config = ConfigDict(extra="ignore")

    chainKey: Optional[str] = Field(None, description="Logical chain key, e.g. 'base' or 'scrollSepolia'.")
    method: Optional[str] = Field(None, description="JSON-RPC method name.")
    params: Optional[Union[List[Any], Dict[str, Any]]] = Field(None, description="JSON-RPC params, forwarded as-is.")


class RegisterUserBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    wallet_address: Optional[str] = None
    username: Optional[str] = None
    referral_code: Optional[str] = None


class ValidateReferralBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    referral_code: Optional[str] = None


class ChainSummary(BaseModel):
    """Registry introspection entry for one chain."""
    chainKey: str = Field(..., description="Logical chain key.")
    purposes: List[str] = Field(default_factory=list, description="Provider purposes served for the chain.")
    tokens: List[str] = Field(default_factory=list, description="Token symbols resolvable on the chain.")
    bridgedUsdc: Optional[str] = Field(None, description="Bridged USDC contract, when listed separately.")


class ChainsResponse(BaseModel):
    chains: List[ChainSummary] = Field(default_factory=list)
