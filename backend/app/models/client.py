from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class ClientType(str, Enum):
    SELF_EMPLOYED = "Self-Employed"
    LANDLORD = "Landlord"
    LIMITED_COMPANY = "Limited Company"
    OTHER = "Other Client"


class ServiceFlags(BaseModel):
    bookkeeping: bool = False
    vat: bool = False
    payroll: bool = False
    mtd: bool = False
    extra_service: bool = False
    directors: int = Field(default=1, ge=1)

    def normalized_for(self, client_type: ClientType) -> "ServiceFlags":
        """MTD (ITSA) does not apply to companies; directors never drop below one."""
        data = self.model_dump()
        data["directors"] = max(1, int(data.get("directors") or 1))
        if client_type == ClientType.LIMITED_COMPANY:
            data["mtd"] = False
        return ServiceFlags(**data)


class ClientCreate(BaseModel):
    name: str
    type: ClientType
    flags: ServiceFlags = ServiceFlags()


class ClientUpdate(BaseModel):
    type: ClientType
    flags: ServiceFlags = ServiceFlags()


class ClientProfile(BaseModel):
    id: str
    type: ClientType
    status: str = "Active"
    tag: str = ""
    flags: ServiceFlags = ServiceFlags()


class ClientCreatedResponse(BaseModel):
    id: str
    created: List[str] = []


class StructureResponse(BaseModel):
    id: str
    created: List[str] = []
    removed: List[str] = []
    profile: Optional[ClientProfile] = None
