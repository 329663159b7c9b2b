"""Client-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict


class ClientResponse(BaseModel):
    """Client as shown in a collector's portfolio."""

    uuid: str
    name: str
    contract_number: str
    address: str | None = None
    phone: str | None = None

    model_config = ConfigDict(from_attributes=True)
