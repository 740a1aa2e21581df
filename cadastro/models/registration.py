"""
cadastro/models/registration.py

Purpose: Persisted registration document

- Shape handed to the persistence collaborator
- Built once, from a finished session
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional

from cadastro.models.session import RegistrationData


class RegistrationRecord(BaseModel):
    """
    A completed registration. Requires name, email and at least one tax id.
    """
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    individual_id: Optional[str] = Field(default=None, description="CPF, digits only")
    business_id: Optional[str] = Field(default=None, description="CNPJ, digits only")
    password_hash: Optional[str] = None
    document_ref: Optional[str] = Field(default=None, description="Document store reference")
    document_validated: Optional[bool] = None

    @model_validator(mode="after")
    def require_tax_id(self):
        if not self.individual_id and not self.business_id:
            raise ValueError("a registration needs a CPF or a CNPJ")
        return self

    @classmethod
    def from_collected(cls, data: RegistrationData) -> "RegistrationRecord":
        return cls(
            name=data.name,
            email=data.email,
            individual_id=data.individual_id,
            business_id=data.business_id,
            password_hash=data.password_hash,
            document_ref=data.document_ref,
            document_validated=data.document_validated,
        )
