"""Pydantic request schemas for the Identity API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RegisterCustomerRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Jane Doe",
                    "email": "jane.doe@example.com",
                    "phone": "+1 555 0123",
                }
            ]
        }
    }

    name: str = Field(..., min_length=2, max_length=50)
    email: str | None = Field(None, max_length=254)
    phone: str | None = Field(None, max_length=20)


class UpdateProfileRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"name": "Jane Smith", "phone": "+1 555 0456"}]}}

    name: str | None = Field(None, min_length=2, max_length=50)
    phone: str | None = Field(None, max_length=20)


class AddAddressRequest(BaseModel):
    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "street": "123 Elm Street",
                    "city": "Springfield",
                    "state": "Illinois",
                    "zipCode": "62701",
                    "additionalInfo": "Ring twice",
                    "country": "USA",
                    "isDefault": False,
                }
            ]
        },
    }

    street: str = Field(..., min_length=3, max_length=100)
    city: str = Field(..., min_length=2, max_length=50)
    state: str = Field(..., min_length=2, max_length=50)
    zip_code: str | None = Field(None, alias="zipCode", pattern=r"^\d{2,5}$")
    additional_info: str | None = Field(None, alias="additionalInfo", max_length=100)
    country: str = Field(..., min_length=2, max_length=50)
    is_default: bool = Field(False, alias="isDefault")


class UpdateAddressRequest(BaseModel):
    model_config = {"populate_by_name": True}

    street: str | None = Field(None, min_length=3, max_length=100)
    city: str | None = Field(None, min_length=2, max_length=50)
    state: str | None = Field(None, min_length=2, max_length=50)
    zip_code: str | None = Field(None, alias="zipCode", pattern=r"^\d{2,5}$")
    additional_info: str | None = Field(None, alias="additionalInfo", max_length=100)
    country: str | None = Field(None, min_length=2, max_length=50)
    is_default: bool | None = Field(None, alias="isDefault")


class ContactRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"subject": "Late delivery", "message": "My order has not arrived yet, can you check?"}]
        }
    }

    subject: str = Field(..., min_length=3, max_length=100)
    message: str = Field(..., min_length=10, max_length=1000)
