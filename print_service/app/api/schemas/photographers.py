from __future__ import annotations

from pydantic import BaseModel

from common.types.datetime import UtcDateTime

from ...models.photographer import BankDetails, Photographer


class SignupRequest(BaseModel):
    display_name: str
    email: str
    phone_number: str


class ProfileUpdateRequest(BaseModel):
    display_name: str
    email: str
    phone_number: str


class BankDetailsRequest(BaseModel):
    account_name: str = ""
    account_number: str = ""
    ifsc: str = ""

    def to_domain(self) -> BankDetails:
        return BankDetails(**self.model_dump())


class BankDetailsResponse(BaseModel):
    account_name: str
    account_number: str
    ifsc: str
    complete: bool


class PhotographerResponse(BaseModel):
    uid: str
    photographer_id: str
    display_name: str
    email: str
    phone_number: str
    order_counter: int
    bank_details: BankDetailsResponse
    created_at: UtcDateTime
    updated_at: UtcDateTime

    @classmethod
    def from_domain(cls, photographer: Photographer) -> "PhotographerResponse":
        bank = photographer.bank_details
        return cls(
            uid=photographer.uid,
            photographer_id=photographer.photographer_id,
            display_name=photographer.display_name,
            email=photographer.email,
            phone_number=photographer.phone_number,
            order_counter=photographer.order_counter,
            bank_details=BankDetailsResponse(
                account_name=bank.account_name,
                account_number=bank.account_number,
                ifsc=bank.ifsc,
                complete=bank.is_complete(),
            ),
            created_at=photographer.created_at,
            updated_at=photographer.updated_at,
        )
