"""FastAPI endpoints for the Identity domain."""

from fastapi import APIRouter, Depends, Request
from protean.utils.globals import current_domain

from identity.api.schemas import (
    AddAddressRequest,
    ContactRequest,
    RegisterCustomerRequest,
    UpdateAddressRequest,
    UpdateProfileRequest,
)
from identity.contact.submission import SubmitContactMessage, deliver
from identity.customer.addresses import AddAddress, RemoveAddress, SetDefaultAddress, UpdateAddress
from identity.customer.lookup import customer_for_user
from identity.customer.profile import UpdateProfile
from identity.customer.queries import addresses_of, profile_view
from identity.customer.registration import RegisterCustomer
from shared.auth import Caller
from shared.dependencies import get_settings, get_write_lock, rate_limit
from shared.errors import NotFound, RequestValidationFailed

customer_router = APIRouter(prefix="/customers", tags=["customers"])
contact_router = APIRouter(prefix="/contact", tags=["contact"])

authenticated_api = rate_limit("AUTHENTICATED_API", prefix="api")
contact_limit = rate_limit(
    "CRITICAL_ENDPOINTS",
    prefix="contact",
    message="Too many messages, please try again later",
)


@customer_router.post("", status_code=201)
async def register_customer(
    request: Request, body: RegisterCustomerRequest, caller: Caller = Depends(authenticated_api)
):
    email = body.email or caller.email
    if not email:
        raise RequestValidationFailed(errors=[{"field": "email", "message": "Email is required"}])

    command = RegisterCustomer(user_id=caller.user_id, email=email, name=body.name, phone=body.phone)
    async with get_write_lock(request):
        customer_id = current_domain.process(command, asynchronous=False)
    return {"success": True, "data": {"id": customer_id}}


@customer_router.get("/me")
async def get_profile(caller: Caller = Depends(authenticated_api)):
    return {"success": True, "data": profile_view(customer_for_user(caller.user_id))}


@customer_router.put("/me")
async def update_profile(request: Request, body: UpdateProfileRequest, caller: Caller = Depends(authenticated_api)):
    command = UpdateProfile(user_id=caller.user_id, name=body.name, phone=body.phone)
    async with get_write_lock(request):
        current_domain.process(command, asynchronous=False)
    return {"success": True, "message": "Profile updated", "data": profile_view(customer_for_user(caller.user_id))}


# --- Address book ---


@customer_router.get("/me/addresses")
async def list_addresses(caller: Caller = Depends(authenticated_api)):
    return {"success": True, "data": {"addresses": addresses_of(caller.user_id)}}


@customer_router.post("/me/addresses", status_code=201)
async def add_address(request: Request, body: AddAddressRequest, caller: Caller = Depends(authenticated_api)):
    command = AddAddress(
        user_id=caller.user_id,
        street=body.street,
        city=body.city,
        state=body.state,
        zip_code=body.zip_code,
        additional_info=body.additional_info,
        country=body.country,
        is_default=body.is_default,
    )
    async with get_write_lock(request):
        address_id = current_domain.process(command, asynchronous=False)
    return {"success": True, "data": {"id": address_id, "addresses": addresses_of(caller.user_id)}}


@customer_router.put("/me/addresses/{address_id}")
async def update_address(
    request: Request, address_id: str, body: UpdateAddressRequest, caller: Caller = Depends(authenticated_api)
):
    command = UpdateAddress(
        user_id=caller.user_id,
        address_id=address_id,
        street=body.street,
        city=body.city,
        state=body.state,
        zip_code=body.zip_code,
        additional_info=body.additional_info,
        country=body.country,
        is_default=body.is_default,
    )
    async with get_write_lock(request):
        _ensure_address(caller.user_id, address_id)
        current_domain.process(command, asynchronous=False)
    return {"success": True, "message": "Address updated", "data": {"addresses": addresses_of(caller.user_id)}}


@customer_router.delete("/me/addresses/{address_id}")
async def remove_address(request: Request, address_id: str, caller: Caller = Depends(authenticated_api)):
    async with get_write_lock(request):
        _ensure_address(caller.user_id, address_id)
        current_domain.process(RemoveAddress(user_id=caller.user_id, address_id=address_id), asynchronous=False)
    return {"success": True, "message": "Address deleted", "data": {"addresses": addresses_of(caller.user_id)}}


@customer_router.put("/me/addresses/{address_id}/default")
async def set_default_address(request: Request, address_id: str, caller: Caller = Depends(authenticated_api)):
    async with get_write_lock(request):
        _ensure_address(caller.user_id, address_id)
        current_domain.process(SetDefaultAddress(user_id=caller.user_id, address_id=address_id), asynchronous=False)
    return {"success": True, "message": "Default address updated", "data": {"addresses": addresses_of(caller.user_id)}}


def _ensure_address(user_id: str, address_id: str) -> None:
    customer = customer_for_user(user_id)
    if not any(str(address.id) == address_id for address in customer.addresses):
        raise NotFound("Address not found")


# --- Contact form ---


@contact_router.post("", status_code=201)
async def send_contact_message(request: Request, body: ContactRequest, caller: Caller = Depends(contact_limit)):
    email = caller.email
    if not email:
        try:
            email = customer_for_user(caller.user_id).email.address
        except NotFound:
            raise RequestValidationFailed(
                errors=[{"field": "email", "message": "An email address is required to contact support"}]
            ) from None

    command = SubmitContactMessage(user_id=caller.user_id, email=email, subject=body.subject, message=body.message)
    async with get_write_lock(request):
        message_id = current_domain.process(command, asynchronous=False)
    status = await deliver(request.app.state.email_sender, get_settings(request).support_email, message_id)
    return {"success": True, "message": "Message sent", "data": {"id": message_id, "status": status}}
