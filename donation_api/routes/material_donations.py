from __future__ import annotations

from fastapi import APIRouter, Depends, status

from donation_api.dependencies import get_allocation
from donation_api.schemas import MaterialDonationOut, MaterialDonationRequest
from donation_kernel.domain.commands import SubmitMaterialDonation
from donation_kernel.services import AllocationWorkflow

router = APIRouter(prefix="/api/material-donations", tags=["Material donations"])


@router.post("", response_model=MaterialDonationOut, status_code=status.HTTP_201_CREATED)
def submit_material_donation(
    body: MaterialDonationRequest,
    allocation: AllocationWorkflow = Depends(get_allocation),
) -> MaterialDonationOut:
    donation = allocation.submit_material_donation(
        SubmitMaterialDonation(
            donor_name=body.donor_name,
            donor_contact=body.donor_contact,
            title=body.title,
            description=body.description,
            pickup_location=body.pickup_location,
            category=body.category,
            image_urls=tuple(body.image_urls),
        )
    )
    return MaterialDonationOut.model_validate(donation)
