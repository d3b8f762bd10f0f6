'''
API endpoints for managing Payments.
'''
from typing import Annotated, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status, Response

from ..database import models as db_models
from ..database.db_enums import PaymentSortField, PaymentStatus, SortDirection
from ..models import finance as finance_models
from ..services.security import get_current_teacher
from ..services.payment_service import PaymentService


class PaymentsAPI:
    """
    A class to encapsulate CRUD endpoints for Payments.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/payments",
            tags=["Payments"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_payments,
                methods=["GET"],
                response_model=List[finance_models.PaymentRead])

        self.router.add_api_route(
                "/{payment_id}",
                self.get_payment,
                methods=["GET"],
                response_model=finance_models.PaymentRead)

        self.router.add_api_route(
                "/",
                self.create_payment,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=finance_models.PaymentRead)

        self.router.add_api_route(
                "/{payment_id}",
                self.update_payment,
                methods=["PATCH"],
                response_model=finance_models.PaymentRead)

        self.router.add_api_route(
                "/{payment_id}",
                self.delete_payment,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)

    async def list_payments(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        payment_service: Annotated[PaymentService, Depends(PaymentService)],
        sort_by: PaymentSortField = PaymentSortField.PAYMENT_DATE,
        direction: SortDirection = SortDirection.DESC,
        status_filter: Annotated[Optional[PaymentStatus], Query(alias="status")] = None,
        search: Optional[str] = None
    ):
        """
        Payments of the teacher's students. Sortable, filterable by status
        and searchable by student name or description.
        """
        return await payment_service.list_payments_for_api(teacher, sort_by, direction, status_filter, search)

    async def get_payment(
        self,
        payment_id: UUID,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        payment_service: Annotated[PaymentService, Depends(PaymentService)]
    ):
        return await payment_service.get_payment_for_api(payment_id, teacher)

    async def create_payment(
        self,
        payment_data: finance_models.PaymentCreate,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        payment_service: Annotated[PaymentService, Depends(PaymentService)]
    ):
        return await payment_service.create_payment_for_api(payment_data, teacher)

    async def update_payment(
        self,
        payment_id: UUID,
        payment_data: finance_models.PaymentUpdate,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        payment_service: Annotated[PaymentService, Depends(PaymentService)]
    ):
        return await payment_service.update_payment_for_api(payment_id, payment_data, teacher)

    async def delete_payment(
        self,
        payment_id: UUID,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        payment_service: Annotated[PaymentService, Depends(PaymentService)]
    ):
        await payment_service.delete_payment(payment_id, teacher)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

# Instantiate the class and export its router
payments_api = PaymentsAPI()
router = payments_api.router
