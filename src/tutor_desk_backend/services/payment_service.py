'''
Payments. They carry no teacher column and are scoped through the student.
'''
from typing import Annotated, Optional
from uuid import UUID
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import PaymentStatus, PaymentSortField, SortDirection
from ..models import finance as finance_models
from ..common.logger import log
from .student_service import StudentService

SORT_COLUMNS = {
    PaymentSortField.PAYMENT_DATE: db_models.Payments.payment_date,
    PaymentSortField.AMOUNT: db_models.Payments.amount,
    PaymentSortField.STATUS: db_models.Payments.status,
}


class PaymentService:
    """
    Service for recording and listing payments.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        self.db = db
        self.student_service = student_service

    def _teacher_student_ids(self, teacher: db_models.TeacherProfiles):
        return select(db_models.Students.id).filter(db_models.Students.teacher_id == teacher.id)

    # --- Internal Fetchers ---

    async def get_payments_internal(self, teacher: db_models.TeacherProfiles) -> list[db_models.Payments]:
        """Every payment of the teacher's students, unfiltered."""
        stmt = select(db_models.Payments).options(
            selectinload(db_models.Payments.student)
        ).filter(
            db_models.Payments.student_id.in_(self._teacher_student_ids(teacher))
        ).order_by(db_models.Payments.payment_date)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _get_payment_internal(self, payment_id: UUID, teacher: db_models.TeacherProfiles) -> db_models.Payments:
        stmt = select(db_models.Payments).options(
            selectinload(db_models.Payments.student)
        ).filter(
            db_models.Payments.id == payment_id,
            db_models.Payments.student_id.in_(self._teacher_student_ids(teacher))
        )
        result = await self.db.execute(stmt)
        payment = result.scalars().first()
        if not payment:
            log.warning(f"Teacher {teacher.id} tried to access missing or foreign payment {payment_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found.")
        return payment

    # --- Public Read Methods (API-Facing) ---

    async def list_payments_for_api(
        self,
        teacher: db_models.TeacherProfiles,
        sort_by: PaymentSortField = PaymentSortField.PAYMENT_DATE,
        direction: SortDirection = SortDirection.DESC,
        status_filter: Optional[PaymentStatus] = None,
        search: Optional[str] = None
    ) -> list[finance_models.PaymentRead]:
        """
        Lists payments with optional status filter and a case-insensitive
        search on the student's name or the description.
        """
        log.info(f"Teacher {teacher.id} listing payments (sort={sort_by.value} {direction.value}, status={status_filter}, search={search!r}).")
        try:
            stmt = select(db_models.Payments).join(db_models.Payments.student).options(
                selectinload(db_models.Payments.student)
            ).filter(db_models.Students.teacher_id == teacher.id)

            if status_filter is not None:
                stmt = stmt.filter(db_models.Payments.status == status_filter.value)

            if search and search.strip():
                pattern = f"%{search.strip()}%"
                stmt = stmt.filter(
                    db_models.Students.full_name.ilike(pattern) | db_models.Payments.description.ilike(pattern)
                )

            column = SORT_COLUMNS[sort_by]
            order = column.asc() if direction == SortDirection.ASC else column.desc()
            stmt = stmt.order_by(order, db_models.Payments.created_at.desc())

            result = await self.db.execute(stmt)
            return [finance_models.PaymentRead.model_validate(p) for p in result.scalars().all()]
        except Exception as e:
            log.error(f"Error in list_payments_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def get_payment_for_api(self, payment_id: UUID, teacher: db_models.TeacherProfiles) -> finance_models.PaymentRead:
        payment = await self._get_payment_internal(payment_id, teacher)
        return finance_models.PaymentRead.model_validate(payment)

    # --- Public Write Methods (API-Facing) ---

    async def create_payment_for_api(
        self,
        data: finance_models.PaymentCreate,
        teacher: db_models.TeacherProfiles
    ) -> finance_models.PaymentRead:
        log.info(f"Teacher {teacher.id} recording a payment of {data.amount} for student {data.student_id}.")
        try:
            await self.student_service.get_student_internal(data.student_id, teacher)

            new_payment = db_models.Payments(
                student_id=data.student_id,
                amount=data.amount,
                payment_date=data.payment_date,
                payment_method=data.payment_method.value,
                status=data.status.value,
                description=data.description,
            )
            self.db.add(new_payment)
            await self.db.flush()
            await self.db.refresh(new_payment, ['student'])
            return finance_models.PaymentRead.model_validate(new_payment)

        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in create_payment_for_api: {e}", exc_info=True)
            raise

    async def update_payment_for_api(
        self,
        payment_id: UUID,
        data: finance_models.PaymentUpdate,
        teacher: db_models.TeacherProfiles
    ) -> finance_models.PaymentRead:
        log.info(f"Teacher {teacher.id} updating payment {payment_id}.")
        try:
            payment = await self._get_payment_internal(payment_id, teacher)

            update_data = data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided to update.")

            for key, value in update_data.items():
                if value is None and key != 'description':
                    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"'{key}' cannot be empty.")
                if key in ['payment_method', 'status']:
                    setattr(payment, key, value.value)
                else:
                    setattr(payment, key, value)

            self.db.add(payment)
            await self.db.flush()
            return finance_models.PaymentRead.model_validate(payment)

        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in update_payment_for_api for payment {payment_id}: {e}", exc_info=True)
            raise

    async def delete_payment(self, payment_id: UUID, teacher: db_models.TeacherProfiles) -> bool:
        log.info(f"Teacher {teacher.id} attempting to delete payment {payment_id}.")
        try:
            payment = await self._get_payment_internal(payment_id, teacher)
            await self.db.delete(payment)
            await self.db.flush()
            return True
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in delete_payment for payment {payment_id}: {e}", exc_info=True)
            raise
