# backend/mentorhub/repositories/payment_repository.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.payment import Payment
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[Payment]):
    def __init__(self, db: Session):
        super().__init__(db, Payment)

    def get_by_external_reference(self, external_reference: str) -> Optional[Payment]:
        return self.find_one_by(external_reference=external_reference)
