# src/vehicles/services.py
import logging

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Any, Dict

from vehicles.models import Vehicle
from vehicles.schemas import VehicleCreate, VehicleResponse
from users.models import User
from results import ActionResult, flatten_validation_errors

logger = logging.getLogger(__name__)


class VehicleService:
    @staticmethod
    def create_vehicle(inputs: Dict[str, Any], db: Session) -> ActionResult:
        try:
            data = VehicleCreate.model_validate(inputs)
        except ValidationError as e:
            return ActionResult.fail(flatten_validation_errors(e))

        try:
            if not db.get(User, data.user_id):
                return ActionResult.field_error("user_id", "User not found")

            now = datetime.utcnow()
            vehicle = Vehicle(**data.model_dump(), created_at=now, updated_at=now)
            db.add(vehicle)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create vehicle: {str(e)}", exc_info=True)
            return ActionResult.form_error("Failed to create vehicle. Please try again.")

        logger.info(f"Created vehicle {vehicle.id} for user {vehicle.user_id}")
        return ActionResult.ok(VehicleResponse.model_validate(vehicle).model_dump(mode="json"))
