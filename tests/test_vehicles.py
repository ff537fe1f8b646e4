from vehicles.models import Vehicle
from vehicles.services import VehicleService


class TestCreateVehicle:
    def test_creates_vehicle_with_upper_case_plate(self, db, make_user):
        user = make_user()

        result = VehicleService.create_vehicle({
            "user_id": user.id,
            "make": "Honda",
            "model": "Civic",
            "year": "2019",
            "color": "red",
            "license_plate": "xyz1234",
        }, db)

        assert result.success is True
        assert result.data["license_plate"] == "XYZ1234"
        assert result.data["year"] == 2019

    def test_rejects_bad_vehicle(self, db, make_user):
        user = make_user()

        result = VehicleService.create_vehicle({
            "user_id": user.id,
            "make": "",
            "model": "Civic",
            "year": 1960,
            "color": "purple",
            "license_plate": "AB1",
        }, db)

        assert result.success is False
        assert set(result.errors) == {"make", "year", "color", "license_plate"}
        assert result.errors["make"] == ["Make is required"]

    def test_oversized_user_id_is_field_error(self, db):
        result = VehicleService.create_vehicle({
            "user_id": 2**70,
            "make": "Honda",
            "model": "Civic",
            "year": 2019,
            "color": "red",
            "license_plate": "XYZ1234",
        }, db)

        assert result.errors == {"user_id": ["Please select a user"]}
        assert db.query(Vehicle).count() == 0
