from __future__ import annotations

from datetime import timedelta
import unittest
from unittest import mock

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from app.db.models import CatalogKind, DeviceKind, EbayDeviceModel, EbayVehicleModel
from app.schemas import DeviceModelImportRow, VehicleModelImportRow
from app.services import catalog_sync as catalog_sync_module
from app.services.catalog_sync import (
    CatalogSyncService,
    clean_device_name,
    extract_brand_from_model,
    list_device_models,
    list_vehicle_models,
)
from app.services.ranges.cache import CatalogCache, build_catalog_cache


class DeviceNameHelpersTestCase(unittest.TestCase):
    def test_known_brand_prefix(self) -> None:
        self.assertEqual(extract_brand_from_model("Samsung Galaxy S24"), "Samsung")
        self.assertEqual(extract_brand_from_model("oneplus 12"), "OnePlus")

    def test_capitalized_first_word_fallback(self) -> None:
        self.assertEqual(extract_brand_from_model("Fairphone 5"), "Fairphone")
        self.assertEqual(extract_brand_from_model("galaxy tab"), "")
        self.assertEqual(extract_brand_from_model(""), "")

    def test_clean_device_name_strips_accessory_prefix(self) -> None:
        self.assertEqual(clean_device_name("For Apple iPhone 15 "), "Apple iPhone 15")
        self.assertEqual(clean_device_name(None), "")


class CatalogSyncServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        SQLModel.metadata.create_all(self.engine)

        def session_factory():
            return Session(self.engine)

        self.cache: CatalogCache = build_catalog_cache(
            session_factory, ttls={kind: timedelta(hours=240) for kind in CatalogKind}
        )
        self.service = CatalogSyncService(self.cache)

    def test_vehicle_import_upserts_and_counts(self) -> None:
        rows = [
            VehicleModelImportRow(make="Honda", model="Accord", years=["2012"]),
            VehicleModelImportRow(make="Honda", model="Accord"),
            VehicleModelImportRow(make="", model="Ghost"),
            VehicleModelImportRow(make="Ford", model="F-250", full_name="Ford F-250"),
        ]
        with Session(self.engine) as session:
            stats = self.service.import_vehicle_models(session, rows)
            self.assertEqual((stats.added, stats.updated, stats.skipped, stats.errors), (2, 0, 1, 1))
            self.assertEqual(stats.total_in_database, 2)

            again = self.service.import_vehicle_models(
                session, [VehicleModelImportRow(make="Honda", model="Accord", ebay_category_id="6001")]
            )
            self.assertEqual((again.added, again.updated), (0, 1))
            record = session.exec(
                select(EbayVehicleModel).where(EbayVehicleModel.full_name == "Honda Accord")
            ).one()
            self.assertEqual(record.years, ["2012"])
            self.assertEqual(record.ebay_category_id, "6001")

    def test_device_import_infers_brand_and_model(self) -> None:
        rows = [
            DeviceModelImportRow(full_name="For Apple iPhone 15", device_kind=DeviceKind.cellphone),
            DeviceModelImportRow(
                full_name="Apple iPad Air", device_kind=DeviceKind.tablet, ebay_category_id="171485"
            ),
            DeviceModelImportRow(full_name="   ", device_kind=DeviceKind.tablet),
        ]
        with Session(self.engine) as session:
            stats = self.service.import_device_models(session, rows)
            self.assertEqual((stats.added, stats.errors), (2, 1))
            phone = session.exec(
                select(EbayDeviceModel).where(EbayDeviceModel.device_kind == DeviceKind.cellphone)
            ).one()
            self.assertEqual(phone.full_name, "Apple iPhone 15")
            self.assertEqual(phone.brand, "Apple")
            self.assertEqual(phone.model, "iPhone 15")

    def test_row_written_concurrently_is_counted_and_batch_continues(self) -> None:
        with Session(self.engine) as session:
            session.add(EbayVehicleModel(make="Honda", model="Accord", full_name="Honda Accord"))
            session.add(
                EbayDeviceModel(
                    full_name="Apple iPad Air",
                    brand="Apple",
                    model="iPad Air",
                    device_kind=DeviceKind.tablet,
                    ebay_category_id="171485",
                )
            )
            session.commit()

        # Le righe esistenti non risultano alla lettura iniziale, come se un altro
        # import le avesse scritte subito dopo
        with Session(self.engine) as session, mock.patch.object(
            catalog_sync_module, "_existing_vehicle_models", return_value={}
        ), mock.patch.object(catalog_sync_module, "_existing_device_models", return_value={}):
            vehicles = self.service.import_vehicle_models(
                session,
                [
                    VehicleModelImportRow(make="Honda", model="Accord"),
                    VehicleModelImportRow(make="Ford", model="F-250"),
                ],
            )
            devices = self.service.import_device_models(
                session,
                [
                    DeviceModelImportRow(
                        full_name="Apple iPad Air", device_kind=DeviceKind.tablet, ebay_category_id="171485"
                    ),
                    DeviceModelImportRow(
                        full_name="Samsung Galaxy Tab S9", device_kind=DeviceKind.tablet, ebay_category_id="171485"
                    ),
                ],
            )

        self.assertEqual((vehicles.added, vehicles.updated, vehicles.errors), (1, 0, 1))
        self.assertEqual(vehicles.total_in_database, 2)
        self.assertEqual((devices.added, devices.updated, devices.errors), (1, 0, 1))
        self.assertEqual(devices.total_in_database, 2)
        with Session(self.engine) as session:
            self.assertEqual(
                [record.full_name for record in list_vehicle_models(session)],
                ["Ford F-250", "Honda Accord"],
            )

    def test_import_invalidates_cache(self) -> None:
        with Session(self.engine) as session:
            self.service.import_vehicle_models(session, [VehicleModelImportRow(make="Honda", model="Accord")])
            self.assertEqual(len(self.cache.get(CatalogKind.vehicles)), 1)

            self.service.import_vehicle_models(session, [VehicleModelImportRow(make="Ford", model="F-250")])
            self.assertIsNone(self.cache.snapshot(CatalogKind.vehicles))
            names = [entry.full_name for entry in self.cache.get(CatalogKind.vehicles)]
            self.assertEqual(sorted(names), ["Ford F-250", "Honda Accord"])

    def test_listing_is_sorted_and_filterable(self) -> None:
        with Session(self.engine) as session:
            self.service.import_vehicle_models(
                session,
                [
                    VehicleModelImportRow(make="Toyota", model="Corolla"),
                    VehicleModelImportRow(make="Audi", model="A4"),
                ],
            )
            self.service.import_device_models(
                session,
                [
                    DeviceModelImportRow(full_name="Samsung Galaxy S24", device_kind=DeviceKind.cellphone),
                    DeviceModelImportRow(full_name="Apple iPad Air", device_kind=DeviceKind.tablet),
                ],
            )
            self.assertEqual(
                [record.full_name for record in list_vehicle_models(session)],
                ["Audi A4", "Toyota Corolla"],
            )
            self.assertEqual(len(list_device_models(session)), 2)
            tablets = list_device_models(session, DeviceKind.tablet)
            self.assertEqual([record.full_name for record in tablets], ["Apple iPad Air"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
