"""
Tests for lead record models and ingestion.
"""

import pytest
from pydantic import ValidationError

from report_engine.models.lead import Layout, Lead, parse_leads
from report_engine.services import clock


class TestLeadModel:
    """camelCase documents, defaults and derived values."""

    def test_aliases_and_defaults(self, make_lead):
        lead = make_lead(joNumber=42, assignedDigitizer="Carla", isRevision=True)
        assert lead.jo_number == 42
        assert lead.assigned_digitizer == "Carla"
        assert lead.is_revision is True
        assert lead.is_final_program is False
        assert lead.layouts == []

    def test_explicit_nulls_take_defaults(self, make_lead):
        lead = make_lead(orders=None, layouts=None, isRevision=None, grandTotal=None)
        assert lead.orders == []
        assert lead.layouts == []
        assert lead.is_revision is False
        assert lead.sales_amount == 0

    def test_unknown_keys_ignored(self, make_lead):
        lead = make_lead(productionStatus="Sewing", notes="rush it")
        assert not hasattr(lead, "production_status")

    def test_sales_quantity_excludes_patches(self, make_lead):
        lead = make_lead(orders=[
            {"productType": "Patches", "quantity": 100},
            {"productType": "Jacket", "quantity": 5},
        ])
        assert lead.sales_quantity == 5

    def test_negative_quantity_rejected(self, make_lead):
        with pytest.raises(ValidationError):
            make_lead(orders=[{"productType": "Jacket", "quantity": -1}])

    def test_submission_time_required(self):
        with pytest.raises(ValidationError):
            Lead.model_validate({"id": "x"})


class TestUploadSlots:
    """Flattening of image lists and parallel final-file arrays."""

    def test_parallel_arrays_padded(self):
        layout = Layout.model_validate({
            "logoLeftImages": [{"url": "a", "uploadTime": "2024-03-01T00:00:00Z", "uploadedBy": "Ben"}],
            "finalNamesDst": [{"name": "n.dst"}, None],
            "finalNamesDstUploadTimes": ["2024-03-02T00:00:00Z"],
            "finalNamesDstUploadedBy": ["Carla", "Dina", "Eve"],
        })
        slots = layout.upload_slots()
        assert [(s.source, s.has_file, s.uploaded_by) for s in slots] == [
            ("logo_left_images", True, "Ben"),
            ("final_names_dst", True, "Carla"),
            ("final_names_dst", False, "Dina"),
            ("final_names_dst", False, "Eve"),
        ]
        assert slots[2].upload_time is None


class TestParseLeads:
    """Malformed records are skipped, not raised."""

    def test_skips_bad_records(self, make_doc, caplog):
        raw = [
            make_doc(id="good"),
            {"id": "missing-date"},
            "not a document",
            make_doc(id="bad-qty", orders=[{"productType": "Jacket", "quantity": "many"}]),
        ]
        leads = parse_leads(raw)
        assert [lead.id for lead in leads] == ["good"]
        assert "Skipping malformed lead" in caplog.text

    def test_empty(self):
        assert parse_leads([]) == []
        assert parse_leads(None) == []


class TestClock:
    """Timestamp parsing and calendar helpers."""

    def test_parse_timestamp_variants(self):
        assert clock.parse_timestamp("2024-03-01T00:00:00Z").utcoffset().total_seconds() == 0
        assert clock.parse_timestamp("2024-03-01").tzinfo is clock.REPORT_TZ
        assert clock.parse_timestamp("") is None
        assert clock.parse_timestamp("31/12/2024") is None
        assert clock.parse_timestamp(12345) is None

    def test_add_months_clamps(self):
        start = clock.parse_timestamp("2023-01-31")
        assert clock.add_months(start, 1).date().isoformat() == "2023-02-28"
        assert clock.add_months(start, 12).date().isoformat() == "2024-01-31"

    def test_days_between_truncates(self):
        later = clock.parse_timestamp("2024-03-10T00:00:00")
        assert clock.days_between(later, clock.parse_timestamp("2024-03-08T12:00:00")) == 1
        assert clock.days_between(later, clock.parse_timestamp("2024-03-10T12:00:00")) == 0

    def test_week_bounds(self):
        wednesday = clock.parse_timestamp("2024-03-06T15:00:00")
        assert clock.start_of_week(wednesday).date().isoformat() == "2024-03-04"
        assert clock.end_of_week(wednesday).date().isoformat() == "2024-03-10"

    def test_parse_int(self):
        assert clock.parse_int("03") == 3
        assert clock.parse_int("2024abc") == 2024
        assert clock.parse_int("all") is None
        assert clock.parse_int(None) is None
        assert clock.parse_int(True) is None
