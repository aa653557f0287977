"""Tests for saved-calculation storage, export and import."""

import json

import pytest

from app.schemas import StorageError, WithdrawalStrategy
from app.services import StorageService


class TestStorageService:
    def test_empty_store(self, storage_service):
        assert storage_service.get_all_calculations() == []
        assert storage_service.get_calculation("calc_1") is None

    def test_save_and_load(self, storage_service):
        saved = storage_service.save_calculation("Plan A", {"years": 20}, {"finalValue": 123.4})
        assert saved.id.startswith("calc_")
        assert saved.timestamp

        loaded = storage_service.get_all_calculations()
        assert len(loaded) == 1
        assert loaded[0].name == "Plan A"
        assert loaded[0].input_params == {"years": 20}
        assert loaded[0].results == {"finalValue": 123.4}

    def test_file_layout(self, storage_service):
        storage_service.save_calculation("Plan A", {"years": 20}, {})
        data = json.loads(storage_service.path.read_text(encoding="utf-8"))
        record = data["calculations"][0]
        assert set(record) == {"id", "name", "timestamp", "inputParams", "results"}

    def test_ids_are_unique(self, storage_service):
        first = storage_service.save_calculation("A", {}, {})
        second = storage_service.save_calculation("B", {}, {})
        assert first.id != second.id

    def test_engine_results_are_serialised(self, storage_service, fire_service):
        result = fire_service.simulate_withdrawal(1000000, 40000, 4, 5, 2, years=3, start_year=2024)
        saved = storage_service.save_calculation("Withdrawal", {}, result)
        loaded = storage_service.get_calculation(saved.id)
        assert loaded.results["strategy"] == WithdrawalStrategy.CONSTANT_DOLLAR.value
        assert len(loaded.results["yearly_data"]) == 3
        assert loaded.results["yearly_data"][0]["year"] == 2025

    def test_mixed_breakdown_is_serialised(self, storage_service, growth_service):
        from app.schemas import AllocationLeg

        legs = [AllocationLeg("Stocks", 70, 8), AllocationLeg("Bonds", 30, 4)]
        result = growth_service.simulate_mixed_allocation(1000, 10, legs, 2, start_year=2024)
        saved = storage_service.save_calculation("Mixed", {}, result)
        snapshot = storage_service.get_calculation(saved.id).results["yearly_projections"][0]
        assert set(snapshot["breakdown"]) == {"Stocks", "Bonds"}

    def test_delete(self, storage_service):
        saved = storage_service.save_calculation("A", {}, {})
        assert storage_service.delete_calculation(saved.id)
        assert not storage_service.delete_calculation(saved.id)
        assert storage_service.get_all_calculations() == []

    def test_clear(self, storage_service):
        storage_service.save_calculation("A", {}, {})
        storage_service.clear()
        assert not storage_service.path.exists()
        assert storage_service.get_all_calculations() == []

    def test_corrupt_file_reads_as_empty(self, storage_service):
        storage_service.path.write_text("{not json", encoding="utf-8")
        assert storage_service.get_all_calculations() == []

    def test_malformed_entries_are_skipped(self, storage_service):
        storage_service.path.write_text(json.dumps({"calculations": [42, {"name": "x"}]}), encoding="utf-8")
        assert storage_service.get_all_calculations() == []
        assert storage_service.delete_calculation("calc_1") is False

        saved = storage_service.save_calculation("A", {}, {})
        assert [calc.id for calc in storage_service.get_all_calculations()] == [saved.id]

    def test_export_single_and_all(self, storage_service):
        first = storage_service.save_calculation("A", {"x": 1}, {})
        storage_service.save_calculation("B", {"x": 2}, {})

        single = json.loads(storage_service.export_json(first.id))
        assert single["id"] == first.id
        everything = json.loads(storage_service.export_json())
        assert [calc["name"] for calc in everything["calculations"]] == ["A", "B"]

    def test_export_unknown_id(self, storage_service):
        with pytest.raises(StorageError):
            storage_service.export_json("calc_missing")

    def test_import_merges_and_skips_duplicates(self, storage_service, tmp_path):
        storage_service.save_calculation("A", {}, {})
        storage_service.save_calculation("B", {}, {})
        exported = storage_service.export_json()

        other = StorageService(str(tmp_path / "other.json"))
        assert other.import_json(exported) == 2
        assert other.import_json(exported) == 0
        assert [calc.name for calc in other.get_all_calculations()] == ["A", "B"]

    def test_import_single_record(self, storage_service, tmp_path):
        saved = storage_service.save_calculation("A", {}, {})
        other = StorageService(str(tmp_path / "other.json"))
        assert other.import_json(storage_service.export_json(saved.id)) == 1
        assert other.get_calculation(saved.id).name == "A"

    @pytest.mark.parametrize("payload", ["not json", "[]", '{"foo": 1}', '{"calculations": [{"name": "x"}]}'])
    def test_import_rejects_invalid_payloads(self, storage_service, payload):
        with pytest.raises(StorageError):
            storage_service.import_json(payload)
