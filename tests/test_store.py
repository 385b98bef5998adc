"""Tests for oscillator/store.py: saved-simulation records."""

from __future__ import annotations

import json
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from simulation import PendulumParams, SpringParams
from oscillator.clock import ManualScheduler
from oscillator.session import SimulationSession
from oscillator.store import MAX_RECORDS, SimulationRecord, SimulationStore, StoreStats


class TestSimulationStore:

    def test_missing_file_is_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SimulationStore(Path(tmpdir) / "sims.json")
            assert len(store) == 0
            assert store.records() == []

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / "sims.json"
            params = PendulumParams(mass=2, length=2, gravity=9.81, angle=0.5, damping=0.05)
            record = SimulationStore(path).save("  Damped run ", params, "notes")

            reloaded = SimulationStore(path)
            assert len(reloaded) == 1
            loaded = reloaded.get(record.id)
            assert loaded.title == "Damped run"
            assert loaded.type == "pendulum"
            assert loaded.description == "notes"
            assert loaded.restore_params() == params

    def test_parameters_round_trip_json(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "sims.json"
            params = SpringParams(mass=0.5, spring_constant=50, amplitude=2.0,
                                  damping=0.1, simulation_speed=0.25)
            SimulationStore(path).save("Light", params)

            with open(path) as f:
                data = json.load(f)
            assert data[0]["parameters"] == {
                "mass": 0.5, "springConstant": 50.0, "amplitude": 2.0,
                "damping": 0.1, "simulationSpeed": 0.25,
            }
            assert "createdAt" in data[0]
            assert SimulationStore(path).records()[0].restore_params() == params

    def test_newest_first(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SimulationStore(Path(tmpdir) / "sims.json")
            store.save("first", SpringParams())
            store.save("second", SpringParams())
            assert [r.title for r in store.records()] == ["second", "first"]

    def test_capped(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SimulationStore(Path(tmpdir) / "sims.json")
            for i in range(MAX_RECORDS + 5):
                store.save(f"run {i}", SpringParams())
            assert len(store) == MAX_RECORDS
            assert store.records()[0].title == f"run {MAX_RECORDS + 4}"

    def test_empty_title_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SimulationStore(Path(tmpdir) / "sims.json")
            with pytest.raises(ValueError):
                store.save("   ", SpringParams())

    def test_update(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "sims.json"
            store = SimulationStore(path)
            record = store.save("old", SpringParams())
            updated = store.update(record.id, title="new")
            assert updated.title == "new"
            assert updated.updated_at is not None
            assert updated.created_at == record.created_at
            assert SimulationStore(path).get(record.id).title == "new"

    def test_delete(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SimulationStore(Path(tmpdir) / "sims.json")
            record = store.save("gone", SpringParams())
            store.delete(record.id)
            assert len(store) == 0
            with pytest.raises(KeyError):
                store.get(record.id)
            with pytest.raises(KeyError):
                store.delete(record.id)

    def test_export(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SimulationStore(Path(tmpdir) / "sims.json")
            record = store.save("My Spring Run", SpringParams())
            out = store.export(record.id, Path(tmpdir) / "exports")
            assert out.name == f"shm_simulation_My_Spring_Run_{record.id}.json"
            with open(out) as f:
                data = json.load(f)
            assert SimulationRecord.from_json(data) == record

    def test_save_session(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SimulationStore(Path(tmpdir) / "sims.json")
            scheduler = ManualScheduler()
            with SimulationSession(PendulumParams(), scheduler) as session:
                session.play()
                scheduler.fire(0.0)
                scheduler.advance(500.0)
            record = store.save_session("live", session)
            assert record.time == pytest.approx(0.5)
            assert record.restore_params() == session.params

    @pytest.mark.parametrize("title", ["a/b", "x/../../../escaped", "..", "c:\\d"])
    def test_export_stays_in_directory(self, title):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SimulationStore(Path(tmpdir) / "sims.json")
            record = store.save(title, SpringParams())
            directory = Path(tmpdir) / "exports"
            out = store.export(record.id, directory)
            assert out.parent == directory
            assert out.exists()
            assert sorted(p.name for p in Path(tmpdir).iterdir()) == ["exports", "sims.json"]

    def test_stats(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "sims.json"
            old = SimulationRecord(
                id="old", title="archived", type="pendulum",
                parameters={"length": 1.0}, created_at="2020-01-15T10:00:00+00:00",
            )
            with open(path, "w") as f:
                json.dump([old.to_json()], f)
            store = SimulationStore(path)
            store.save("spring one", SpringParams())
            store.save("spring two", SpringParams())
            store.save("pendulum", PendulumParams())

            stats = store.stats()
            assert stats == StoreStats(total=4, spring_count=2, pendulum_count=2, this_month=3)

            jan_2020 = datetime(2020, 1, 31, tzinfo=timezone.utc)
            assert store.stats(now=jan_2020).this_month == 1

    def test_stats_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SimulationStore(Path(tmpdir) / "sims.json")
            assert store.stats() == StoreStats(0, 0, 0, 0)


class TestSimulationRecord:

    def test_parameters_read_only(self):
        params = {"mass": 1.0}
        record = SimulationRecord(id="r", title="t", type="spring",
                                  parameters=params, created_at="2024-01-01T00:00:00+00:00")
        with pytest.raises(TypeError):
            record.parameters["mass"] = 5.0
        params["mass"] = 9.0
        assert record.parameters["mass"] == 1.0

    def test_stored_record_unaffected_by_caller(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "sims.json"
            store = SimulationStore(path)
            record = store.save("fixed", SpringParams(mass=2.0))
            with pytest.raises(TypeError):
                store.get(record.id).parameters["mass"] = 100.0
            assert store.get(record.id).restore_params().mass == 2.0

    def test_to_json_is_plain_dict(self):
        record = SimulationRecord(id="r", title="t", type="spring",
                                  parameters={"mass": 1.0}, created_at="2024-01-01T00:00:00+00:00")
        data = record.to_json()
        assert type(data["parameters"]) is dict
        assert json.loads(json.dumps(data)) == data
        assert SimulationRecord.from_json(data) == record
