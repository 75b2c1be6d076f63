"""Tests for JSON persistence and the locked round close."""
import random
import threading

import pytest

from core.cache import MemoryCache
from core.config import ContinuityBonusConfig, TournamentSettings
from core.errors import RoundAlreadyClosedError
from tournaments import storage

from conftest import play_group

WORKED = [(4, 2), (5, 4, "7-5"), (4, 3)]


def _ids(n):
    return [f"P{i}" for i in range(1, n + 1)]


class TestCreateTournament:

    def test_creates_first_round(self, data_dir):
        t = storage.create_tournament("liga", "Liga", _ids(9), total_rounds=4, rng=random.Random(1))
        assert storage.tournament_exists("liga")
        assert len(t["rounds"][0]["groups"]) == 2
        assert len(t["skipped_players"]) == 1
        assert (data_dir / "tournaments" / "liga.json").exists()

    def test_round_trip(self, data_dir):
        settings = TournamentSettings(continuity=ContinuityBonusConfig(enabled=True))
        t = storage.create_tournament("liga", "Liga", _ids(4), 2, settings=settings, strategy="ranking")
        loaded = storage.load_tournament("liga")
        assert loaded == t
        assert loaded["settings"]["continuity"]["enabled"] is True

    def test_existing_is_returned(self, data_dir):
        first = storage.create_tournament("liga", "Liga", _ids(4), 2, strategy="ranking")
        again = storage.create_tournament("liga", "Otra", _ids(8), 5)
        assert again == first

    def test_concurrent_creates_write_once(self, data_dir):
        barrier = threading.Barrier(2)
        results = {}

        def _create(name, seed):
            barrier.wait()
            results[name] = storage.create_tournament("liga", name, _ids(8), 3, rng=random.Random(seed))

        threads = [threading.Thread(target=_create, args=(n, s)) for n, s in (("A", 1), ("B", 2))]
        for th in threads:
            th.start()
        for th in threads:
            th.join()

        saved = storage.load_tournament("liga")
        assert results["A"] == saved
        assert results["B"] == saved
        history = list((data_dir / "tournaments" / "history").glob("liga_*.json"))
        assert len(history) == 1

    def test_every_save_is_snapshotted(self, data_dir):
        storage.create_tournament("liga", "Liga", _ids(4), 2, strategy="ranking")
        history = list((data_dir / "tournaments" / "history").glob("liga_*.json"))
        assert len(history) == 1


class TestCloseRoundLocked:

    def _ready(self):
        t = storage.create_tournament("liga", "Liga", _ids(8), 3, strategy="ranking")
        for g in t["rounds"][0]["groups"]:
            play_group(g, WORKED)
        storage.save_tournament(t)
        return t

    def test_close_is_persisted(self, data_dir):
        self._ready()
        cache = MemoryCache()
        cache.set("rankings:liga", {}, ttl=60)

        summary = storage.close_round_locked("liga", 1, cache=cache)
        assert summary["next_round_generated"] is True
        assert cache.get("rankings:liga") is None

        saved = storage.load_tournament("liga")
        assert saved["rounds"][0]["closed"] is True
        assert [r["number"] for r in saved["rounds"]] == [1, 2]

    def test_second_close_rejected(self, data_dir):
        self._ready()
        storage.close_round_locked("liga", 1)
        with pytest.raises(RoundAlreadyClosedError):
            storage.close_round_locked("liga", 1)
        assert len(storage.load_tournament("liga")["rounds"]) == 2

    def test_reopen_is_persisted(self, data_dir):
        self._ready()
        storage.close_round_locked("liga", 1)

        summary = storage.reopen_round_locked("liga", 1)
        assert summary["reopened"] is True

        saved = storage.load_tournament("liga")
        assert saved["rounds"][0]["closed"] is False
        assert len(saved["rounds"]) == 1
