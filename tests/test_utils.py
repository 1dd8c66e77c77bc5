"""Tests for content hashing, batching and fallback chains."""

from __future__ import annotations

import asyncio

import pytest

from skill_roadmap.models.resume import ResumeDocument
from skill_roadmap.utils.batching import batch_process
from skill_roadmap.utils.content_hash import compute_content_hash, normalize_content, normalize_text
from skill_roadmap.utils.result import Err, FallbackExhaustedError, Ok, first_success


class TestContentHash:
    def test_whitespace_and_case_insensitive(self):
        a = compute_content_hash("Senior  Engineer\n\n\nPython")
        b = compute_content_hash("senior engineer\npython  ")
        assert a == b

    def test_content_change_changes_hash(self):
        assert compute_content_hash("Python") != compute_content_hash("Java")

    def test_volatile_keys_ignored(self, sample_resume):
        changed = {
            **sample_resume,
            "metadata": {**sample_resume["metadata"], "uploadedAt": "2027-01-01T00:00:00Z"},
        }
        assert compute_content_hash(sample_resume) == compute_content_hash(changed)

    def test_file_location_ignored(self):
        a = ResumeDocument(content="Python engineer", file_path="/home/jane/cv.txt")
        b = ResumeDocument(content="Python engineer", file_path="/tmp/upload-91.txt")
        assert compute_content_hash(a) == compute_content_hash(b)

    def test_key_order_ignored(self):
        assert compute_content_hash({"a": 1, "b": [1, 2]}) == compute_content_hash({"b": [1, 2], "a": 1})

    def test_list_order_matters(self):
        assert compute_content_hash({"skills": ["a", "b"]}) != compute_content_hash({"skills": ["b", "a"]})

    def test_none_values_ignored(self):
        assert compute_content_hash({"a": 1, "b": None}) == compute_content_hash({"a": 1})

    def test_model_and_dict_agree(self, sample_resume):
        document = ResumeDocument.model_validate(sample_resume)
        assert compute_content_hash(document) == compute_content_hash(document.model_dump(mode="json"))

    def test_hash_is_sha256_hex(self):
        digest = compute_content_hash("x")
        assert len(digest) == 64
        int(digest, 16)

    def test_normalize_text_drops_blank_lines(self):
        assert normalize_text("  A\t\tB \n\n  \nC ") == "a b\nc"

    def test_normalize_content_sorted_json(self):
        assert normalize_content({"b": "X", "a": 1}) == '{"a":1,"b":"x"}'


class TestBatchProcess:
    async def test_preserves_order(self):
        async def double(x):
            await asyncio.sleep(0.001 * (5 - x))
            return x * 2

        assert await batch_process([1, 2, 3, 4], double, batch_size=2) == [2, 4, 6, 8]

    async def test_batches_run_sequentially(self):
        in_flight = 0
        peak = 0

        async def worker(x):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return x

        await batch_process(list(range(12)), worker, batch_size=5)
        assert peak == 5

    async def test_empty_input(self):
        async def worker(x):
            return x

        assert await batch_process([], worker) == []

    async def test_worker_errors_propagate(self):
        async def worker(x):
            if x == 3:
                raise RuntimeError("boom")
            return x

        with pytest.raises(RuntimeError, match="boom"):
            await batch_process([1, 2, 3], worker)

    async def test_invalid_batch_size(self):
        async def worker(x):
            return x

        with pytest.raises(ValueError, match="batch_size"):
            await batch_process([1], worker, batch_size=0)


class TestFirstSuccess:
    async def test_first_ok_wins_and_later_stages_skipped(self):
        calls = []

        def stage(name, result):
            async def run():
                calls.append(name)
                return result

            return name, run

        outcome = await first_success([
            stage("cache", Err(LookupError("miss"))),
            stage("api", Ok("record")),
            stage("fallback", Ok("generic")),
        ])
        assert outcome.value == "record"
        assert outcome.stage == "api"
        assert [name for name, _ in outcome.errors] == ["cache"]
        assert calls == ["cache", "api"]

    async def test_all_failing_raises(self):
        async def fail():
            return Err(RuntimeError("down"))

        with pytest.raises(FallbackExhaustedError, match="down") as exc_info:
            await first_success([("a", fail), ("b", fail)])
        assert len(exc_info.value.errors) == 2

    def test_ok_and_err_flags(self):
        assert Ok(1).ok is True
        assert Err(ValueError()).ok is False
