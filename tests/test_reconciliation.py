"""Unit tests for the pure reconciliation rules.

These run on plain lists: no store, no persistence, no network.
"""

from jobwatch.core.managers.reconciliation import find_optimistic_match, reconcile, replace
from jobwatch.core.models.job import JobStatus


class TestReconcile:
    """Upsert rule: head insertion, id supersession, placeholder replacement."""

    def test_inserts_new_record_at_head(self, job_factory):
        jobs = [job_factory("srv-1")]
        result = reconcile(jobs, job_factory("srv-2"))

        assert [j.id for j in result] == ["srv-2", "srv-1"]

    def test_input_list_is_not_mutated(self, job_factory):
        jobs = [job_factory("srv-1")]
        reconcile(jobs, job_factory("srv-2"))

        assert [j.id for j in jobs] == ["srv-1"]

    def test_same_id_is_replaced_and_moved_to_head(self, job_factory):
        jobs = [job_factory("srv-2"), job_factory("srv-1")]
        updated = job_factory("srv-1", status=JobStatus.RUNNING)

        result = reconcile(jobs, updated)

        assert [j.id for j in result] == ["srv-1", "srv-2"]
        assert result[0].status == JobStatus.RUNNING

    def test_authoritative_record_replaces_matching_placeholder(self, job_factory):
        placeholder = job_factory("pending-1000", idempotency_key="abc")
        jobs = [placeholder, job_factory("srv-0")]

        result = reconcile(jobs, job_factory("srv-1", idempotency_key="abc"))

        assert [j.id for j in result] == ["srv-1", "srv-0"]

    def test_placeholder_with_other_key_is_kept(self, job_factory):
        jobs = [job_factory("pending-1000", idempotency_key="other")]

        result = reconcile(jobs, job_factory("srv-1", idempotency_key="abc"))

        assert [j.id for j in result] == ["srv-1", "pending-1000"]

    def test_authoritative_record_without_key_keeps_placeholders(self, job_factory):
        jobs = [job_factory("pending-1000", idempotency_key=None)]

        result = reconcile(jobs, job_factory("srv-1"))

        assert [j.id for j in result] == ["srv-1", "pending-1000"]

    def test_authoritative_record_never_replaces_other_authoritative_with_same_key(self, job_factory):
        jobs = [job_factory("srv-0", idempotency_key="abc")]

        result = reconcile(jobs, job_factory("srv-1", idempotency_key="abc"))

        assert [j.id for j in result] == ["srv-1", "srv-0"]

    def test_optimistic_incoming_does_not_replace_placeholders(self, job_factory):
        jobs = [job_factory("pending-1000", idempotency_key="abc")]

        result = reconcile(jobs, job_factory("pending-2000", idempotency_key="abc"))

        assert [j.id for j in result] == ["pending-2000", "pending-1000"]

    def test_only_most_recent_duplicate_placeholder_is_replaced(self, job_factory):
        jobs = [
            job_factory("pending-3000", idempotency_key="abc"),
            job_factory("pending-2000", idempotency_key="abc"),
        ]

        result = reconcile(jobs, job_factory("srv-1", idempotency_key="abc"))

        assert [j.id for j in result] == ["srv-1", "pending-2000"]

    def test_truncates_to_limit(self, job_factory):
        jobs = [job_factory(f"srv-{i}") for i in range(5)]

        result = reconcile(jobs, job_factory("srv-new"), limit=5)

        assert len(result) == 5
        assert result[0].id == "srv-new"
        assert "srv-4" not in [j.id for j in result]

    def test_updating_existing_record_within_bound_keeps_size(self, job_factory):
        jobs = [job_factory(f"srv-{i}") for i in range(5)]

        result = reconcile(jobs, job_factory("srv-3"), limit=5)

        assert len(result) == 5
        assert {j.id for j in result} == {j.id for j in jobs}


class TestFindOptimisticMatch:
    def test_returns_index_of_first_match(self, job_factory):
        jobs = [
            job_factory("srv-0"),
            job_factory("pending-2", idempotency_key="k"),
            job_factory("pending-1", idempotency_key="k"),
        ]

        assert find_optimistic_match(jobs, job_factory("srv-1", idempotency_key="k")) == 1

    def test_returns_none_without_match(self, job_factory):
        jobs = [job_factory("pending-1", idempotency_key="x")]

        assert find_optimistic_match(jobs, job_factory("srv-1", idempotency_key="k")) is None


class TestReplace:
    def test_replaces_in_place(self, job_factory):
        jobs = [job_factory("srv-2"), job_factory("srv-1"), job_factory("srv-0")]
        updated = job_factory("srv-1", status=JobStatus.SUCCESS, attempts=1)

        result = replace(jobs, updated)

        assert [j.id for j in result] == ["srv-2", "srv-1", "srv-0"]
        assert result[1] is updated

    def test_replacement_is_wholesale(self, job_factory):
        jobs = [job_factory("srv-1", error_message="boom", locked_by="worker-1")]
        updated = job_factory("srv-1", status=JobStatus.SUCCESS)

        result = replace(jobs, updated)

        assert result[0].error_message is None
        assert result[0].locked_by is None

    def test_unknown_id_leaves_collection_unchanged(self, job_factory):
        jobs = [job_factory("srv-1")]

        result = replace(jobs, job_factory("srv-9"))

        assert [j.id for j in result] == ["srv-1"]
