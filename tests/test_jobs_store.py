import asyncio
import unittest

from models.commands import ArchiveJob, FetchJobs, ReorderJobs, command_from_dict
from models.errors import ReorderInProgressError, TransientError
from models.state import JobFilters
from stores.jobs_store import REORDER_FAILED, filter_and_paginate, move_item
from tests.support import make_context


class TestMoveItem(unittest.TestCase):
    def test_moves_forward_and_back(self):
        self.assertEqual(move_item(["a", "b", "c", "d"], 0, 2), ["b", "c", "a", "d"])
        self.assertEqual(move_item(["a", "b", "c", "d"], 3, 1), ["a", "d", "b", "c"])

    def test_does_not_touch_input(self):
        items = ["a", "b"]
        move_item(items, 0, 1)
        self.assertEqual(items, ["a", "b"])


class TestCommands(unittest.TestCase):
    def test_round_trip(self):
        for command in (FetchJobs(), ArchiveJob(job_id="7"), ReorderJobs(job_ids=("2", "1"))):
            with self.subTest(command=command):
                self.assertEqual(command_from_dict(command.to_dict()), command)

    def test_to_dict_is_tagged(self):
        self.assertEqual(ArchiveJob(job_id="7").to_dict(), {"type": "ArchiveJob", "job_id": "7"})


class JobsStoreTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.ctx = make_context()
        self.store = self.ctx.jobs
        await self.store.fetch_jobs()

    async def asyncTearDown(self):
        await self.ctx.aclose()

    def ids(self) -> list[str]:
        return [job.id for job in self.store.jobs]


class TestFilterAndPaginate(JobsStoreTestCase):
    def test_default_view_pages_the_active_jobs(self):
        page = self.store.visible_page()
        self.assertEqual(page.visible_count, 28)
        self.assertEqual(page.total_pages, 3)
        self.assertEqual(len(page.jobs), 10)

        self.store.set_page(3)
        self.assertEqual(len(self.store.visible_page().jobs), 8)

    def test_filters(self):
        jobs = self.store.jobs
        self.assertEqual(
            [j.id for j in filter_and_paginate(jobs, JobFilters(type="contract"), False, 1, 10).jobs],
            ["3", "13"],
        )
        self.assertEqual(filter_and_paginate(jobs, JobFilters(status="closed"), False, 1, 10).visible_count, 2)
        self.assertEqual(filter_and_paginate(jobs, JobFilters(search="TechCorp"), False, 1, 10).visible_count, 1)

        remote = filter_and_paginate(jobs, JobFilters(search="remote"), False, 1, 50)
        self.assertTrue(remote.jobs)
        self.assertTrue(all(j.matches_search("remote") for j in remote.jobs))

    def test_set_filter_resets_page(self):
        self.store.set_page(3)
        self.store.set_filter("type", "part-time")
        self.assertEqual(self.store.current_page, 1)
        self.assertEqual([j.id for j in self.store.visible_page().jobs], ["17"])

        with self.assertRaises(KeyError):
            self.store.set_filter("salary", "high")

    async def test_archived_toggle(self):
        await self.store.archive_job("4")
        self.assertNotIn("4", [j.id for j in self.store.visible_page().jobs])

        self.store.toggle_show_archived()
        page = self.store.visible_page()
        self.assertEqual([j.id for j in page.jobs], ["4"])
        self.assertEqual(page.total_pages, 1)


class TestReorder(JobsStoreTestCase):
    async def test_success_adopts_server_order(self):
        expected = move_item(self.ids(), 0, 3)

        result = await self.store.reorder_jobs(0, 3)

        self.assertTrue(result.success)
        self.assertEqual(self.ids(), expected)
        self.assertEqual([j.order for j in self.store.jobs], list(range(28)))
        self.assertIsNone(self.ctx.ui.global_error)

    async def test_optimistic_order_is_visible_before_the_call_settles(self):
        expected = move_item(self.ids(), 5, 0)
        self.ctx.server.router.latency_ms = 50

        task = asyncio.create_task(self.store.reorder_jobs(5, 0))
        await asyncio.sleep(0)
        self.assertEqual(self.ids(), expected)

        second = await self.store.reorder_jobs(0, 1)
        self.assertFalse(second.success)
        self.assertIsInstance(second.error, ReorderInProgressError)

        result = await task
        self.assertTrue(result.success)
        self.assertEqual(self.ids(), expected)

    async def test_failure_restores_the_snapshot(self):
        snapshot = list(self.store.jobs)
        self.ctx.server.failure_rate = 1.0

        result = await self.store.reorder_jobs(2, 7)

        self.assertFalse(result.success)
        self.assertEqual(self.store.jobs, snapshot)
        self.assertEqual(self.store.error, REORDER_FAILED)
        self.assertEqual(self.ctx.ui.global_error, REORDER_FAILED)
        self.assertEqual(self.ctx.db.jobs.get("3")["order"], 2)

    async def test_retry_replays_the_failed_reorder(self):
        expected = move_item(self.ids(), 2, 7)
        self.ctx.server.failure_rate = 1.0
        await self.store.reorder_jobs(2, 7)

        self.ctx.server.failure_rate = 0.0
        result = await self.store.retry_last_action()

        self.assertTrue(result.success)
        self.assertEqual(self.ids(), expected)
        self.assertIsNone(self.ctx.ui.global_error)

    async def test_same_index_is_a_no_op(self):
        self.ctx.server.failure_rate = 1.0
        result = await self.store.reorder_jobs(4, 4)
        self.assertTrue(result.success)
        self.assertIsInstance(self.store.last_command, FetchJobs)

    async def test_out_of_range(self):
        with self.assertRaises(IndexError):
            await self.store.reorder_jobs(0, 28)


class TestFetchAndMutate(JobsStoreTestCase):
    async def test_fetch_failure_is_absorbed(self):
        self.ctx.server.failure_rate = 1.0
        await self.store.fetch_jobs()

        self.assertEqual(self.store.error, "Network error: Failed to fetch jobs")
        self.assertEqual(self.ctx.ui.global_error, "Network error: Failed to fetch jobs")
        self.assertFalse(self.store.is_loading)
        self.assertEqual(len(self.store.jobs), 28)

    async def test_mutation_failure_is_raised(self):
        self.ctx.server.failure_rate = 1.0
        with self.assertRaises(TransientError):
            await self.store.update_job("1", {"title": "Principal React Developer"})
        self.assertEqual(self.ctx.ui.global_error, "Network error: Failed to update job")

    async def test_add_update_delete(self):
        job = await self.store.add_job({"title": "Data Engineer", "company": "Acme"})
        self.assertEqual(self.ids()[-1], job.id)

        updated = await self.store.update_job(job.id, {"location": "Berlin"})
        self.assertEqual(updated.location, "Berlin")
        self.assertEqual(self.store.jobs[-1].location, "Berlin")

        await self.store.delete_job(job.id)
        self.assertNotIn(job.id, self.ids())
        self.assertIsNone(self.ctx.db.jobs.get(job.id))

    async def test_retry_replays_only_the_last_action(self):
        self.ctx.server.failure_rate = 1.0
        await self.store.fetch_jobs()
        with self.assertRaises(TransientError):
            await self.store.archive_job("6")
        self.assertEqual(self.store.last_command, ArchiveJob(job_id="6"))

        self.ctx.server.failure_rate = 0.0
        job = await self.store.retry_last_action()

        self.assertTrue(job.archived)
        self.assertTrue(self.ctx.db.jobs.get("6")["archived"])
        self.assertIsNone(self.ctx.ui.global_error)

    async def test_retry_without_history(self):
        self.store.reset()
        self.assertIsNone(await self.store.retry_last_action())

    async def test_validate_slug(self):
        self.assertFalse(await self.store.validate_slug("senior-react-developer-1"))
        self.assertTrue(await self.store.validate_slug("senior-react-developer-1", exclude_id="1"))
        self.assertTrue(await self.store.validate_slug("something-new"))
        self.assertFalse(await self.store.validate_slug(""))

        self.ctx.server.failure_rate = 1.0
        self.assertTrue(await self.store.validate_slug("senior-react-developer-1"))

    async def test_applications(self):
        application = await self.store.submit_application({
            "jobId": "1", "candidateName": "Ada Lovelace", "email": "ada@example.com",
        })
        self.assertEqual(application.status, "pending")
        self.assertEqual([a.id for a in await self.store.fetch_applications("1")], [application.id])


if __name__ == "__main__":
    unittest.main()
