import unittest

from models.errors import InvalidRequestError, NotFoundError, TransientError
from tests.support import make_context

NEW_JOB = {
    "title": "Site Reliability Engineer",
    "company": "Acme",
    "location": "Remote",
    "type": "full-time",
    "salary": "$150k - $180k",
    "description": "Keep things up.",
    "requirements": ["Linux", "On-call"],
}


def _question(**overrides) -> dict:
    question = {"id": "q1", "text": "Pick one", "type": "multiple-choice", "options": ["a", "b"], "correctAnswer": "a"}
    question.update(overrides)
    return question


class MockApiTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.ctx = make_context()
        self.api = self.ctx.client

    async def asyncTearDown(self):
        await self.ctx.aclose()


class TestJobsEndpoints(MockApiTestCase):
    async def test_list_is_ordered(self):
        result = await self.api.get("/api/jobs")
        self.assertTrue(result.success)
        self.assertEqual(len(result.data), 28)
        self.assertEqual([j["order"] for j in result.data], list(range(28)))

    async def test_create_then_get(self):
        created = await self.api.post("/api/jobs", json_body=NEW_JOB)
        self.assertTrue(created.success)
        self.assertEqual(created.status_code, 201)
        job = created.data
        self.assertEqual(job["status"], "open")
        self.assertEqual(job["order"], 28)
        self.assertFalse(job["archived"])
        self.assertTrue(job["slug"].startswith("site-reliability-engineer-"))

        fetched = await self.api.get(f"/api/jobs/{job['id']}")
        self.assertEqual(fetched.data, job)

    async def test_create_with_taken_slug_is_rejected(self):
        result = await self.api.post("/api/jobs", json_body={**NEW_JOB, "slug": "senior-react-developer-1"})
        self.assertFalse(result.success)
        self.assertIsInstance(result.error, InvalidRequestError)
        self.assertEqual(result.message, "Slug is already in use")
        self.assertEqual(self.ctx.db.jobs.count(), 28)

    async def test_update_slug_conflict_excludes_self(self):
        same = await self.api.put("/api/jobs/1", json_body={"slug": "senior-react-developer-1", "salary": "$1"})
        self.assertTrue(same.success)
        self.assertEqual(same.data["salary"], "$1")

        taken = await self.api.put("/api/jobs/2", json_body={"slug": "senior-react-developer-1"})
        self.assertEqual(taken.status_code, 400)

    async def test_slug_must_be_in_slug_form(self):
        bad = await self.api.post("/api/jobs", json_body={**NEW_JOB, "slug": "Hello World!"})
        self.assertIsInstance(bad.error, InvalidRequestError)
        self.assertEqual(self.ctx.db.jobs.count(), 28)

        result = await self.api.put("/api/jobs/2", json_body={"slug": "Hello World!"})
        self.assertEqual(result.status_code, 400)
        self.assertEqual(self.ctx.db.jobs.get("2")["slug"], "full-stack-engineer-2")

    async def test_blank_slug_on_update_is_regenerated(self):
        result = await self.api.put("/api/jobs/2", json_body={"slug": ""})
        self.assertEqual(result.data["slug"], "full-stack-engineer-2")

        retitled = await self.api.put("/api/jobs/3", json_body={"title": "Web Developer", "slug": ""})
        self.assertEqual(retitled.data["slug"], "web-developer-3")

    async def test_update_missing_job(self):
        result = await self.api.put("/api/jobs/nope", json_body={"title": "X"})
        self.assertIsInstance(result.error, NotFoundError)

    async def test_validate_slug(self):
        cases = [
            ({"slug": "senior-react-developer-1"}, False),
            ({"slug": "senior-react-developer-1", "excludeId": "1"}, True),
            ({"slug": "brand-new"}, True),
            ({"slug": ""}, False),
        ]
        for params, expected in cases:
            with self.subTest(params=params):
                result = await self.api.get("/api/jobs/validate-slug", params=params)
                self.assertTrue(result.success)
                self.assertEqual(result.data["isValid"], expected)

    async def test_reorder(self):
        ids = [j["id"] for j in (await self.api.get("/api/jobs")).data]
        ids.insert(3, ids.pop(0))

        result = await self.api.patch("/api/jobs/reorder", json_body={"jobIds": ids})

        self.assertTrue(result.data["success"])
        self.assertEqual([j["id"] for j in result.data["jobs"]], ids)
        self.assertEqual(self.ctx.db.jobs.get("1")["order"], 3)

    async def test_reorder_with_unknown_id_writes_nothing(self):
        result = await self.api.patch("/api/jobs/reorder", json_body={"jobIds": ["2", "ghost", "1"]})
        self.assertEqual(result.status_code, 400)
        self.assertEqual(self.ctx.db.jobs.get("1")["order"], 0)
        self.assertEqual(self.ctx.db.jobs.get("2")["order"], 1)

    async def test_archive_and_unarchive(self):
        archived = await self.api.patch("/api/jobs/5/archive")
        self.assertTrue(archived.data["archived"])
        unarchived = await self.api.patch("/api/jobs/5/unarchive")
        self.assertFalse(unarchived.data["archived"])

        missing = await self.api.patch("/api/jobs/nope/archive")
        self.assertEqual(missing.status_code, 404)

    async def test_delete_is_idempotent(self):
        self.assertTrue((await self.api.delete("/api/jobs/4")).success)
        self.assertTrue((await self.api.delete("/api/jobs/4")).success)
        self.assertEqual(self.ctx.db.jobs.count(), 27)

    async def test_applications(self):
        created = await self.api.post("/api/applications", json_body={
            "jobId": "2", "candidateName": "Ada Lovelace", "email": "ada@example.com",
        })
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.data["status"], "pending")

        listed = await self.api.get("/api/jobs/2/applications")
        self.assertEqual([a["id"] for a in listed.data], [created.data["id"]])
        self.assertEqual((await self.api.get("/api/jobs/3/applications")).data, [])


class TestCandidatesEndpoints(MockApiTestCase):
    async def test_pagination(self):
        result = await self.api.get("/api/candidates", params={"page": 2, "limit": 50})
        self.assertEqual(len(result.data["data"]), 50)
        self.assertEqual(result.data["data"][0]["id"], "candidate-51")
        self.assertEqual(result.data["pagination"], {"page": 2, "limit": 50, "total": 1500, "totalPages": 30})

    async def test_page_past_the_end_is_empty(self):
        result = await self.api.get("/api/candidates", params={"page": 31, "limit": 50})
        self.assertEqual(result.data["data"], [])
        self.assertEqual(result.data["pagination"]["totalPages"], 30)

    async def test_bad_page_param(self):
        result = await self.api.get("/api/candidates", params={"page": 0})
        self.assertEqual(result.status_code, 400)

    async def test_search_and_status_filter(self):
        first = (await self.api.get("/api/candidates/candidate-1")).data
        needle = first["name"].split()[0].lower()

        result = await self.api.get("/api/candidates", params={"search": needle.upper(), "status": first["status"], "limit": 2000})
        rows = result.data["data"]
        self.assertIn("candidate-1", [c["id"] for c in rows])
        for c in rows:
            self.assertEqual(c["status"], first["status"])
            self.assertTrue(needle in c["name"].lower() or needle in c["email"].lower())
        self.assertEqual(result.data["pagination"]["total"], len(rows))

    async def test_status_change_records_history(self):
        current = (await self.api.get("/api/candidates/candidate-3")).data["status"]
        target = "offer" if current != "offer" else "rejected"

        unchanged = await self.api.patch("/api/candidates/candidate-3/status", json_body={"status": current})
        self.assertEqual(unchanged.data["statusHistory"], [])

        changed = await self.api.patch("/api/candidates/candidate-3/status", json_body={"status": target})
        self.assertEqual(changed.data["status"], target)
        history = (await self.api.get("/api/candidates/candidate-3/history")).data
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0]["from"], current)
        self.assertEqual(history[0]["to"], target)
        self.assertEqual(history[0]["changedBy"], "John Doe")

    async def test_invalid_status(self):
        result = await self.api.patch("/api/candidates/candidate-3/status", json_body={"status": "hired"})
        self.assertIsInstance(result.error, InvalidRequestError)

    async def test_note_on_missing_candidate(self):
        result = await self.api.post("/api/candidates/candidate-99999/notes", json_body={"text": "hi"})
        self.assertEqual(result.status_code, 404)

    async def test_note_is_attached(self):
        result = await self.api.post("/api/candidates/candidate-2/notes", json_body={
            "text": "Ping @Grace Lee", "mentions": ["Grace Lee"], "candidateId": "someone-else",
        })
        self.assertEqual(result.status_code, 201)
        self.assertEqual(result.data["candidateId"], "candidate-2")
        self.assertEqual(result.data["createdBy"], "John Doe")

        candidate = (await self.api.get("/api/candidates/candidate-2")).data
        self.assertEqual([n["text"] for n in candidate["notes"]], ["Ping @Grace Lee"])

    async def test_delete(self):
        self.assertTrue((await self.api.delete("/api/candidates/candidate-10")).success)
        self.assertEqual((await self.api.get("/api/candidates/candidate-10")).status_code, 404)
        self.assertEqual((await self.api.get("/api/candidates")).data["pagination"]["total"], 1499)


class TestAssessmentsEndpoints(MockApiTestCase):
    def _assessment(self, job_id: str, **overrides) -> dict:
        body = {
            "jobId": job_id,
            "title": "Screening",
            "duration": 30,
            "passingScore": 70,
            "questions": [_question()],
        }
        body.update(overrides)
        return body

    async def test_by_job(self):
        found = await self.api.get("/api/assessments/job/1")
        self.assertEqual(found.data["jobId"], "1")
        self.assertEqual((await self.api.get("/api/assessments/job/4")).status_code, 404)

    async def test_one_assessment_per_job(self):
        conflict = await self.api.post("/api/assessments", json_body=self._assessment("1"))
        self.assertEqual(conflict.status_code, 400)
        self.assertEqual(conflict.message, "Assessment already exists for this job")

        created = await self.api.post("/api/assessments", json_body=self._assessment("4"))
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.data["createdAt"], created.data["updatedAt"])
        self.assertEqual(self.ctx.db.assessments.count(), 4)

    async def test_update(self):
        result = await self.api.put("/api/assessments/2", json_body={"passingScore": 90})
        self.assertEqual(result.data["passingScore"], 90)
        self.assertEqual(result.data["jobId"], "2")

        moved = await self.api.put("/api/assessments/2", json_body={"jobId": "3"})
        self.assertEqual(moved.status_code, 400)

    async def test_invalid_question_is_rejected(self):
        bad = self._assessment("5", questions=[_question(options=None, correctAnswer=None)])
        result = await self.api.post("/api/assessments", json_body=bad)
        self.assertEqual(result.status_code, 400)

        wrong_answer = self._assessment("5", questions=[_question(correctAnswer="z")])
        self.assertEqual((await self.api.post("/api/assessments", json_body=wrong_answer)).status_code, 400)
        self.assertEqual(self.ctx.db.assessments.count(), 3)

    async def test_missing_job_id(self):
        body = self._assessment("1")
        del body["jobId"]
        self.assertEqual((await self.api.post("/api/assessments", json_body=body)).status_code, 400)


class TestRouting(MockApiTestCase):
    async def test_injected_failure_leaves_no_partial_state(self):
        self.ctx.server.failure_rate = 1.0

        result = await self.api.post("/api/jobs", json_body=NEW_JOB)

        self.assertIsInstance(result.error, TransientError)
        self.assertEqual(result.status_code, 500)
        self.assertEqual(result.message, "Network error: Failed to create job")
        self.assertEqual(self.ctx.db.jobs.count(), 28)

    async def test_unknown_route(self):
        result = await self.api.get("/api/unknown")
        self.assertEqual(result.status_code, 404)

    async def test_malformed_json(self):
        response = await self.api._client.post("/api/jobs", content=b"{not json")
        self.assertEqual(response.status_code, 400)


if __name__ == "__main__":
    unittest.main()
