import json
import sys
import unittest
from pathlib import Path

import httpx

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from jobheist.core.errors import CollectionError  # noqa: E402
from jobheist.integrations.firecrawl import FirecrawlClient, FirecrawlError  # noqa: E402
from jobheist.services.job_collector import (  # noqa: E402
    build_job,
    collect,
    detect_technologies,
    resolve_max_age,
)

JOB_URL = "https://jobs.example.com/backend"


class _Recorder:
    def __init__(self, responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        return response

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def _client(recorder: _Recorder, **kwargs) -> FirecrawlClient:
    return FirecrawlClient(
        "fc-test",
        base_url="https://firecrawl.test",
        transport=httpx.MockTransport(recorder),
        retry_backoff_s=0,
        **kwargs,
    )


def _ok(data: dict) -> httpx.Response:
    return httpx.Response(200, json={"success": True, "data": data})


class BuildJobTests(unittest.TestCase):
    def test_null_json_and_markdown_is_a_collection_error(self):
        with self.assertRaises(CollectionError):
            build_job(JOB_URL, {"json": None, "markdown": None})

    def test_partial_extraction_is_defaulted(self):
        job = build_job(JOB_URL, {"json": {"requiredSkills": ["Python"]}, "markdown": None})
        self.assertEqual(job.title, "Unknown Position")
        self.assertEqual(job.company, "Unknown Company")
        self.assertEqual(job.required_skills, ["Python"])
        self.assertEqual(job.nice_to_have, [])
        self.assertEqual(job.keywords, [])
        self.assertIsNone(job.experience_years)
        self.assertEqual(job.text, "")
        self.assertEqual(job.url, JOB_URL)

    def test_markdown_only_scrape_is_a_success(self):
        job = build_job(JOB_URL, {"markdown": "# Backend Engineer"})
        self.assertEqual(job.text, "# Backend Engineer")
        self.assertEqual(job.title, "Unknown Position")

    def test_alternate_extraction_keys_are_mapped(self):
        data = {
            "markdown": "posting body",
            "json": {
                "jobTitle": "Backend Engineer",
                "companyName": "Acme",
                "qualifications": ["5+ years with Python and AWS", "Experience with React"],
                "responsibilities": ["Own the billing service"],
                "experienceYears": "5+ years",
            },
        }
        job = build_job(JOB_URL, data)
        self.assertEqual(job.title, "Backend Engineer")
        self.assertEqual(job.company, "Acme")
        self.assertEqual(job.required_skills, data["json"]["qualifications"])
        self.assertEqual(job.must_have_requirements, data["json"]["qualifications"])
        self.assertEqual(job.key_responsibilities, ["Own the billing service"])
        self.assertEqual(job.technologies, ["React", "Python", "AWS"])
        self.assertEqual(job.experience_years, 5.0)

    def test_text_falls_back_to_job_description(self):
        job = build_job(JOB_URL, {"json": {"jobDescription": "We build things."}})
        self.assertEqual(job.text, "We build things.")

    def test_job_is_immutable(self):
        job = build_job(JOB_URL, {"markdown": "body"})
        with self.assertRaises(Exception):
            job.title = "Other"


class DetectTechnologiesTests(unittest.TestCase):
    def test_matching_is_case_sensitive_and_word_bounded(self):
        found = detect_technologies(["Go and Rust services", "we go further", "Javascript-free", "Node.js APIs"])
        self.assertIn("Go", found)
        self.assertIn("Rust", found)
        self.assertIn("Node.js", found)
        self.assertNotIn("Java", found)
        self.assertNotIn("JavaScript", found)


class ResolveMaxAgeTests(unittest.TestCase):
    def test_default_is_one_hour(self):
        self.assertEqual(resolve_max_age(), 3_600_000)

    def test_fresh_forces_zero(self):
        self.assertEqual(resolve_max_age(5000, fresh=True), 0)

    def test_explicit_age_is_used(self):
        self.assertEqual(resolve_max_age(5000), 5000)


class CollectTests(unittest.IsolatedAsyncioTestCase):
    async def test_scrape_request_shape_and_default_cache_age(self):
        recorder = _Recorder([_ok({"markdown": "# Role", "json": {"title": "Role", "company": "Acme"}})])

        job = await collect(JOB_URL, "fc-test", client=_client(recorder))

        self.assertEqual(job.title, "Role")
        request = recorder.requests[0]
        self.assertEqual(request.url.path, "/v2/scrape")
        self.assertEqual(request.headers["authorization"], "Bearer fc-test")
        body = recorder.body()
        self.assertEqual(body["url"], JOB_URL)
        self.assertEqual(body["maxAge"], 3_600_000)
        self.assertEqual(body["formats"][0], "markdown")
        self.assertEqual(body["formats"][1]["type"], "json")
        self.assertIn("requiredSkills", body["formats"][1]["schema"]["properties"])

    async def test_fresh_sends_zero_max_age(self):
        recorder = _Recorder([_ok({"markdown": "# Role"})])

        await collect(JOB_URL, "fc-test", fresh=True, client=_client(recorder))

        self.assertEqual(recorder.body()["maxAge"], 0)

    async def test_empty_scrape_is_a_collection_error(self):
        recorder = _Recorder([_ok({"json": None, "markdown": None})])

        with self.assertRaises(CollectionError):
            await collect(JOB_URL, "fc-test", client=_client(recorder))

    async def test_client_error_is_not_retried(self):
        recorder = _Recorder([httpx.Response(401, json={"success": False, "error": "Unauthorized"})])

        with self.assertRaises(CollectionError):
            await collect(JOB_URL, "fc-test", client=_client(recorder, max_retries=2))
        self.assertEqual(len(recorder.requests), 1)

    async def test_server_errors_are_retried(self):
        recorder = _Recorder([httpx.Response(502), httpx.Response(503), _ok({"markdown": "# Role"})])

        job = await collect(JOB_URL, "fc-test", client=_client(recorder, max_retries=2))

        self.assertEqual(job.text, "# Role")
        self.assertEqual(len(recorder.requests), 3)

    async def test_retries_are_bounded(self):
        recorder = _Recorder([httpx.Response(500)])

        with self.assertRaises(FirecrawlError) as ctx:
            await _client(recorder, max_retries=2).scrape(JOB_URL, json_schema={}, max_age_ms=0)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(len(recorder.requests), 3)

    async def test_unsuccessful_payload_raises(self):
        recorder = _Recorder([httpx.Response(200, json={"success": False, "error": "blocked"})])

        with self.assertRaises(FirecrawlError) as ctx:
            await _client(recorder).scrape(JOB_URL, json_schema={}, max_age_ms=0)
        self.assertIn("blocked", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
