import json
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from api_support import SAMPLE_RESUME, ApiTestCase, FakeAIClient  # noqa: E402
from resai.ai import prompts  # noqa: E402
from resai.ai.types import AIClientError  # noqa: E402
from resai.core.errors import AiGenerationFailed  # noqa: E402
from resai.services.ai_service import AiService  # noqa: E402


class SimpleGenerationTests(unittest.TestCase):
    def test_summary_uses_english_prompt_and_trims_output(self):
        client = FakeAIClient(replies=["  A seasoned engineer.  \n"])
        text = AiService(client=client).generate_summary("5 years of Python", "en")

        self.assertEqual(text, "A seasoned engineer.")
        call = client.calls[0]
        self.assertEqual(call["temperature"], 0.7)
        self.assertEqual(call["max_tokens"], 500)
        self.assertEqual(call["messages"][0].role, "system")
        self.assertIn("professional resume writer", call["messages"][0].content)
        self.assertEqual(call["messages"][1].content, "5 years of Python")

    def test_french_is_selected_case_insensitively(self):
        client = FakeAIClient(replies=["Résumé"])
        AiService(client=client).generate_summary("5 ans de Python", "FR")
        self.assertIn("rédacteur de CV", client.calls[0]["messages"][0].content)

    def test_experience_bullets_include_role_and_company(self):
        client = FakeAIClient(replies=["• Built things"])
        AiService(client=client).generate_experience_bullets(
            "built billing", {"role": "Engineer", "company": "Acme"}, "en"
        )
        system = client.calls[0]["messages"][0].content
        self.assertIn("Role: Engineer", system)
        self.assertIn("Company: Acme", system)

    def test_project_bullets_include_project_title(self):
        client = FakeAIClient(replies=["• Shipped"])
        AiService(client=client).generate_project_bullets("a CLI", {"projectTitle": "resai"}, "en")
        self.assertIn("Project: resai", client.calls[0]["messages"][0].content)

    def test_client_failure_surfaces_as_generation_failure(self):
        client = FakeAIClient(error=AIClientError("boom"))
        with self.assertRaises(AiGenerationFailed):
            AiService(client=client).generate_summary("text", "en")


class TailorResumeTests(unittest.TestCase):
    def test_tailored_fields_are_merged(self):
        reply = json.dumps({"professionalSummary": "Python backend engineer focused on payments."})
        client = FakeAIClient(replies=[f"```json\n{reply}\n```"])
        tailored = AiService(client=client).tailor_resume(SAMPLE_RESUME, "Payments engineer", "en")

        self.assertEqual(tailored["professionalSummary"], "Python backend engineer focused on payments.")
        self.assertEqual(tailored["experience"], SAMPLE_RESUME["experience"])
        self.assertEqual(client.calls[0]["temperature"], 0.5)
        self.assertEqual(client.calls[0]["max_tokens"], 2000)

    def test_unparsable_output_returns_original_document(self):
        client = FakeAIClient(replies=["Sorry, I can only answer in prose."])
        tailored = AiService(client=client).tailor_resume(SAMPLE_RESUME, "Payments engineer", "en")

        self.assertEqual(tailored, SAMPLE_RESUME)
        self.assertIsNot(tailored, SAMPLE_RESUME)

    def test_truncated_reply_keeps_original_document(self):
        original = dict(SAMPLE_RESUME, title="Senior Backend Engineer")
        reply = (
            '{"fullName": "Jane Doe", "experience": [{"title": "Intern", "company": "Acme", '
            '"location": "Paris"}], "skills": [{"name": "Back'
        )
        client = FakeAIClient(replies=[reply])
        tailored = AiService(client=client).tailor_resume(original, "Payments engineer", "en")

        self.assertEqual(tailored, original)
        self.assertNotIn("location", tailored)

    def test_client_failure_returns_original_document(self):
        client = FakeAIClient(error=AIClientError("timeout"))
        tailored = AiService(client=client).tailor_resume(SAMPLE_RESUME, "Payments engineer", "fr")
        self.assertEqual(tailored, SAMPLE_RESUME)

    def test_prompt_truncates_job_description_and_names_language(self):
        client = FakeAIClient(replies=["{}"])
        AiService(client=client).tailor_resume(SAMPLE_RESUME, "x" * 900, "fr")
        prompt = client.calls[0]["messages"][0].content

        self.assertIn("x" * 500 + "...", prompt)
        self.assertNotIn("x" * 501, prompt)
        self.assertIn("Write ALL content in French", prompt)


class CoverLetterTests(unittest.TestCase):
    def test_prompt_summarizes_candidate(self):
        client = FakeAIClient(replies=["Dear Hiring Manager,\n...\n"])
        letter = AiService(client=client).generate_cover_letter(SAMPLE_RESUME, "Payments engineer", "en")

        self.assertEqual(letter, "Dear Hiring Manager,\n...")
        prompt = client.calls[0]["messages"][0].content
        self.assertIn("Candidate: Jane Doe", prompt)
        self.assertIn("Experience: Software Engineer at Acme", prompt)
        self.assertIn("Skills: Python, SQL, Docker", prompt)
        self.assertEqual(client.calls[0]["max_tokens"], 800)

    def test_failure_raises(self):
        client = FakeAIClient(error=AIClientError("down"))
        with self.assertRaises(AiGenerationFailed):
            AiService(client=client).generate_cover_letter(SAMPLE_RESUME, "job", "en")


class AiEndpointTests(ApiTestCase):
    def test_generate_summary_returns_text_only(self):
        headers = self.register()
        self.ai_client.replies = ["  Seasoned backend engineer.  "]
        response = self.client.post(
            "/api/ai/generate-summary",
            json={"userInput": "5 years of Python", "language": "en"},
            headers=headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "generatedText": "Seasoned backend engineer."})

    def test_blank_input_is_rejected(self):
        headers = self.register()
        response = self.client.post("/api/ai/generate-summary", json={"userInput": "   "}, headers=headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.ai_client.calls, [])

    def test_generation_failure_uses_error_body(self):
        headers = self.register()
        self.ai_client.error = AIClientError("down")
        response = self.client.post(
            "/api/ai/generate-project-bullets",
            json={"userInput": "a CLI", "context": {"projectTitle": "resai"}},
            headers=headers,
        )
        self.assertEqual(response.status_code, 502)
        self.assertEqual(set(response.json()), {"error", "code"})


class PromptHelperTests(unittest.TestCase):
    def test_defaults_when_resume_is_sparse(self):
        self.assertEqual(prompts.brief_experience({}), "See resume")
        self.assertEqual(prompts.top_skills({"skills": []}), "See resume")

    def test_top_skills_caps_at_eight(self):
        data = {"skills": [{"name": "A", "items": [str(i) for i in range(6)]}, {"name": "B", "items": list("xyzw")}]}
        self.assertEqual(prompts.top_skills(data), "0, 1, 2, 3, 4, 5, x, y")

    def test_language_normalization(self):
        self.assertEqual(prompts.normalize_language(" Fr "), "fr")
        self.assertEqual(prompts.normalize_language("de"), "en")
        self.assertEqual(prompts.normalize_language(None), "en")


if __name__ == "__main__":
    unittest.main()
