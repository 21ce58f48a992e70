import asyncio
import json

import httpx
import pytest

from quiz_runner.models.quiz_model import QuizDefinition
from quiz_runner.services.quiz_client import QuizApiClient

BACKEND_URL = "http://backend.test/api"


def quiz_json(question_types=("mcq", "mcq"), duration=1, quiz_id="quiz-1"):
    questions = []
    for i, qtype in enumerate(question_types):
        q = {"questionType": qtype, "questionText": f"Question {i}"}
        if qtype == "mcq":
            q["options"] = [{"text": "A"}, {"text": "B"}, {"text": "C"}]
        questions.append(q)
    return {"_id": quiz_id, "title": "Sample Quiz", "duration": duration, "questions": questions}


def make_quiz(question_types=("mcq", "mcq"), duration=1) -> QuizDefinition:
    return QuizDefinition.model_validate(quiz_json(question_types, duration))


class FakeBackend:
    """httpx.MockTransport 로 붙는 가짜 퀴즈 백엔드. 요청을 기록한다."""

    def __init__(self, quiz=None, quiz_status=200, quiz_body=None,
                 submit_status=200, submit_body=None):
        self.quiz = quiz if quiz is not None else quiz_json()
        self.quiz_status = quiz_status
        self.quiz_body = quiz_body
        self.submit_status = submit_status
        self.submit_body = submit_body if submit_body is not None else {
            "result": {"status": "graded", "score": 2, "totalQuestions": 2}
        }
        self.fetches = []
        self.submissions = []
        self.submit_headers = []
        self.hold_submit = False
        self._release = None

    def release(self) -> None:
        self._release.set()

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "GET" and "/quizzes/" in path:
            self.fetches.append(request)
            if self.quiz_status != 200:
                return httpx.Response(self.quiz_status, json=self.quiz_body or {"message": "Quiz not found"})
            return httpx.Response(200, json=self.quiz)

        if request.method == "POST" and path.endswith("/results/submit"):
            self.submissions.append(json.loads(request.content))
            self.submit_headers.append(request.headers.get("Authorization"))
            if self.hold_submit:
                if self._release is None:
                    self._release = asyncio.Event()
                await self._release.wait()
            return httpx.Response(self.submit_status, json=self.submit_body)

        return httpx.Response(404, json={"message": "Not found"})

    def client(self) -> QuizApiClient:
        return QuizApiClient(base_url=BACKEND_URL, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def backend():
    return FakeBackend()
