"""Shortcuts for building courses, steps and quizzes through the API."""
import uuid
from typing import Dict, List, Optional

from fastapi.testclient import TestClient

from tests.helpers.asserts import api_call, data_of


def create_course(client: TestClient, headers: Dict[str, str], **fields) -> dict:
    payload = {"title": f"Course {uuid.uuid4().hex[:6]}", "visibility": "public"}
    payload.update(fields)
    return data_of(api_call(client, "POST", "/courses/", headers=headers, json=payload))


def question(text: str, options: List[str], correct: List[int], qtype: str = "single") -> dict:
    return {
        "text": text,
        "qtype": qtype,
        "options": [{"text": o, "is_correct": i in correct} for i, o in enumerate(options)],
    }


def create_step(client: TestClient, headers: Dict[str, str], course_id: int, title: str,
                questions: Optional[List[dict]] = None, passing_score: float = 70, **fields) -> dict:
    payload = {"title": title, "content": f"{title} notes", "video_url": "https://cdn.test/video.mp4"}
    payload.update(fields)
    if questions is not None:
        payload["quiz"] = {"passing_score": passing_score, "questions": questions}
    return data_of(api_call(client, "POST", f"/courses/{course_id}/steps", headers=headers, json=payload))


def option_ids_by_text(step: dict, question_index: int = 0) -> Dict[str, int]:
    q = step["quiz"]["questions"][question_index]
    return {o["text"]: o["id"] for o in q["options"]}


def enroll(client: TestClient, headers: Dict[str, str], course_id: int) -> dict:
    return data_of(api_call(client, "POST", f"/courses/{course_id}/enroll", headers=headers))


def get_steps(client: TestClient, headers: Dict[str, str], course_id: int) -> dict:
    return data_of(api_call(client, "GET", f"/courses/{course_id}/steps", headers=headers))


def submit(client: TestClient, headers: Dict[str, str], quiz_id: int, answers: Dict[int, List[int]]):
    payload = {"answers": [{"question_id": qid, "selected_options": opts} for qid, opts in answers.items()]}
    return client.post(f"/quizzes/{quiz_id}/attempts", headers=headers, json=payload)
